"""
Rendered image storage.

Owns the output directory that file-mode renders land in and the naming of
each artifact. Files are never removed here; callers that need bounded disk
usage must delete what they no longer serve.
"""

from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Optional

from core.config import DEFAULT_OUTPUT_DIR
from core.errors import ChartConfigError
from core.models import RenderedArtifact

logger = logging.getLogger("uvicorn.error")

ARTIFACT_PREFIX = "chart-"
ARTIFACT_SUFFIX = ".png"


def new_artifact_name() -> str:
    """``chart-<epoch millis>-<8 hex chars>.png``."""
    millis = int(time.time() * 1000)
    return f"{ARTIFACT_PREFIX}{millis}-{uuid.uuid4().hex[:8]}{ARTIFACT_SUFFIX}"


class OutputDirectory:
    """Process-wide output directory, created lazily on first use."""

    def __init__(self, path: Optional[str] = None) -> None:
        self._path = os.path.abspath(path or DEFAULT_OUTPUT_DIR)

    @property
    def configured_path(self) -> str:
        return self._path

    def set_path(self, path: str) -> None:
        """Relocate future renders. Meant to be called during start-up."""
        self._path = os.path.abspath(path)

    def resolve(self) -> str:
        """Return the directory, creating it if needed."""
        try:
            os.makedirs(self._path, exist_ok=True)
        except OSError as exc:
            logger.error("Failed to create chart image directory: %s", self._path)
            raise ChartConfigError(
                f"Cannot create chart image directory '{self._path}' "
                f"(check CHART_IMAGE_DIR): {exc}",
                setting="CHART_IMAGE_DIR",
            ) from exc
        return self._path

    def new_artifact(self) -> RenderedArtifact:
        directory = self.resolve()
        filename = new_artifact_name()
        return RenderedArtifact(path=os.path.join(directory, filename), filename=filename)
