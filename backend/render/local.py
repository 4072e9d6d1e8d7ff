"""
Local renderer: spec -> PNG bytes or PNG file, using the in-process engine.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional, Protocol

from core.errors import RenderEngineError
from core.storage import OutputDirectory
from render.engine import load_engine

logger = logging.getLogger("uvicorn.error")

DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 400

# Rendering is CPU-bound; keep it off the event loop
_executor = ThreadPoolExecutor(max_workers=2)


class Engine(Protocol):
    def render(self, spec: Dict[str, Any], width: int, height: int) -> bytes: ...


class LocalRenderer:
    def __init__(
        self,
        output_dir: Optional[OutputDirectory] = None,
        engine_loader: Optional[Callable[[], Engine]] = None,
    ) -> None:
        self.output_dir = output_dir or OutputDirectory()
        self._engine_loader = engine_loader or load_engine
        self._engine: Optional[Engine] = None
        self._engine_lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        """Loaded on first use, then reused for the renderer's lifetime."""
        if self._engine is None:
            with self._engine_lock:
                if self._engine is None:
                    self._engine = self._engine_loader()
        return self._engine

    def render_to_buffer(
        self,
        spec: Dict[str, Any],
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> bytes:
        engine = self.engine
        try:
            return engine.render({"imageType": "png", **spec}, width, height)
        except Exception as exc:
            logger.warning("Local render failed for mark=%s: %s", spec.get("type"), exc)
            raise RenderEngineError(f"Failed to render chart locally: {exc}") from exc

    def render_to_file(
        self,
        spec: Dict[str, Any],
        width: int = DEFAULT_WIDTH,
        height: int = DEFAULT_HEIGHT,
    ) -> str:
        """Render and write a PNG into the output directory; returns its absolute path."""
        artifact = self.output_dir.new_artifact()
        data = self.render_to_buffer(spec, width, height)
        with open(artifact.path, "wb") as fh:
            fh.write(data)
        logger.info("Rendered chart to %s (%d bytes)", artifact.path, len(data))
        return artifact.path

    async def render_to_buffer_async(self, spec: Dict[str, Any], width: int = DEFAULT_WIDTH,
                                     height: int = DEFAULT_HEIGHT) -> bytes:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(_executor, self.render_to_buffer, spec, width, height)

    async def render_to_file_async(self, spec: Dict[str, Any], width: int = DEFAULT_WIDTH,
                                   height: int = DEFAULT_HEIGHT) -> str:
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(_executor, self.render_to_file, spec, width, height)
