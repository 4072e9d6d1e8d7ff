"""Exception types shared across the chart pipeline.

Every failure a caller can see derives from ``ChartError`` so the tool layer
can turn any of them into an error result with one ``except`` clause.
"""

from __future__ import annotations

from typing import Optional


class ChartError(RuntimeError):
    """Base class for chart generation failures."""


class ChartConfigError(ChartError):
    """Raised when a required setting is missing or invalid."""

    def __init__(self, message: str, setting: Optional[str] = None) -> None:
        super().__init__(message)
        self.setting = setting


class ImageServerError(ChartError):
    """Raised when the image server cannot bind its listener."""


class PortInUseError(ImageServerError):
    def __init__(self, port: int) -> None:
        super().__init__(
            f"Image server port {port} is already in use. "
            "Set IMAGE_SERVER_PORT to a different port."
        )
        self.port = port


class RenderEngineError(ChartError):
    """Raised when the rendering engine fails on a spec."""


class RemoteServiceError(ChartError):
    """Raised when the remote chart service reports a failure."""


class ToolNotFoundError(ChartError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolArgumentError(ChartError):
    """Raised when tool arguments fail schema validation."""
