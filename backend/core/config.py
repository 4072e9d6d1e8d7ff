"""Environment-driven settings.

Everything the pipeline reads from the environment goes through
``load_settings`` so the rest of the code receives one immutable object.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from core.errors import ChartConfigError

load_dotenv()

DEFAULT_IMAGE_SERVER_HOST = "localhost"
DEFAULT_IMAGE_SERVER_PORT = 18900
DEFAULT_OUTPUT_DIR = os.path.join(tempfile.gettempdir(), "mcp-chart-images")

RENDER_MODES = ("local", "remote")


def _env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is None:
        return default
    return value.strip() or default


def get_vis_request_server() -> Optional[str]:
    """Remote rendering endpoint, or None when rendering stays local."""
    return _env("VIS_REQUEST_SERVER")


def get_service_identifier() -> Optional[str]:
    return _env("SERVICE_ID")


def get_disabled_tools() -> List[str]:
    """Parse DISABLED_TOOLS as a comma-separated list of tool names.

    Names are kept exactly as written and in order.
    """
    disabled = os.getenv("DISABLED_TOOLS")
    if not disabled or disabled == "undefined":
        return []
    return disabled.split(",")


def get_render_mode() -> str:
    mode = (_env("RENDER_MODE") or "").lower()
    if not mode:
        return "remote" if get_vis_request_server() else "local"
    if mode not in RENDER_MODES:
        raise ChartConfigError(
            f"Unsupported RENDER_MODE '{mode}'. Expected 'local' or 'remote'.",
            setting="RENDER_MODE",
        )
    return mode


def get_chart_image_dir() -> Optional[str]:
    return _env("CHART_IMAGE_DIR")


def validate_port(port: int, setting: str = "IMAGE_SERVER_PORT") -> int:
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ChartConfigError(
            f"Invalid {setting} '{port}': expected an integer between 1 and 65535.",
            setting=setting,
        )
    return port


def get_image_server_port() -> int:
    raw = _env("IMAGE_SERVER_PORT")
    if raw is None:
        return DEFAULT_IMAGE_SERVER_PORT
    try:
        port = int(raw)
    except ValueError:
        raise ChartConfigError(
            f"Invalid IMAGE_SERVER_PORT '{raw}': expected an integer between 1 and 65535.",
            setting="IMAGE_SERVER_PORT",
        ) from None
    return validate_port(port)


def get_image_server_host() -> str:
    return _env("IMAGE_SERVER_HOST", DEFAULT_IMAGE_SERVER_HOST) or DEFAULT_IMAGE_SERVER_HOST


@dataclass(frozen=True)
class Settings:
    render_mode: str = "local"
    vis_request_server: Optional[str] = None
    service_id: Optional[str] = None
    output_dir: str = DEFAULT_OUTPUT_DIR
    image_server_host: str = DEFAULT_IMAGE_SERVER_HOST
    image_server_port: int = DEFAULT_IMAGE_SERVER_PORT
    disabled_tools: List[str] = field(default_factory=list)

    @property
    def is_local(self) -> bool:
        return self.render_mode == "local"


def load_settings() -> Settings:
    """Read the environment once and return a frozen Settings."""
    return Settings(
        render_mode=get_render_mode(),
        vis_request_server=get_vis_request_server(),
        service_id=get_service_identifier(),
        output_dir=get_chart_image_dir() or DEFAULT_OUTPUT_DIR,
        image_server_host=get_image_server_host(),
        image_server_port=get_image_server_port(),
        disabled_tools=get_disabled_tools(),
    )
