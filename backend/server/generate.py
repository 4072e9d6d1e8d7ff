"""
Chart generator — decides between local rendering and the remote service.

Flow per request:

    local mode + non-map type ──► translate ──► render ──► data URI / URL
                                      │
                                 no rule (None)
                                      ▼
    remote mode / map type ─────► POST VIS_REQUEST_SERVER ──► resultObj

A local render failure is final; it never falls through to the remote
service. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from charts.translate import translate_to_spec
from core.config import Settings
from core.errors import ChartConfigError, RemoteServiceError
from core.models import is_local_rendering_supported
from core.utils import to_data_uri
from render.local import DEFAULT_HEIGHT, DEFAULT_WIDTH, LocalRenderer
from server.image_server import ImageServer
from server.remote import RemoteClient

logger = logging.getLogger("uvicorn.error")

SOURCE = "mcp-server-chart"


def _size(args: Dict[str, Any], key: str, default: int) -> int:
    value = args.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return int(value)


class ChartGenerator:
    def __init__(
        self,
        settings: Settings,
        renderer: LocalRenderer,
        image_server: ImageServer,
        remote: Optional[RemoteClient] = None,
    ) -> None:
        self.settings = settings
        self.renderer = renderer
        self.image_server = image_server
        self.remote = remote or RemoteClient()

    def _local_spec(self, chart_type: str, args: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Translated spec when this request should render locally, else None."""
        if not self.settings.is_local or not is_local_rendering_supported(chart_type):
            return None
        spec = translate_to_spec(chart_type, args)
        if spec is None:
            logger.info("No local rule for chart=%s, using remote service", chart_type)
        return spec

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def generate_data_uri(self, chart_type: str, args: Dict[str, Any]) -> Any:
        """Rendered chart as a ``data:image/png;base64,...`` URI."""
        spec = self._local_spec(chart_type, args)
        if spec is None:
            return await self.generate_remote(chart_type, args)
        data = await self.renderer.render_to_buffer_async(
            spec, _size(args, "width", DEFAULT_WIDTH), _size(args, "height", DEFAULT_HEIGHT)
        )
        return to_data_uri(data)

    async def generate_url(self, chart_type: str, args: Dict[str, Any]) -> Any:
        """Rendered chart written to disk and served by the image server."""
        spec = self._local_spec(chart_type, args)
        if spec is None:
            return await self.generate_remote(chart_type, args)
        path = await self.renderer.render_to_file_async(
            spec, _size(args, "width", DEFAULT_WIDTH), _size(args, "height", DEFAULT_HEIGHT)
        )
        await self.image_server.ensure_started(self.settings.image_server_host, self.settings.image_server_port)
        return self.image_server.url_for(path)

    # ------------------------------------------------------------------
    # Remote service
    # ------------------------------------------------------------------

    def _endpoint(self, purpose: str = "Remote chart rendering") -> str:
        if not self.settings.vis_request_server:
            raise ChartConfigError(
                f"{purpose} requires VIS_REQUEST_SERVER to be set.",
                setting="VIS_REQUEST_SERVER",
            )
        return self.settings.vis_request_server

    async def _post(self, endpoint: str, body: Dict[str, Any]) -> Any:
        envelope = await self.remote.post(endpoint, body)
        if not envelope.success:
            raise RemoteServiceError(envelope.errorMessage or "")
        return envelope.resultObj

    async def generate_remote(self, chart_type: str, args: Dict[str, Any]) -> Any:
        logger.info("Requesting chart=%s from remote service", chart_type)
        return await self._post(self._endpoint(), {"type": chart_type, **args, "source": SOURCE})

    async def generate_map(self, tool: str, input: Dict[str, Any]) -> Any:
        """Geographic maps are always rendered remotely."""
        logger.info("Requesting map tool=%s from remote service", tool)
        return await self._post(self._endpoint("Geographic map generation"), {
            "serviceId": self.settings.service_id,
            "tool": tool,
            "input": input,
            "source": SOURCE,
        })
