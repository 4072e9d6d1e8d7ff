"""
HTTP client for the remote chart rendering service.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from core.errors import RemoteServiceError
from core.models import RemoteEnvelope

logger = logging.getLogger("uvicorn.error")

DEFAULT_TIMEOUT = 30.0


class RemoteClient:
    """POSTs JSON bodies and parses the ``{success, errorMessage, resultObj}`` envelope."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.timeout = timeout
        self.transport = transport

    async def post(self, url: str, body: Dict[str, Any]) -> RemoteEnvelope:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=body)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.warning("Remote chart service returned HTTP %s", exc.response.status_code)
            raise RemoteServiceError(
                f"Remote chart service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Remote chart service request failed: %s", exc)
            raise RemoteServiceError(f"Remote chart service request failed: {exc}") from exc
        except ValueError as exc:
            raise RemoteServiceError("Remote chart service returned invalid JSON") from exc

        if not isinstance(payload, dict):
            raise RemoteServiceError("Remote chart service returned an unexpected payload")
        return RemoteEnvelope.model_validate(payload)
