"""
Static image server.

Serves rendered PNGs from the output directory at
``http://<host>:<port>/charts/<filename>``. Started once per process; the
first successful ``ensure_started`` call fixes host and port for good.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import os
import socket
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from core.config import DEFAULT_IMAGE_SERVER_HOST, DEFAULT_IMAGE_SERVER_PORT, validate_port
from core.errors import ImageServerError, PortInUseError
from core.models import ImageServerState
from core.storage import OutputDirectory

logger = logging.getLogger("uvicorn.error")

MOUNT_PATH = "/charts"


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves process signal handling to its host."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def build_image_app(directory: str) -> FastAPI:
    app = FastAPI(title="Chart images", docs_url=None, redoc_url=None, openapi_url=None)
    app.mount(MOUNT_PATH, StaticFiles(directory=directory), name="charts")
    return app


class ImageServer:
    def __init__(self, output_dir: Optional[OutputDirectory] = None) -> None:
        self.output_dir = output_dir or OutputDirectory()
        self.state = ImageServerState()
        self._lock = asyncio.Lock()
        self._server: Optional[_EmbeddedServer] = None
        self._task: Optional[asyncio.Task] = None
        self._socket: Optional[socket.socket] = None

    @property
    def is_running(self) -> bool:
        return self.state.started

    def _bind(self, host: str, port: int) -> socket.socket:
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((host, port))
        except OSError as exc:
            sock.close()
            if exc.errno == errno.EADDRINUSE:
                logger.error("Image server port %s is already in use", port)
                raise PortInUseError(port) from exc
            raise ImageServerError(f"Failed to start image server on {host}:{port}: {exc}") from exc
        sock.set_inheritable(True)
        return sock

    async def ensure_started(self, host: Optional[str] = None, port: Optional[int] = None) -> ImageServerState:
        """Start serving the output directory unless already running.

        Later calls are no-ops even when they pass a different host or port.
        """
        host = host or DEFAULT_IMAGE_SERVER_HOST
        port = DEFAULT_IMAGE_SERVER_PORT if port is None else port
        async with self._lock:
            if self.state.started:
                return self.state

            validate_port(port)
            directory = self.output_dir.resolve()
            sock = self._bind(host, port)

            config = uvicorn.Config(build_image_app(directory), log_level="warning", lifespan="off")
            server = _EmbeddedServer(config)
            task = asyncio.create_task(server.serve(sockets=[sock]))
            while not server.started:
                if task.done():
                    sock.close()
                    exc = task.exception() if not task.cancelled() else None
                    raise ImageServerError(f"Failed to start image server on {host}:{port}: {exc}")
                await asyncio.sleep(0.01)

            self._server, self._task, self._socket = server, task, sock
            self.state = ImageServerState(started=True, host=host, port=port)
            logger.info("Image server listening on http://%s:%s%s (dir=%s)", host, port, MOUNT_PATH, directory)
            return self.state

    def url_prefix(self) -> str:
        if not self.state.started:
            raise ImageServerError("Image server is not running")
        return f"http://{self.state.host}:{self.state.port}{MOUNT_PATH}"

    def url_for(self, path: str) -> str:
        """Public URL for a rendered file; only the basename is used."""
        return f"{self.url_prefix()}/{os.path.basename(path)}"

    async def shutdown(self) -> None:
        async with self._lock:
            if not self.state.started:
                return
            self._server.should_exit = True
            await self._task
            self._socket.close()
            self._server = self._task = self._socket = None
            self.state = ImageServerState()
            logger.info("Image server stopped")
