"""
Tests for the static image server: idempotent start, serving, port handling.
"""

import asyncio
import socket

import httpx
import pytest
import pytest_asyncio

from core.errors import ChartConfigError, ImageServerError, PortInUseError
from core.storage import OutputDirectory
from core.utils import PNG_SIGNATURE
from server.image_server import ImageServer

HOST = "127.0.0.1"


def free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((HOST, 0))
        return sock.getsockname()[1]


@pytest.fixture
def output_dir(tmp_path):
    return OutputDirectory(str(tmp_path / "charts"))


@pytest_asyncio.fixture
async def image_server(output_dir):
    server = ImageServer(output_dir)
    yield server
    await server.shutdown()


class TestStartup:
    """Singleton start-up semantics."""

    @pytest.mark.asyncio
    async def test_second_start_is_a_no_op(self, image_server):
        port = free_port()
        first = await image_server.ensure_started(HOST, port)
        second = await image_server.ensure_started(HOST, port)
        assert first == second
        assert second.started and second.port == port
        assert image_server.is_running

    @pytest.mark.asyncio
    async def test_first_caller_wins(self, image_server):
        port = free_port()
        await image_server.ensure_started(HOST, port)
        state = await image_server.ensure_started(HOST, free_port())
        assert state.port == port

    @pytest.mark.asyncio
    async def test_concurrent_first_calls_bind_once(self, image_server):
        port = free_port()
        states = await asyncio.gather(*(image_server.ensure_started(HOST, port) for _ in range(5)))
        assert all(s.started and s.port == port for s in states)

    @pytest.mark.asyncio
    async def test_port_in_use(self, image_server):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind((HOST, 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]
            with pytest.raises(PortInUseError) as exc_info:
                await image_server.ensure_started(HOST, port)
        assert exc_info.value.port == port
        assert str(port) in str(exc_info.value)
        assert not image_server.is_running

    @pytest.mark.asyncio
    @pytest.mark.parametrize("port", [0, 65536, -5])
    async def test_invalid_port(self, image_server, port):
        with pytest.raises(ChartConfigError, match="IMAGE_SERVER_PORT"):
            await image_server.ensure_started(HOST, port)
        assert not image_server.is_running

    @pytest.mark.asyncio
    async def test_restart_after_shutdown(self, image_server):
        await image_server.ensure_started(HOST, free_port())
        await image_server.shutdown()
        assert not image_server.is_running
        port = free_port()
        state = await image_server.ensure_started(HOST, port)
        assert state.port == port


class TestServing:
    """Files under the output directory are served at /charts."""

    @pytest.mark.asyncio
    async def test_serves_file_and_404s_missing(self, image_server, output_dir):
        await image_server.ensure_started(HOST, free_port())
        artifact = output_dir.new_artifact()
        payload = PNG_SIGNATURE + b"\x00" * 64
        with open(artifact.path, "wb") as fh:
            fh.write(payload)

        url = image_server.url_for(artifact.path)
        async with httpx.AsyncClient(trust_env=False) as client:
            found = await client.get(url)
            missing = await client.get(url.replace(artifact.filename, "chart-0-deadbeef.png"))
        assert found.status_code == 200
        assert found.content == payload
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_url_composition(self, image_server):
        port = free_port()
        await image_server.ensure_started(HOST, port)
        assert image_server.url_for("/any/dir/chart-1-abcdef12.png") == (
            f"http://{HOST}:{port}/charts/chart-1-abcdef12.png"
        )
        assert image_server.url_prefix() == f"http://{HOST}:{port}/charts"

    def test_url_needs_running_server(self, output_dir):
        with pytest.raises(ImageServerError):
            ImageServer(output_dir).url_for("chart.png")
