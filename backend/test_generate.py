"""
Tests for the chart generator's local/remote routing and the remote client.
"""

import json

import httpx
import pytest

import server.generate as generate_module
from core.config import Settings
from core.errors import ChartConfigError, RemoteServiceError, RenderEngineError
from core.models import RemoteEnvelope
from core.storage import OutputDirectory
from core.utils import PNG_SIGNATURE
from render.local import LocalRenderer
from sample_charts import REMOTE_ONLY_ARGS, SAMPLE_ARGS
from server.generate import SOURCE, ChartGenerator
from server.image_server import ImageServer
from server.remote import RemoteClient

ENDPOINT = "https://charts.example.com/api/render"


class FakeEngine:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def render(self, spec, width, height):
        self.calls.append((spec, width, height))
        if self.fail:
            raise RuntimeError("engine exploded")
        return PNG_SIGNATURE + b"\x00" * 128


class FakeRemote:
    def __init__(self, envelope=None):
        self.envelope = envelope or RemoteEnvelope(success=True, resultObj="https://cdn.example.com/chart.png")
        self.calls = []

    async def post(self, url, body):
        self.calls.append((url, body))
        return self.envelope


def make_generator(tmp_path, mode="local", endpoint=None, engine=None, remote=None, service_id=None):
    settings = Settings(
        render_mode=mode,
        vis_request_server=endpoint,
        service_id=service_id,
        output_dir=str(tmp_path),
    )
    output_dir = OutputDirectory(settings.output_dir)
    engine = engine or FakeEngine()
    return ChartGenerator(
        settings=settings,
        renderer=LocalRenderer(output_dir, engine_loader=lambda: engine),
        image_server=ImageServer(output_dir),
        remote=remote or FakeRemote(),
    )


class TestLocalPath:
    """Local mode with a locally renderable chart type."""

    @pytest.mark.asyncio
    async def test_data_uri(self, tmp_path):
        engine = FakeEngine()
        remote = FakeRemote()
        gen = make_generator(tmp_path, engine=engine, remote=remote)
        result = await gen.generate_data_uri("line", {**SAMPLE_ARGS["line"], "width": 800, "height": 500})
        assert result.startswith("data:image/png;base64,")
        spec, width, height = engine.calls[0]
        assert spec["type"] == "line" and (width, height) == (800, 500)
        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_default_dimensions(self, tmp_path):
        engine = FakeEngine()
        gen = make_generator(tmp_path, engine=engine)
        await gen.generate_data_uri("pie", SAMPLE_ARGS["pie"])
        assert engine.calls[0][1:] == (600, 400)

    @pytest.mark.asyncio
    async def test_render_failure_is_terminal(self, tmp_path):
        remote = FakeRemote()
        gen = make_generator(tmp_path, endpoint=ENDPOINT, engine=FakeEngine(fail=True), remote=remote)
        with pytest.raises(RenderEngineError, match="engine exploded"):
            await gen.generate_data_uri("bar", SAMPLE_ARGS["bar"])
        assert remote.calls == []

    @pytest.mark.asyncio
    async def test_url_starts_image_server(self, tmp_path, monkeypatch):
        gen = make_generator(tmp_path)
        started = []

        async def fake_start(host, port):
            started.append((host, port))
            gen.image_server.state = gen.image_server.state.model_copy(
                update={"started": True, "host": host, "port": port}
            )
            return gen.image_server.state

        monkeypatch.setattr(gen.image_server, "ensure_started", fake_start)
        url = await gen.generate_url("column", SAMPLE_ARGS["column"])
        assert started == [("localhost", 18900)]
        assert url.startswith("http://localhost:18900/charts/chart-")
        filename = url.rsplit("/", 1)[1]
        assert (tmp_path / filename).exists()


class TestRemoteFallback:
    """Routing to the remote service."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("chart_type", ["district-map", "path-map", "pin-map"])
    async def test_map_types_never_translate_locally(self, tmp_path, monkeypatch, chart_type):
        def forbidden(*args, **kwargs):
            raise AssertionError("translator must not be called for map types")

        monkeypatch.setattr(generate_module, "translate_to_spec", forbidden)
        gen = make_generator(tmp_path)
        with pytest.raises(ChartConfigError) as exc_info:
            await gen.generate_data_uri(chart_type, REMOTE_ONLY_ARGS[chart_type])
        assert exc_info.value.setting == "VIS_REQUEST_SERVER"
        assert "VIS_REQUEST_SERVER" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unsupported_type_falls_back(self, tmp_path):
        engine = FakeEngine()
        remote = FakeRemote()
        gen = make_generator(tmp_path, endpoint=ENDPOINT, engine=engine, remote=remote)
        result = await gen.generate_data_uri("spreadsheet", REMOTE_ONLY_ARGS["spreadsheet"])
        assert result == "https://cdn.example.com/chart.png"
        assert engine.calls == []
        url, body = remote.calls[0]
        assert url == ENDPOINT
        assert body == {"type": "spreadsheet", **REMOTE_ONLY_ARGS["spreadsheet"], "source": SOURCE}

    @pytest.mark.asyncio
    async def test_remote_mode_skips_local(self, tmp_path):
        engine = FakeEngine()
        remote = FakeRemote()
        gen = make_generator(tmp_path, mode="remote", endpoint=ENDPOINT, engine=engine, remote=remote)
        await gen.generate_url("line", SAMPLE_ARGS["line"])
        assert engine.calls == []
        assert remote.calls[0][1]["type"] == "line"
        assert remote.calls[0][1]["source"] == "mcp-server-chart"

    @pytest.mark.asyncio
    async def test_failure_message_is_verbatim(self, tmp_path):
        remote = FakeRemote(RemoteEnvelope(success=False, errorMessage="quota exceeded: try later"))
        gen = make_generator(tmp_path, mode="remote", endpoint=ENDPOINT, remote=remote)
        with pytest.raises(RemoteServiceError) as exc_info:
            await gen.generate_data_uri("line", SAMPLE_ARGS["line"])
        assert str(exc_info.value) == "quota exceeded: try later"
        assert len(remote.calls) == 1

    @pytest.mark.asyncio
    async def test_generate_map_body(self, tmp_path):
        result_obj = {"content": [{"type": "text", "text": "https://cdn.example.com/map.png"}]}
        remote = FakeRemote(RemoteEnvelope(success=True, resultObj=result_obj))
        gen = make_generator(tmp_path, endpoint=ENDPOINT, remote=remote, service_id="svc-42")
        result = await gen.generate_map("generate_pin_map", REMOTE_ONLY_ARGS["pin-map"])
        assert result == result_obj
        assert remote.calls[0][1] == {
            "serviceId": "svc-42",
            "tool": "generate_pin_map",
            "input": REMOTE_ONLY_ARGS["pin-map"],
            "source": SOURCE,
        }

    @pytest.mark.asyncio
    async def test_generate_map_needs_endpoint(self, tmp_path):
        gen = make_generator(tmp_path)
        with pytest.raises(ChartConfigError, match="Geographic map generation"):
            await gen.generate_map("generate_pin_map", {})


class TestRemoteClient:
    """httpx client over a mock transport."""

    @pytest.mark.asyncio
    async def test_posts_json_and_parses_envelope(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"success": True, "resultObj": "https://x/y.png"})

        client = RemoteClient(transport=httpx.MockTransport(handler))
        envelope = await client.post(ENDPOINT, {"type": "line", "source": SOURCE})
        assert seen == {"method": "POST", "body": {"type": "line", "source": SOURCE}}
        assert envelope.success and envelope.resultObj == "https://x/y.png"

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = RemoteClient(transport=httpx.MockTransport(lambda r: httpx.Response(502)))
        with pytest.raises(RemoteServiceError, match="HTTP 502"):
            await client.post(ENDPOINT, {})

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = RemoteClient(transport=httpx.MockTransport(handler))
        with pytest.raises(RemoteServiceError, match="connection refused"):
            await client.post(ENDPOINT, {})

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        client = RemoteClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>")))
        with pytest.raises(RemoteServiceError, match="invalid JSON"):
            await client.post(ENDPOINT, {})
