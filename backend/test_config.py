"""
Tests for environment-driven settings.
"""

import os

import pytest

from core.config import (
    DEFAULT_IMAGE_SERVER_PORT,
    DEFAULT_OUTPUT_DIR,
    get_disabled_tools,
    get_image_server_port,
    get_render_mode,
    load_settings,
    validate_port,
)
from core.errors import ChartConfigError

ENV_KEYS = [
    "RENDER_MODE",
    "VIS_REQUEST_SERVER",
    "SERVICE_ID",
    "CHART_IMAGE_DIR",
    "IMAGE_SERVER_HOST",
    "IMAGE_SERVER_PORT",
    "DISABLED_TOOLS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


class TestDisabledTools:
    """DISABLED_TOOLS parsing."""

    @pytest.mark.parametrize("raw", [None, "", "undefined"])
    def test_empty_values(self, monkeypatch, raw):
        if raw is not None:
            monkeypatch.setenv("DISABLED_TOOLS", raw)
        assert get_disabled_tools() == []

    def test_two_names_in_order(self, monkeypatch):
        monkeypatch.setenv("DISABLED_TOOLS", "generate_pie_chart,generate_line_chart")
        assert get_disabled_tools() == ["generate_pie_chart", "generate_line_chart"]

    def test_names_are_not_trimmed(self, monkeypatch):
        monkeypatch.setenv("DISABLED_TOOLS", "a, b")
        assert get_disabled_tools() == ["a", " b"]


class TestRenderMode:
    """RENDER_MODE / VIS_REQUEST_SERVER resolution."""

    def test_defaults_to_local(self):
        assert get_render_mode() == "local"

    def test_endpoint_implies_remote(self, monkeypatch):
        monkeypatch.setenv("VIS_REQUEST_SERVER", "https://charts.example.com/api")
        assert get_render_mode() == "remote"

    def test_explicit_mode_wins(self, monkeypatch):
        monkeypatch.setenv("VIS_REQUEST_SERVER", "https://charts.example.com/api")
        monkeypatch.setenv("RENDER_MODE", "LOCAL")
        assert get_render_mode() == "local"

    def test_invalid_mode(self, monkeypatch):
        monkeypatch.setenv("RENDER_MODE", "cloud")
        with pytest.raises(ChartConfigError) as exc_info:
            get_render_mode()
        assert exc_info.value.setting == "RENDER_MODE"


class TestImageServerPort:
    """Port parsing and range checks."""

    def test_default(self):
        assert get_image_server_port() == DEFAULT_IMAGE_SERVER_PORT == 18900

    def test_override(self, monkeypatch):
        monkeypatch.setenv("IMAGE_SERVER_PORT", "19001")
        assert get_image_server_port() == 19001

    @pytest.mark.parametrize("raw", ["0", "65536", "-1", "abc", "80.5"])
    def test_invalid(self, monkeypatch, raw):
        monkeypatch.setenv("IMAGE_SERVER_PORT", raw)
        with pytest.raises(ChartConfigError, match="IMAGE_SERVER_PORT"):
            get_image_server_port()

    @pytest.mark.parametrize("port", [1, 8080, 65535])
    def test_validate_port_accepts_range(self, port):
        assert validate_port(port) == port

    @pytest.mark.parametrize("port", [0, 70000, True, "8080", None])
    def test_validate_port_rejects(self, port):
        with pytest.raises(ChartConfigError):
            validate_port(port)


class TestSettings:
    """load_settings snapshot."""

    def test_defaults(self):
        settings = load_settings()
        assert settings.is_local
        assert settings.output_dir == DEFAULT_OUTPUT_DIR
        assert settings.image_server_host == "localhost"
        assert settings.disabled_tools == []
        assert settings.vis_request_server is None

    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("VIS_REQUEST_SERVER", "https://charts.example.com/api")
        monkeypatch.setenv("SERVICE_ID", "svc-1")
        monkeypatch.setenv("CHART_IMAGE_DIR", str(tmp_path))
        monkeypatch.setenv("IMAGE_SERVER_HOST", "127.0.0.1")
        settings = load_settings()
        assert not settings.is_local
        assert settings.service_id == "svc-1"
        assert settings.output_dir == str(tmp_path)
        assert settings.image_server_host == "127.0.0.1"

    def test_default_output_dir_is_under_tmp(self):
        assert os.path.basename(DEFAULT_OUTPUT_DIR) == "mcp-chart-images"
