"""
Tests for the matplotlib engine, the local renderer and the layouts behind
the non-Cartesian marks.
"""

import os
import threading
import time

import numpy as np
import pytest
from matplotlib.figure import Figure

from charts.translate import translate_to_spec
from core.errors import ChartConfigError, RenderEngineError
from core.storage import OutputDirectory, new_artifact_name
from core.utils import PNG_SIGNATURE, is_png
from render import layout
from render.engine import ChartEngine
from render.local import LocalRenderer
from render.marks import MARKS
from sample_charts import SAMPLE_ARGS


@pytest.fixture
def renderer(tmp_path):
    return LocalRenderer(OutputDirectory(str(tmp_path / "images")))


class TestRenderRoundTrip:
    """Buffer and file output carry a PNG signature."""

    def test_buffer_and_file(self, renderer):
        spec = translate_to_spec("line", SAMPLE_ARGS["line"])
        data = renderer.render_to_buffer(spec, 600, 400)
        assert data[:4] == b"\x89PNG"
        assert len(data) > 100

        path = renderer.render_to_file(spec, 600, 400)
        assert os.path.isabs(path)
        with open(path, "rb") as fh:
            on_disk = fh.read()
        assert on_disk[:4] == PNG_SIGNATURE[:4]
        assert len(on_disk) > 100

    @pytest.mark.parametrize("chart_type", sorted(SAMPLE_ARGS))
    def test_every_kind_renders(self, renderer, chart_type):
        spec = translate_to_spec(chart_type, SAMPLE_ARGS[chart_type])
        data = renderer.render_to_buffer(spec)
        assert is_png(data)
        assert len(data) > 100

    def test_styled_chart(self, renderer):
        args = {
            **SAMPLE_ARGS["column"],
            "title": "Sales",
            "style": {"backgroundColor": "#f5f5f5", "palette": ["#123456", "#abcdef"]},
        }
        assert is_png(renderer.render_to_buffer(translate_to_spec("column", args), 320, 240))

    def test_empty_data_renders_blank_chart(self, renderer):
        assert is_png(renderer.render_to_buffer(translate_to_spec("bar", {"data": []})))

    def test_missing_field_is_an_engine_error(self, renderer):
        spec = translate_to_spec("line", {"data": [{"when": "2020", "value": 1}]})
        with pytest.raises(RenderEngineError, match="Failed to render chart locally"):
            renderer.render_to_buffer(spec)

    def test_non_png_image_type_rejected(self):
        with pytest.raises(ValueError):
            ChartEngine().render({"type": "line", "data": [], "imageType": "svg"}, 100, 100)

    def test_all_zero_pie_renders_blank(self, renderer):
        spec = translate_to_spec("pie", {"data": [{"category": "a", "value": 0}, {"category": "b", "value": 0}]})
        assert is_png(renderer.render_to_buffer(spec))

    def test_negative_slices_are_clipped(self, renderer):
        spec = translate_to_spec("pie", {"data": [{"category": "a", "value": -5}, {"category": "b", "value": 10}]})
        assert is_png(renderer.render_to_buffer(spec))


def _paint(chart_type, args):
    spec = translate_to_spec(chart_type, args)
    fig = Figure()
    MARKS[spec["type"]](fig, spec)
    return fig.axes[0]


class TestMixedGroups:
    """Rows without a group still get drawn next to grouped ones."""

    def test_column_keeps_ungrouped_value(self):
        ax = _paint("column", {"data": [
            {"category": "a", "value": 1, "group": "g"},
            {"category": "b", "value": 2},
        ]})
        heights = [p.get_height() for p in ax.patches]
        assert 1.0 in heights and 2.0 in heights

    def test_line_keeps_ungrouped_point(self):
        ax = _paint("line", {"data": [
            {"time": "1", "value": 1, "group": "g"},
            {"time": "2", "value": 2},
        ]})
        ys = np.concatenate([line.get_ydata() for line in ax.get_lines()])
        assert sorted(ys.tolist()) == [1.0, 2.0]


class _FailingEngine:
    def render(self, spec, width, height):
        raise RuntimeError("boom")


class _RecordingEngine:
    def __init__(self):
        self.calls = []

    def render(self, spec, width, height):
        self.calls.append((spec, width, height))
        return PNG_SIGNATURE + b"\x00" * 200


class TestLocalRenderer:
    """Engine loading, error wrapping and output directory handling."""

    def test_engine_errors_are_wrapped(self, tmp_path):
        renderer = LocalRenderer(OutputDirectory(str(tmp_path)), engine_loader=_FailingEngine)
        with pytest.raises(RenderEngineError) as exc_info:
            renderer.render_to_buffer({"type": "line"})
        assert "Failed to render chart locally: boom" in str(exc_info.value)

    def test_engine_loaded_once_and_png_merged(self, tmp_path):
        engine = _RecordingEngine()
        loads = []

        def loader():
            loads.append(1)
            return engine

        renderer = LocalRenderer(OutputDirectory(str(tmp_path)), engine_loader=loader)
        renderer.render_to_buffer({"type": "line"})
        renderer.render_to_buffer({"type": "area"}, 300, 200)
        assert len(loads) == 1
        assert engine.calls[0] == ({"imageType": "png", "type": "line"}, 600, 400)
        assert engine.calls[1][1:] == (300, 200)

    def test_concurrent_first_renders_load_engine_once(self, tmp_path):
        loads = []

        def slow_loader():
            loads.append(1)
            time.sleep(0.05)
            return _RecordingEngine()

        renderer = LocalRenderer(OutputDirectory(str(tmp_path)), engine_loader=slow_loader)
        threads = [threading.Thread(target=renderer.render_to_buffer, args=({"type": "line"},)) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(loads) == 1

    def test_output_directory_created_on_demand(self, tmp_path):
        target = tmp_path / "nested" / "charts"
        renderer = LocalRenderer(OutputDirectory(str(target)), engine_loader=_RecordingEngine)
        path = renderer.render_to_file({"type": "line"})
        assert os.path.dirname(path) == str(target)
        assert os.path.basename(path).startswith("chart-")

    def test_uncreatable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        renderer = LocalRenderer(OutputDirectory(str(blocker / "charts")), engine_loader=_RecordingEngine)
        with pytest.raises(ChartConfigError) as exc_info:
            renderer.render_to_file({"type": "line"})
        assert "CHART_IMAGE_DIR" in str(exc_info.value)
        assert exc_info.value.setting == "CHART_IMAGE_DIR"

    def test_set_path_relocates_renders(self, tmp_path):
        output = OutputDirectory(str(tmp_path / "a"))
        output.set_path(str(tmp_path / "b"))
        assert output.resolve() == str(tmp_path / "b")

    def test_artifact_names(self):
        name = new_artifact_name()
        prefix, millis, suffix = name.split("-")
        assert prefix == "chart"
        assert millis.isdigit()
        assert suffix.endswith(".png") and len(suffix) == len("12345678.png")
        assert new_artifact_name() != name

    @pytest.mark.asyncio
    async def test_async_render(self, renderer):
        spec = translate_to_spec("pie", SAMPLE_ARGS["pie"])
        data = await renderer.render_to_buffer_async(spec, 400, 300)
        assert is_png(data)


class TestLayouts:
    """Pure layout helpers."""

    def test_binary_tiles_cover_unit_square(self):
        tiles = layout.binary_tiles([4, 3, 2, 1])
        total = sum(w * h for _, _, w, h in tiles)
        assert total == pytest.approx(1.0)
        areas = [w * h for _, _, w, h in tiles]
        assert areas == pytest.approx([0.4, 0.3, 0.2, 0.1])

    def test_tree_leaves_track_top_ancestor(self):
        leaves = layout.tree_leaves({"name": "root", "children": SAMPLE_ARGS["treemap"]["data"]})
        assert [(leaf["name"], leaf["top"]) for leaf in leaves] == [
            ("UI", "Design"), ("UX", "Design"), ("Backend", "Engineering"), ("Frontend", "Engineering"),
        ]

    def test_sankey_columns(self):
        nodes, bands = layout.sankey_layout(SAMPLE_ARGS["sankey"]["data"])
        assert nodes["Coal"]["x0"] < nodes["Power"]["x0"] < nodes["Homes"]["x0"]
        assert len(bands) == 4
        assert nodes["Power"]["value"] == 65

    def test_force_layout_bounds(self):
        pos = layout.force_layout(["a", "b", "c"], [{"source": "a", "target": "b"}])
        assert pos.shape == (3, 2)
        assert np.all(pos >= 0.0) and np.all(pos <= 1.0)
        assert np.array_equal(pos, layout.force_layout(["a", "b", "c"], [{"source": "a", "target": "b"}]))

    def test_force_layout_ignores_dangling_links(self):
        links = [{"source": "a", "target": "b"}, {"source": "a", "target": "ghost"}]
        pos = layout.force_layout(["a", "b"], links)
        assert pos.shape == (2, 2)
        assert layout.force_layout(["solo"], []).tolist() == [[0.5, 0.5]]
        assert layout.force_layout([], []).shape == (0, 2)

    def test_word_cloud_no_overlap(self):
        words = [(w["text"], w["value"]) for w in SAMPLE_ARGS["word-cloud"]["data"]]
        placed = layout.word_cloud_layout(words, 600, 400)
        assert placed[0]["text"] == "chart"
        assert placed[0]["size"] > placed[-1]["size"]

    def test_venn_circles_only_for_single_sets(self):
        circles = layout.venn_circles(SAMPLE_ARGS["venn"]["data"])
        assert set(circles) == {"A", "B"}
        assert circles["A"]["r"] > circles["B"]["r"]
