"""
Spec translator.

Maps a tool's chart type + loosely typed arguments to a G2-style declarative
spec the render engine understands. Translation is pure: the same
(chart_type, args) always yields the same spec and nothing outside the
returned dict is touched.

Chart types without a rule (geographic maps, spreadsheets, anything unknown)
yield ``None`` so callers can hand them to the remote service instead.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional

from charts import cartesian, composite, graph, proportion
from core.utils import fill_missing, style_of

logger = logging.getLogger("uvicorn.error")

Spec = Dict[str, Any]
Args = Dict[str, Any]
Rule = Callable[[Args], Spec]


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------

TRANSLATORS: Dict[str, Rule] = {
    "line": cartesian.line_spec,
    "area": cartesian.area_spec,
    "bar": cartesian.bar_spec,
    "column": cartesian.column_spec,
    "scatter": cartesian.scatter_spec,
    "histogram": cartesian.histogram_spec,
    "boxplot": cartesian.boxplot_spec,
    "violin": cartesian.violin_spec,
    "waterfall": cartesian.waterfall_spec,
    "pie": proportion.pie_spec,
    "funnel": proportion.funnel_spec,
    "liquid": proportion.liquid_spec,
    "word-cloud": proportion.word_cloud_spec,
    "venn": proportion.venn_spec,
    "treemap": proportion.treemap_spec,
    "sankey": proportion.sankey_spec,
    "radar": composite.radar_spec,
    "dual-axes": composite.dual_axes_spec,
    "network-graph": graph.network_graph_spec,
    "flow-diagram": graph.flow_diagram_spec,
    "mind-map": graph.tree_spec,
    "organization-chart": graph.tree_spec,
    "fishbone-diagram": graph.tree_spec,
}

# Kinds whose x/y axes may carry titles from axisXTitle / axisYTitle.
AXIS_TITLE_TYPES = frozenset({
    "line",
    "area",
    "bar",
    "column",
    "scatter",
    "histogram",
    "boxplot",
    "violin",
    "waterfall",
})


def supported_chart_types() -> list[str]:
    return sorted(TRANSLATORS)


# ---------------------------------------------------------------------------
# Shared post-processing
# ---------------------------------------------------------------------------

def apply_common_style(spec: Spec, args: Args) -> None:
    """Title, palette and background. Never replaces what a rule already set."""
    if args.get("title"):
        fill_missing(spec, "title", {"title": args["title"]})

    style = style_of(args)
    palette = style.get("palette")
    if isinstance(palette, (list, tuple)) and palette:
        fill_missing(spec, "scale", {"color": {"range": list(palette)}})
    if style.get("backgroundColor"):
        fill_missing(spec, "viewStyle", {"viewFill": style["backgroundColor"]})


def apply_axis_titles(spec: Spec, args: Args) -> None:
    if spec.get("axis") is False:
        return
    titles: Dict[str, Any] = {}
    if args.get("axisXTitle"):
        titles["x"] = {"title": args["axisXTitle"]}
    if args.get("axisYTitle"):
        titles["y"] = {"title": args["axisYTitle"]}
    if titles:
        fill_missing(spec, "axis", titles)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def translate_to_spec(chart_type: str, args: Optional[Args]) -> Optional[Spec]:
    """
    Translate a chart type + tool arguments into a declarative spec.

    Returns None when the chart type has no local rule. Never raises:
    malformed arguments produce an empty-but-valid spec, which then fails
    (or renders empty) in the engine rather than here.
    """
    rule = TRANSLATORS.get(chart_type)
    if rule is None:
        return None

    args = args if isinstance(args, dict) else {}
    try:
        spec = rule(args)
        apply_common_style(spec, args)
        if chart_type in AXIS_TITLE_TYPES:
            apply_axis_titles(spec, args)
    except Exception:
        logger.warning("Spec translation failed for chart=%s", chart_type, exc_info=True)
        return None
    return spec
