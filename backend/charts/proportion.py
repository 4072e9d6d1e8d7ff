"""
Part-of-whole and flow rules: pie, funnel, liquid, word cloud, venn, treemap,
sankey. Each has a single structural shape with no grouping branches.
"""

from __future__ import annotations

from typing import Any, Dict

from core.utils import rows_of, style_of

Spec = Dict[str, Any]
Args = Dict[str, Any]


def pie_spec(args: Args) -> Spec:
    coordinate: Dict[str, Any] = {"type": "theta"}
    if args.get("innerRadius"):
        coordinate["innerRadius"] = args["innerRadius"]
    return {
        "type": "interval",
        "data": rows_of(args.get("data")),
        "encode": {"y": "value", "color": "category"},
        "transform": [{"type": "stackY"}],
        "coordinate": coordinate,
        "legend": {"color": {"position": "right"}},
        "labels": [{"text": "value"}],
    }


def funnel_spec(args: Args) -> Spec:
    return {
        "type": "interval",
        "data": rows_of(args.get("data")),
        "encode": {"x": "category", "y": "value", "color": "category", "shape": "funnel"},
        "transform": [{"type": "symmetryY"}],
        "coordinate": {"transform": [{"type": "transpose"}]},
        "scale": {"x": {"padding": 0}},
        "axis": False,
        "legend": {"color": {"position": "bottom"}},
        "labels": [{"text": "{category} {value}", "position": "inside"}],
    }


def liquid_spec(args: Args) -> Spec:
    style: Dict[str, Any] = {"shape": args.get("shape") or "circle"}
    color = style_of(args).get("color")
    if color:
        style["fill"] = color
    return {"type": "liquid", "data": args.get("percent"), "style": style}


def word_cloud_spec(args: Args) -> Spec:
    return {
        "type": "wordCloud",
        "data": rows_of(args.get("data")),
        "layout": {"spiral": "rectangular"},
        "encode": {"color": "text"},
        "axis": False,
    }


def venn_spec(args: Args) -> Spec:
    return {
        "type": "path",
        "data": {
            "type": "inline",
            "value": rows_of(args.get("data")),
            "transform": [{"type": "venn"}],
        },
        "encode": {"d": "path", "color": "key"},
        "style": {"fillOpacity": 0.6},
        "labels": [{"text": "label", "position": "inside"}],
    }


def treemap_spec(args: Args) -> Spec:
    roots = rows_of(args.get("data"))
    # The tool takes a list of top-level nodes; the layout needs one root.
    tree = roots[0] if len(roots) == 1 else {"name": "root", "children": roots}
    return {
        "type": "treemap",
        "data": {"type": "inline", "value": tree},
        "layout": {"tile": "treemapBinary"},
        "encode": {"value": "value", "color": "name"},
        "style": {"labelText": "name", "labelFill": "#000", "labelFontSize": 12},
    }


def sankey_spec(args: Args) -> Spec:
    return {
        "type": "sankey",
        "data": {"type": "inline", "value": {"links": rows_of(args.get("data"))}},
        "layout": {"nodeAlign": args.get("nodeAlign") or "center", "nodePadding": 0.03},
        "style": {
            "labelSpacing": 3,
            "labelFontWeight": "bold",
            "nodeStrokeWidth": 1.2,
            "linkFillOpacity": 0.4,
        },
    }
