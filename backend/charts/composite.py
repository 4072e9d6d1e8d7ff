"""
Multi-layer rules: radar (overlaid area/line/point in polar coordinates) and
dual axes (one child per series on independent y scales).
"""

from __future__ import annotations

from typing import Any, Dict, List

from core.utils import has_group, rows_of, style_of

Spec = Dict[str, Any]
Args = Dict[str, Any]


def radar_spec(args: Args) -> Spec:
    data = rows_of(args.get("data"))
    width = style_of(args).get("lineWidth")
    line_style = {"lineWidth": width} if width else {}

    if has_group(data):
        encode = {"x": "name", "y": "value", "color": "group"}
        children: List[Spec] = [
            {"type": "area", "encode": dict(encode), "style": {"fillOpacity": 0.3}},
            {"type": "line", "encode": dict(encode), "style": line_style},
            {"type": "point", "encode": dict(encode)},
        ]
    else:
        encode = {"x": "name", "y": "value"}
        children = [
            {"type": "area", "encode": dict(encode), "style": {"fillOpacity": 0.5, **line_style}},
            {"type": "line", "encode": dict(encode)},
        ]

    return {
        "type": "view",
        "data": data,
        "coordinate": {"type": "polar"},
        "scale": {"x": {"padding": 0.5, "align": 0}},
        "axis": {"y": {"title": False}},
        "children": children,
    }


def series_field(index: int) -> str:
    return f"series_{index}"


def dual_axes_rows(categories: List[Any], series: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Turn ``categories`` x ``series[i].data`` columns into one row per category."""
    rows = []
    for i, category in enumerate(categories):
        row: Dict[str, Any] = {"category": category}
        for j, s in enumerate(series):
            values = s.get("data") or []
            row[series_field(j)] = values[i] if i < len(values) else None
        rows.append(row)
    return rows


def dual_axes_spec(args: Args) -> Spec:
    categories = args.get("categories")
    categories = list(categories) if isinstance(categories, (list, tuple)) else []
    series = rows_of(args.get("series"))

    children = []
    for idx, s in enumerate(series):
        child: Spec = {
            "type": "interval" if s.get("type") == "column" else "line",
            "encode": {"x": "category", "y": series_field(idx)},
            "scale": {"y": {"independent": True}},
            "axis": {
                "y": {
                    "title": s.get("axisYTitle") or "",
                    "position": "left" if idx == 0 else "right",
                },
            },
        }
        if s.get("type") == "line":
            child["style"] = {"lineWidth": 2}
        children.append(child)

    spec: Spec = {
        "type": "view",
        "data": dual_axes_rows(categories, series),
        "children": children,
    }
    if args.get("axisXTitle"):
        spec["axis"] = {"x": {"title": args["axisXTitle"]}}
    return spec
