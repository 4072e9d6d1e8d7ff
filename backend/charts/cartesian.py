"""
Cartesian chart rules: time series, categorical bars, distributions, waterfall.

Each rule maps tool arguments to a G2-style spec. Styling shared by every
chart kind (title, palette, axis titles) is applied later by the dispatcher.
"""

from __future__ import annotations

from typing import Any, Dict, List

from core.utils import has_group, rows_of, style_of, to_number

Spec = Dict[str, Any]
Args = Dict[str, Any]

WATERFALL_POSITIVE = "#FF4D4F"
WATERFALL_NEGATIVE = "#2EBB59"
WATERFALL_TOTAL = "#1783FF"


def _series_encode(x: str, y: str, grouped: bool) -> Dict[str, Any]:
    encode: Dict[str, Any] = {"x": x, "y": y}
    if grouped:
        encode["color"] = "group"
    return encode


def _line_width(args: Args) -> Dict[str, Any]:
    width = style_of(args).get("lineWidth")
    return {"lineWidth": width} if width else {}


def _start_at_zero(spec: Spec, args: Args) -> None:
    if style_of(args).get("startAtZero"):
        spec["scale"] = {"y": {"domainMin": 0}}


# ---------------------------------------------------------------------------
# Time series
# ---------------------------------------------------------------------------

def line_spec(args: Args) -> Spec:
    data = rows_of(args.get("data"))
    spec: Spec = {
        "type": "line",
        "data": data,
        "encode": _series_encode("time", "value", has_group(data)),
        "style": _line_width(args),
    }
    _start_at_zero(spec, args)
    return spec


def area_spec(args: Args) -> Spec:
    data = rows_of(args.get("data"))
    grouped = has_group(data)
    spec: Spec = {
        "type": "area",
        "data": data,
        "encode": _series_encode("time", "value", grouped),
        "style": {"fillOpacity": 0.5, **_line_width(args)},
    }
    if args.get("stack") and grouped:
        spec["transform"] = [{"type": "stackY"}]
    return spec


# ---------------------------------------------------------------------------
# Categorical bars
# ---------------------------------------------------------------------------

def bar_spec(args: Args) -> Spec:
    """Horizontal bars. Grouped data stacks unless ``group`` asks for dodging."""
    data = rows_of(args.get("data"))
    grouped = has_group(data)
    spec: Spec = {
        "type": "interval",
        "data": data,
        "encode": _series_encode("category", "value", grouped),
        "coordinate": {"transform": [{"type": "transpose"}]},
    }
    if grouped:
        if args.get("group"):
            spec["transform"] = [{"type": "dodgeX"}]
        elif args.get("stack") is not False:
            spec["transform"] = [{"type": "stackY"}]
    return spec


def column_spec(args: Args) -> Spec:
    """Vertical bars. Grouped data dodges unless ``stack`` asks for stacking."""
    data = rows_of(args.get("data"))
    grouped = has_group(data)
    spec: Spec = {
        "type": "interval",
        "data": data,
        "encode": _series_encode("category", "value", grouped),
    }
    if grouped:
        if args.get("stack"):
            spec["transform"] = [{"type": "stackY"}]
        elif args.get("group") is not False:
            spec["transform"] = [{"type": "dodgeX"}]
    return spec


def scatter_spec(args: Args) -> Spec:
    data = rows_of(args.get("data"))
    return {
        "type": "point",
        "data": data,
        "encode": _series_encode("x", "y", has_group(data)),
    }


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------

def histogram_spec(args: Args) -> Spec:
    raw = args.get("data")
    values = raw if isinstance(raw, (list, tuple)) else []
    data = [{"value": v} for v in values if not isinstance(v, (dict, list))]
    bin_x: Dict[str, Any] = {"type": "binX", "y": "count"}
    if args.get("binNumber"):
        bin_x["thresholds"] = args["binNumber"]
    return {
        "type": "rect",
        "data": data,
        "encode": {"x": "value"},
        "transform": [bin_x],
    }


def _box_spec(args: Args, violin: bool) -> Spec:
    data = rows_of(args.get("data"))
    encode: Dict[str, Any] = {"x": "category", "y": "value"}
    if violin:
        encode["shape"] = "violin"
    # Without an explicit group each category gets its own color.
    encode["color"] = "group" if has_group(data) else "category"
    spec: Spec = {"type": "boxplot", "data": data, "encode": encode}
    if violin:
        spec["style"] = {"opacity": 0.5, "strokeOpacity": 0.5, "point": False}
    _start_at_zero(spec, args)
    return spec


def boxplot_spec(args: Args) -> Spec:
    return _box_spec(args, violin=False)


def violin_spec(args: Args) -> Spec:
    return _box_spec(args, violin=True)


# ---------------------------------------------------------------------------
# Waterfall
# ---------------------------------------------------------------------------

def waterfall_rows(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Fold delta rows into floating bars, keeping a running total.

    Rows flagged ``isTotal`` or ``isIntermediateTotal`` become a bar from zero
    to the running total instead of contributing a delta.
    """
    rows: List[Dict[str, Any]] = []
    cumulative = 0.0
    for item in items:
        category = item.get("category")
        if item.get("isTotal") or item.get("isIntermediateTotal"):
            rows.append({
                "category": category,
                "start": 0,
                "end": cumulative,
                "value": cumulative,
                "type": "total",
            })
            continue
        value = to_number(item.get("value"))
        start = cumulative
        cumulative += value
        rows.append({
            "category": category,
            "start": start,
            "end": cumulative,
            "value": value,
            "type": "positive" if value >= 0 else "negative",
        })
    return rows


def waterfall_spec(args: Args) -> Spec:
    palette = style_of(args).get("palette")
    colors = palette if isinstance(palette, dict) else {}
    return {
        "type": "interval",
        "data": waterfall_rows(rows_of(args.get("data"))),
        "encode": {"x": "category", "y": ["start", "end"], "color": "type"},
        "scale": {
            "color": {
                "domain": ["positive", "negative", "total"],
                "range": [
                    colors.get("positiveColor") or WATERFALL_POSITIVE,
                    colors.get("negativeColor") or WATERFALL_NEGATIVE,
                    colors.get("totalColor") or WATERFALL_TOTAL,
                ],
            },
        },
        "labels": [{"text": "value"}],
    }
