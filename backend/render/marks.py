"""
Mark painters: one function per G2 geometry the translator emits.

Painters draw onto a matplotlib ``Figure`` and never touch pyplot state, so
renders on different threads don't interfere. Grouping and pivoting of rows
goes through pandas.
"""

from __future__ import annotations

import itertools
import math
from typing import Any, Callable, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from matplotlib.figure import Figure
from matplotlib.patches import Circle, PathPatch, Polygon, Rectangle
from matplotlib.path import Path

from render import layout

Spec = Dict[str, Any]

DEFAULT_PALETTE = [
    "#1783FF", "#00C9C9", "#F0884D", "#D580FF", "#7863FF",
    "#60C42D", "#BD8F24", "#FF80CA", "#2491B3", "#17C76F",
]


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _rows(spec: Spec) -> List[Dict[str, Any]]:
    data = spec.get("data")
    if isinstance(data, dict):
        data = data.get("value")
    return data if isinstance(data, list) else []


def _frame(spec: Spec) -> pd.DataFrame:
    return pd.DataFrame(_rows(spec))


def _column(frame: pd.DataFrame, field: str) -> pd.Series:
    if frame.empty:
        return pd.Series(dtype=object)
    return frame[field]


def _numeric(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series, errors="coerce")


def _ordered_unique(values: Sequence[Any]) -> List[Any]:
    return list(dict.fromkeys(values))


def _transforms(spec: Spec) -> List[str]:
    return [t.get("type") for t in spec.get("transform") or [] if isinstance(t, dict)]


def _is_transposed(spec: Spec) -> bool:
    coord = spec.get("coordinate") or {}
    return any(t.get("type") == "transpose" for t in coord.get("transform") or [])


def color_lookup(spec: Spec, keys: Sequence[Any]) -> Dict[Any, str]:
    """Assign a color to each key from the spec's color scale."""
    scale = (spec.get("scale") or {}).get("color") or {}
    palette = list(scale.get("range") or DEFAULT_PALETTE)
    fixed = dict(zip(scale.get("domain") or [], palette))
    cycle = itertools.cycle(palette)
    return {k: fixed[k] if k in fixed else next(cycle) for k in keys}


def _fmt(value: Any) -> str:
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


class _Row(dict):
    def __missing__(self, key: str) -> str:
        return ""


def label_text(template: str, row: Dict[str, Any]) -> str:
    """Either a field name or a ``{field}`` template."""
    if "{" in template:
        return template.format_map(_Row({k: _fmt(v) for k, v in row.items()}))
    return _fmt(row.get(template, ""))


def _new_axes(fig: Figure, spec: Spec, polar: bool = False):
    ax = fig.add_subplot(111, projection="polar" if polar else None)
    ax.set_facecolor(fig.get_facecolor())
    return ax


def _decorate(ax, spec: Spec, legend: bool) -> None:
    axis = spec.get("axis")
    if axis is False:
        ax.set_axis_off()
    elif isinstance(axis, dict):
        transposed = _is_transposed(spec)
        x_title = (axis.get("x") or {}).get("title")
        y_title = (axis.get("y") or {}).get("title")
        set_x, set_y = (ax.set_ylabel, ax.set_xlabel) if transposed else (ax.set_xlabel, ax.set_ylabel)
        if x_title:
            set_x(str(x_title))
        if y_title:
            set_y(str(y_title))

    y_scale = (spec.get("scale") or {}).get("y") or {}
    if y_scale.get("domainMin") is not None:
        ax.set_ylim(bottom=y_scale["domainMin"])

    if legend and ax.get_legend_handles_labels()[0]:
        position = ((spec.get("legend") or {}).get("color") or {}).get("position")
        if position == "right":
            ax.legend(loc="center left", bbox_to_anchor=(1.0, 0.5), frameon=False)
        elif position == "bottom":
            ax.legend(loc="upper center", bbox_to_anchor=(0.5, -0.02), ncol=4, frameon=False)
        else:
            ax.legend(frameon=False)


def _positions(values: pd.Series):
    """Numeric x stays numeric; anything else becomes ordered categories."""
    numeric = _numeric(values)
    if len(values) and numeric.notna().all() and not all(isinstance(v, str) for v in values):
        return numeric.to_numpy(dtype=float), None
    categories = _ordered_unique(values.astype(str))
    index = {c: i for i, c in enumerate(categories)}
    return np.array([index[v] for v in values.astype(str)], dtype=float), categories


def _ungrouped_as_blank(frame: pd.DataFrame, color: Optional[str]) -> pd.DataFrame:
    """Rows without a color key form their own "" series instead of vanishing."""
    if color and color in frame.columns:
        return frame.assign(**{color: frame[color].fillna("")})
    return frame


def _series_groups(frame: pd.DataFrame, color: Optional[str]):
    if color and not frame.empty and color in frame.columns:
        for key in _ordered_unique(frame[color]):
            yield key, frame[frame[color] == key]
    else:
        yield None, frame


# ---------------------------------------------------------------------------
# line / area / point
# ---------------------------------------------------------------------------

def _draw_series(ax, spec: Spec, kind: str, frame: pd.DataFrame, encode: Dict[str, Any],
                 style: Dict[str, Any], closed: bool = False, angles=None) -> None:
    x_field, y_field, color = encode.get("x"), encode.get("y"), encode.get("color")
    if frame.empty:
        return
    if angles is not None:
        names = frame[x_field].astype(str)
        index = {c: i for i, c in enumerate(_ordered_unique(names))}
        xs_all, categories = angles[[index[n] for n in names]], None
    else:
        xs_all, categories = _positions(_column(frame, x_field))
    if categories is not None:
        ax.set_xticks(range(len(categories)))
        ax.set_xticklabels(categories)
    frame = frame.assign(__x__=xs_all, __y__=_numeric(_column(frame, y_field)))
    frame = _ungrouped_as_blank(frame, color)

    groups = list(_series_groups(frame, color))
    colors = color_lookup(spec, [k for k, _ in groups])
    line_width = style.get("lineWidth", 2)
    alpha = style.get("fillOpacity", 0.5)

    if kind == "area" and "stackY" in _transforms(spec) and color:
        table = frame.pivot_table(index="__x__", columns=color, values="__y__", aggfunc="sum", sort=False)
        table = table.fillna(0).sort_index()
        ax.stackplot(table.index.to_numpy(), table.T.to_numpy(),
                     labels=[str(c) for c in table.columns],
                     colors=[colors.get(c, DEFAULT_PALETTE[0]) for c in table.columns], alpha=alpha)
        return

    for key, group in groups:
        group = group.sort_values("__x__") if angles is None else group
        xs = group["__x__"].to_numpy(dtype=float)
        ys = group["__y__"].to_numpy(dtype=float)
        if closed and len(xs):
            xs, ys = np.append(xs, xs[0]), np.append(ys, ys[0])
        label = None if key is None else str(key)
        c = colors[key]
        if kind == "line":
            ax.plot(xs, ys, color=c, linewidth=line_width, label=label)
        elif kind == "area":
            base = 0 if angles is not None else min(0.0, float(np.nanmin(ys)) if len(ys) else 0.0)
            ax.fill_between(xs, ys, base, color=c, alpha=alpha, label=label, linewidth=0)
            ax.plot(xs, ys, color=c, linewidth=line_width)
        else:
            ax.scatter(xs, ys, color=c, s=style.get("size", 24), label=label, zorder=3)


def paint_line(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    _draw_series(ax, spec, "line", _frame(spec), spec.get("encode") or {}, spec.get("style") or {})
    _decorate(ax, spec, legend=True)


def paint_area(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    _draw_series(ax, spec, "area", _frame(spec), spec.get("encode") or {}, spec.get("style") or {})
    _decorate(ax, spec, legend=True)


def paint_point(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    _draw_series(ax, spec, "point", _frame(spec), spec.get("encode") or {}, spec.get("style") or {})
    _decorate(ax, spec, legend=True)


# ---------------------------------------------------------------------------
# interval: bars, pie, funnel, floating (waterfall) bars
# ---------------------------------------------------------------------------

def _paint_pie(fig: Figure, spec: Spec, frame: pd.DataFrame) -> None:
    ax = _new_axes(fig, spec)
    ax.set_aspect("equal")
    ax.set_axis_off()
    if frame.empty:
        return
    encode = spec.get("encode") or {}
    names = _column(frame, encode.get("color")).astype(str).tolist()
    values = _numeric(_column(frame, encode.get("y"))).fillna(0).clip(lower=0).tolist()
    colors = color_lookup(spec, names)
    if sum(values) <= 0:
        # nothing to apportion: keep the legend, skip the wedges
        handles = [Rectangle((0, 0), 1, 1, color=colors[n]) for n in names]
        ax.legend(handles, names, loc="center left", bbox_to_anchor=(1.0, 0.5), frameon=False)
        return
    inner = (spec.get("coordinate") or {}).get("innerRadius")
    labels = spec.get("labels") or []
    texts = [label_text(labels[0]["text"], row) for row in frame.to_dict("records")] if labels else None
    wedges, _ = ax.pie(
        values,
        labels=texts,
        colors=[colors[n] for n in names],
        startangle=90,
        counterclock=False,
        wedgeprops={"width": 1 - float(inner)} if inner else None,
    )
    ax.legend(wedges, names, loc="center left", bbox_to_anchor=(1.0, 0.5), frameon=False)


def _paint_funnel(fig: Figure, spec: Spec, frame: pd.DataFrame) -> None:
    ax = _new_axes(fig, spec)
    ax.set_axis_off()
    if frame.empty:
        return
    encode = spec.get("encode") or {}
    names = _column(frame, encode.get("x")).astype(str).tolist()
    values = _numeric(_column(frame, encode.get("y"))).fillna(0).to_numpy(dtype=float)
    colors = color_lookup(spec, names)
    rows = frame.to_dict("records")
    labels = spec.get("labels") or []
    for i, (name, value) in enumerate(zip(names, values)):
        ax.barh(i, value, left=-value / 2, height=1.0, color=colors[name], label=name)
        if labels:
            ax.text(0, i, label_text(labels[0]["text"], rows[i]), ha="center", va="center", fontsize=9)
    ax.set_ylim(len(names) - 0.5, -0.5)
    _decorate(ax, spec, legend=True)


def _paint_floating(fig: Figure, spec: Spec, frame: pd.DataFrame) -> None:
    ax = _new_axes(fig, spec)
    encode = spec.get("encode") or {}
    lo_field, hi_field = encode["y"]
    if not frame.empty:
        names = _column(frame, encode.get("x")).astype(str).tolist()
        lo = _numeric(_column(frame, lo_field)).fillna(0).to_numpy(dtype=float)
        hi = _numeric(_column(frame, hi_field)).fillna(0).to_numpy(dtype=float)
        kinds = _column(frame, encode.get("color")).tolist() if encode.get("color") else [None] * len(names)
        colors = color_lookup(spec, _ordered_unique(kinds))
        xs = np.arange(len(names))
        ax.bar(xs, hi - lo, bottom=lo, color=[colors[k] for k in kinds], width=0.6)
        labels = spec.get("labels") or []
        if labels:
            for x, top, row in zip(xs, np.maximum(lo, hi), frame.to_dict("records")):
                ax.annotate(label_text(labels[0]["text"], row), (x, top),
                            textcoords="offset points", xytext=(0, 3), ha="center", fontsize=8)
        ax.set_xticks(xs)
        ax.set_xticklabels(names)
    _decorate(ax, spec, legend=False)


def _paint_bars(fig: Figure, spec: Spec, frame: pd.DataFrame) -> None:
    ax = _new_axes(fig, spec)
    encode = spec.get("encode") or {}
    x_field, y_field, color = encode.get("x"), encode.get("y"), encode.get("color")
    transposed = _is_transposed(spec)
    draw = ax.barh if transposed else ax.bar

    if not frame.empty:
        frame = frame.assign(__x__=_column(frame, x_field).astype(str),
                             __y__=_numeric(_column(frame, y_field)).fillna(0))
        frame = _ungrouped_as_blank(frame, color)
        categories = _ordered_unique(frame["__x__"])
        xs = np.arange(len(categories))
        if color and color in frame.columns:
            table = frame.pivot_table(index="__x__", columns=color, values="__y__",
                                      aggfunc="sum", sort=False).reindex(categories).fillna(0)
            groups = list(table.columns)
            colors = color_lookup(spec, groups)
            transforms = _transforms(spec)
            width = 0.8 / len(groups) if "dodgeX" in transforms else 0.6
            base = np.zeros(len(categories))
            for i, group in enumerate(groups):
                vals = table[group].to_numpy(dtype=float)
                if "stackY" in transforms:
                    draw(xs, vals, width, base, color=colors[group], label=str(group))
                    base = base + vals
                elif "dodgeX" in transforms:
                    offset = (i - (len(groups) - 1) / 2) * width
                    draw(xs + offset, vals, width, color=colors[group], label=str(group))
                else:
                    draw(xs, vals, width, color=colors[group], label=str(group), alpha=0.7)
        else:
            values = frame.groupby("__x__", sort=False)["__y__"].sum().reindex(categories)
            draw(xs, values.to_numpy(dtype=float), 0.6, color=color_lookup(spec, [None])[None])
        if transposed:
            ax.set_yticks(xs)
            ax.set_yticklabels(categories)
            ax.invert_yaxis()
        else:
            ax.set_xticks(xs)
            ax.set_xticklabels(categories)
    _decorate(ax, spec, legend=True)


def paint_interval(fig: Figure, spec: Spec) -> None:
    frame = _frame(spec)
    encode = spec.get("encode") or {}
    if (spec.get("coordinate") or {}).get("type") == "theta":
        _paint_pie(fig, spec, frame)
    elif isinstance(encode.get("y"), (list, tuple)):
        _paint_floating(fig, spec, frame)
    elif "symmetryY" in _transforms(spec):
        _paint_funnel(fig, spec, frame)
    else:
        _paint_bars(fig, spec, frame)


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------

def paint_rect(fig: Figure, spec: Spec) -> None:
    """Histogram: rect geometry over a binX transform."""
    ax = _new_axes(fig, spec)
    field = (spec.get("encode") or {}).get("x")
    values = _numeric(_column(_frame(spec), field)).dropna().to_numpy(dtype=float)
    bins: Any = "auto"
    for t in spec.get("transform") or []:
        if t.get("type") == "binX" and t.get("thresholds"):
            bins = int(t["thresholds"])
    if len(values):
        ax.hist(values, bins=bins, color=color_lookup(spec, [None])[None], edgecolor="white")
    _decorate(ax, spec, legend=False)


def paint_boxplot(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    frame = _frame(spec)
    encode = spec.get("encode") or {}
    x_field, y_field, color = encode.get("x"), encode.get("y"), encode.get("color")
    violin = encode.get("shape") == "violin"
    opacity = (spec.get("style") or {}).get("opacity", 0.8)

    if not frame.empty:
        frame = frame.assign(__x__=_column(frame, x_field).astype(str),
                             __y__=_numeric(_column(frame, y_field)))
        categories = _ordered_unique(frame["__x__"])
        split = color if color and color != x_field and color in frame.columns else None
        groups = _ordered_unique(frame[split]) if split else [None]
        colors = color_lookup(spec, groups if split else categories)
        width = 0.7 / len(groups)

        for gi, group in enumerate(groups):
            subset = frame if group is None else frame[frame[split] == group]
            datasets, positions, fills = [], [], []
            for ci, cat in enumerate(categories):
                vals = subset.loc[subset["__x__"] == cat, "__y__"].dropna().to_numpy(dtype=float)
                if not len(vals):
                    continue
                datasets.append(vals)
                positions.append(ci + (gi - (len(groups) - 1) / 2) * width)
                fills.append(colors[group] if split else colors[cat])
            if not datasets:
                continue
            if violin:
                # a KDE needs at least two distinct values
                spread = [np.ptp(d) > 0 for d in datasets]
                for d, x, fill, ok in zip(datasets, positions, fills, spread):
                    if not ok:
                        ax.hlines(d[0], x - width * 0.3, x + width * 0.3, color=fill, linewidth=2)
                kde = [i for i, ok in enumerate(spread) if ok]
                if kde:
                    parts = ax.violinplot([datasets[i] for i in kde], positions=[positions[i] for i in kde],
                                          widths=width * 0.9, showmedians=True)
                    for body, i in zip(parts["bodies"], kde):
                        body.set_facecolor(fills[i])
                        body.set_alpha(opacity)
            else:
                parts = ax.boxplot(datasets, positions=positions, widths=width * 0.8, patch_artist=True)
                for box, fill in zip(parts["boxes"], fills):
                    box.set_facecolor(fill)
                    box.set_alpha(opacity)
            if split:
                ax.plot([], [], color=colors[group], linewidth=8, label=str(group))

        ax.set_xticks(range(len(categories)))
        ax.set_xticklabels(categories)
    _decorate(ax, spec, legend=True)


# ---------------------------------------------------------------------------
# Proportion & text
# ---------------------------------------------------------------------------

def _liquid_shape(shape: str):
    if shape == "rect":
        return Rectangle((0.1, 0.1), 0.8, 0.8)
    if shape == "diamond":
        return Polygon([(0.5, 0.05), (0.95, 0.5), (0.5, 0.95), (0.05, 0.5)])
    if shape == "triangle":
        return Polygon([(0.5, 0.95), (0.95, 0.1), (0.05, 0.1)])
    return Circle((0.5, 0.5), 0.45)


def paint_liquid(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    ax.set_aspect("equal")
    ax.set_axis_off()
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    percent = float(spec.get("data") or 0)
    style = spec.get("style") or {}
    fill = style.get("fill") or color_lookup(spec, [None])[None]

    outline = _liquid_shape(style.get("shape", "circle"))
    outline.set_fill(False)
    outline.set_edgecolor(fill)
    outline.set_linewidth(3)
    ax.add_patch(outline)

    clip = _liquid_shape(style.get("shape", "circle"))
    clip.set_visible(False)
    ax.add_patch(clip)
    level = 0.05 + 0.9 * min(max(percent, 0.0), 1.0)
    water = Rectangle((0, 0), 1, level, color=fill, alpha=0.65)
    ax.add_patch(water)
    water.set_clip_path(clip)
    ax.text(0.5, 0.5, f"{percent * 100:.2f}%", ha="center", va="center", fontsize=22, fontweight="bold")


def paint_word_cloud(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    ax.set_axis_off()
    width, height = fig.get_size_inches() * fig.dpi
    rows = _rows(spec)
    words = [(str(r.get("text", "")), float(r.get("value") or 0)) for r in rows if r.get("text")]
    placed = layout.word_cloud_layout(words, width, height * 0.9)
    colors = color_lookup(spec, [w["text"] for w in placed])
    ax.set_xlim(0, width)
    ax.set_ylim(0, height * 0.9)
    for word in placed:
        ax.text(word["x"], word["y"], word["text"], ha="center", va="center",
                fontsize=word["size"] * 72 / fig.dpi, color=colors[word["text"]])


def paint_path(fig: Figure, spec: Spec) -> None:
    """Venn diagram: path geometry over a venn data transform."""
    ax = _new_axes(fig, spec)
    ax.set_aspect("equal")
    ax.set_axis_off()
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    rows = _rows(spec)
    circles = layout.venn_circles(rows)
    colors = color_lookup(spec, list(circles))
    alpha = (spec.get("style") or {}).get("fillOpacity", 0.6)
    for name, c in circles.items():
        ax.add_patch(Circle((c["x"], c["y"]), c["r"], color=colors[name], alpha=alpha, label=name))
    for row in rows:
        sets = [str(s) for s in row.get("sets") or [] if str(s) in circles]
        if not sets:
            continue
        x = sum(circles[s]["x"] for s in sets) / len(sets)
        y = sum(circles[s]["y"] for s in sets) / len(sets)
        text = row.get("label") or ("" if len(sets) > 1 else sets[0])
        if len(sets) > 1 and row.get("value") is not None:
            text = f"{text}\n{_fmt(row['value'])}".strip()
        ax.text(x, y, text, ha="center", va="center", fontsize=9)


# ---------------------------------------------------------------------------
# Hierarchy & flow
# ---------------------------------------------------------------------------

def paint_treemap(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    ax.set_axis_off()
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    tree = (spec.get("data") or {}).get("value")
    leaves = layout.tree_leaves(tree) if isinstance(tree, dict) else []
    leaves = [leaf for leaf in leaves if leaf["value"] > 0]
    tiles = layout.binary_tiles([leaf["value"] for leaf in leaves])
    colors = color_lookup(spec, _ordered_unique([leaf["top"] for leaf in leaves]))
    style = spec.get("style") or {}
    for leaf, (x, y, w, h) in zip(leaves, tiles):
        ax.add_patch(Rectangle((x, y), w, h, facecolor=colors[leaf["top"]], edgecolor="white", linewidth=1.5))
        if w > 0.04 and h > 0.03:
            ax.text(x + w / 2, y + h / 2, str(leaf.get(style.get("labelText", "name"), "")),
                    ha="center", va="center", color=style.get("labelFill", "#000"),
                    fontsize=style.get("labelFontSize", 12) * 0.8, clip_on=True)


def paint_sankey(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    ax.set_axis_off()
    ax.set_xlim(-0.02, 1.12)
    ax.set_ylim(0, 1)
    value = (spec.get("data") or {}).get("value") or {}
    layout_opts = spec.get("layout") or {}
    style = spec.get("style") or {}
    nodes, bands = layout.sankey_layout(
        value.get("links") or [],
        align=layout_opts.get("nodeAlign", "center"),
        node_padding=layout_opts.get("nodePadding", 0.03),
    )
    colors = color_lookup(spec, list(nodes))
    for band in bands:
        x0, x1 = band["x0"], band["x1"]
        mx = (x0 + x1) / 2
        (s0, s1), (t0, t1) = band["sy"], band["ty"]
        verts = [(x0, s1), (mx, s1), (mx, t1), (x1, t1), (x1, t0), (mx, t0), (mx, s0), (x0, s0), (x0, s1)]
        codes = [Path.MOVETO, Path.CURVE4, Path.CURVE4, Path.CURVE4,
                 Path.LINETO, Path.CURVE4, Path.CURVE4, Path.CURVE4, Path.CLOSEPOLY]
        ax.add_patch(PathPatch(Path(verts, codes), facecolor=colors[band["source"]],
                               alpha=style.get("linkFillOpacity", 0.4), linewidth=0))
    for name, n in nodes.items():
        ax.add_patch(Rectangle((n["x0"], n["y0"]), n["x1"] - n["x0"], n["y1"] - n["y0"],
                               facecolor=colors[name], edgecolor="#333",
                               linewidth=style.get("nodeStrokeWidth", 1.2)))
        ax.text(n["x1"] + 0.005, (n["y0"] + n["y1"]) / 2, name, va="center", fontsize=8,
                fontweight=style.get("labelFontWeight", "normal"))


def paint_force_graph(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    ax.set_axis_off()
    ax.set_xlim(0, 1)
    ax.set_ylim(0, 1)
    value = (spec.get("data") or {}).get("value") or {}
    ids = _ordered_unique([n["id"] for n in value.get("nodes") or [] if n.get("id") is not None])
    links = value.get("links") or []
    pos = layout.force_layout(ids, links)
    index = {nid: i for i, nid in enumerate(ids)}
    for link in links:
        a, b = index.get(link.get("source")), index.get(link.get("target"))
        if a is None or b is None:
            continue
        ax.plot([pos[a, 0], pos[b, 0]], [pos[a, 1], pos[b, 1]], color="#99A3B3", linewidth=1, zorder=1)
    if len(ids):
        ax.scatter(pos[:, 0], pos[:, 1], s=260, color=color_lookup(spec, [None])[None],
                   edgecolors="white", zorder=2)
    for nid, (x, y) in zip(ids, pos):
        ax.text(x, y - 0.045, str(nid), ha="center", va="top", fontsize=8, zorder=3)


# ---------------------------------------------------------------------------
# Composite views
# ---------------------------------------------------------------------------

def _paint_polar_view(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec, polar=True)
    frame = _frame(spec)
    children = spec.get("children") or []
    x_field = ((children[0].get("encode") or {}).get("x") if children else None) or "name"
    names = _ordered_unique(_column(frame, x_field).astype(str)) if not frame.empty else []
    angles = np.linspace(0, 2 * math.pi, max(len(names), 1), endpoint=False)
    for child in children:
        merged = {**spec, **child, "scale": spec.get("scale")}
        _draw_series(ax, merged, child.get("type", "line"), frame, child.get("encode") or {},
                     child.get("style") or {}, closed=child.get("type") != "point", angles=angles)
    ax.set_xticks(angles[: len(names)])
    ax.set_xticklabels(names)
    ax.set_theta_offset(math.pi / 2)
    ax.set_theta_direction(-1)
    if ax.get_legend_handles_labels()[0]:
        handles, labels = ax.get_legend_handles_labels()
        unique = dict(zip(labels, handles))
        ax.legend(unique.values(), unique.keys(), loc="upper right", bbox_to_anchor=(1.25, 1.1), frameon=False)


def _paint_layered_view(fig: Figure, spec: Spec) -> None:
    ax = _new_axes(fig, spec)
    frame = _frame(spec)
    children = spec.get("children") or []
    if frame.empty or not children:
        _decorate(ax, spec, legend=False)
        return

    x_field = (children[0].get("encode") or {}).get("x", "category")
    categories = _column(frame, x_field).astype(str).tolist()
    xs = np.arange(len(categories))
    colors = color_lookup(spec, list(range(len(children))))
    bar_children = [i for i, c in enumerate(children) if c.get("type") == "interval"]
    width = 0.7 / max(len(bar_children), 1)
    handles = []

    for idx, child in enumerate(children):
        target = ax if idx == 0 else ax.twinx()
        y_field = (child.get("encode") or {}).get("y")
        values = _numeric(_column(frame, y_field)).to_numpy(dtype=float)
        y_axis = (child.get("axis") or {}).get("y") or {}
        label = y_axis.get("title") or y_field
        if child.get("type") == "interval":
            offset = (bar_children.index(idx) - (len(bar_children) - 1) / 2) * width
            handles.append(target.bar(xs + offset, values, width, color=colors[idx], label=label))
        else:
            lw = (child.get("style") or {}).get("lineWidth", 2)
            handles.extend(target.plot(xs, values, color=colors[idx], linewidth=lw, marker="o", label=label))
        if y_axis.get("title"):
            target.set_ylabel(str(y_axis["title"]))
        if y_axis.get("position") == "right" and idx > 0:
            target.yaxis.set_label_position("right")
            # keep extra right axes from drawing on top of each other
            if idx > 1:
                target.spines["right"].set_position(("axes", 1.0 + 0.12 * (idx - 1)))

    ax.set_xticks(xs)
    ax.set_xticklabels(categories)
    x_title = ((spec.get("axis") or {}).get("x") or {}).get("title")
    if x_title:
        ax.set_xlabel(str(x_title))
    ax.legend(handles=handles, frameon=False, loc="upper left")


def paint_view(fig: Figure, spec: Spec) -> None:
    if (spec.get("coordinate") or {}).get("type") == "polar":
        _paint_polar_view(fig, spec)
    else:
        _paint_layered_view(fig, spec)


MARKS: Dict[str, Callable[[Figure, Spec], None]] = {
    "line": paint_line,
    "area": paint_area,
    "point": paint_point,
    "interval": paint_interval,
    "rect": paint_rect,
    "boxplot": paint_boxplot,
    "liquid": paint_liquid,
    "wordCloud": paint_word_cloud,
    "path": paint_path,
    "treemap": paint_treemap,
    "sankey": paint_sankey,
    "forceGraph": paint_force_graph,
    "view": paint_view,
}
