"""
Layout algorithms for the non-Cartesian geometries.

Pure numeric helpers (no matplotlib): every function takes plain data and
returns coordinates in a unit square unless stated otherwise, so they can be
tested without drawing anything.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

import networkx as nx
import numpy as np

Rect = Tuple[float, float, float, float]  # x, y, width, height


# ---------------------------------------------------------------------------
# Treemap (binary tiling)
# ---------------------------------------------------------------------------

def tree_leaves(node: Dict[str, Any], top: Optional[str] = None) -> List[Dict[str, Any]]:
    """Leaf nodes with their value and the name of their top-level ancestor."""
    children = [c for c in node.get("children") or [] if isinstance(c, dict)]
    if not children:
        value = node.get("value")
        try:
            value = float(value)
        except (TypeError, ValueError):
            value = 0.0
        return [{"name": node.get("name"), "value": max(value, 0.0), "top": top or node.get("name")}]
    leaves: List[Dict[str, Any]] = []
    for child in children:
        leaves.extend(tree_leaves(child, top or child.get("name")))
    return leaves


def binary_tiles(values: Sequence[float], rect: Rect = (0.0, 0.0, 1.0, 1.0)) -> List[Rect]:
    """Split *rect* recursively so each value gets area proportional to it.

    Items are divided into two runs of roughly equal total, cut along the
    longer side, like d3's treemapBinary.
    """
    out: List[Rect] = [(0.0, 0.0, 0.0, 0.0)] * len(values)

    def split(lo: int, hi: int, x: float, y: float, w: float, h: float) -> None:
        if hi - lo == 1:
            out[lo] = (x, y, w, h)
            return
        total = sum(values[lo:hi])
        if total <= 0:
            for i in range(lo, hi):
                out[i] = (x, y, 0.0, 0.0)
            return
        half, acc, mid = total / 2, 0.0, lo + 1
        for i in range(lo, hi - 1):
            acc += values[i]
            mid = i + 1
            if acc >= half:
                break
        left = sum(values[lo:mid]) / total
        if w >= h:
            split(lo, mid, x, y, w * left, h)
            split(mid, hi, x + w * left, y, w * (1 - left), h)
        else:
            split(lo, mid, x, y + h * (1 - left), w, h * left)
            split(mid, hi, x, y, w, h * (1 - left))

    if values:
        split(0, len(values), *rect)
    return out


# ---------------------------------------------------------------------------
# Sankey
# ---------------------------------------------------------------------------

def _node_depths(names: List[str], links: List[Dict[str, Any]]) -> Dict[str, int]:
    depth = {n: 0 for n in names}
    # Longest-path relaxation; capped at len(names) rounds so cycles terminate.
    for _ in range(len(names)):
        changed = False
        for link in links:
            d = depth[link["source"]] + 1
            if d > depth[link["target"]] and d < len(names):
                depth[link["target"]] = d
                changed = True
        if not changed:
            break
    return depth


def _node_heights(names: List[str], links: List[Dict[str, Any]]) -> Dict[str, int]:
    reverse = [{"source": link["target"], "target": link["source"]} for link in links]
    return _node_depths(names, reverse)


def sankey_layout(
    links: List[Dict[str, Any]],
    align: str = "center",
    node_width: float = 0.02,
    node_padding: float = 0.03,
) -> Tuple[Dict[str, Dict[str, float]], List[Dict[str, Any]]]:
    """Place nodes in columns and compute link bands in a unit square.

    Returns ``(nodes, bands)``; nodes map name -> {x0, x1, y0, y1, value},
    bands carry source/target y spans for drawing.
    """
    clean = []
    for link in links:
        try:
            value = float(link.get("value", 0))
        except (TypeError, ValueError):
            value = 0.0
        if link.get("source") is None or link.get("target") is None:
            continue
        clean.append({"source": str(link["source"]), "target": str(link["target"]), "value": max(value, 0.0)})

    names: List[str] = []
    for link in clean:
        for key in ("source", "target"):
            if link[key] not in names:
                names.append(link[key])
    if not names:
        return {}, []

    depth = _node_depths(names, clean)
    height = _node_heights(names, clean)
    max_depth = max(depth.values())
    has_in = {link["target"] for link in clean}
    has_out = {link["source"] for link in clean}

    layer: Dict[str, int] = {}
    for n in names:
        if align == "left":
            layer[n] = depth[n]
        elif align == "right":
            layer[n] = max_depth - height[n]
        elif align == "justify":
            layer[n] = depth[n] if n in has_out else max_depth
        else:
            # center: sources sit just before their nearest target
            if n not in has_in and n in has_out:
                targets = [depth[link["target"]] for link in clean if link["source"] == n]
                layer[n] = max(min(targets) - 1, 0)
            else:
                layer[n] = depth[n]

    value_in = {n: 0.0 for n in names}
    value_out = {n: 0.0 for n in names}
    for link in clean:
        value_out[link["source"]] += link["value"]
        value_in[link["target"]] += link["value"]
    node_value = {n: max(value_in[n], value_out[n]) for n in names}

    columns: Dict[int, List[str]] = {}
    for n in names:
        columns.setdefault(layer[n], []).append(n)
    n_layers = max(columns) + 1

    scale = math.inf
    for col in columns.values():
        total = sum(node_value[n] for n in col)
        room = 1.0 - node_padding * (len(col) - 1)
        if total > 0:
            scale = min(scale, room / total)
    if not math.isfinite(scale):
        scale = 0.0

    nodes: Dict[str, Dict[str, float]] = {}
    for idx, col in columns.items():
        x0 = 0.0 if n_layers == 1 else idx / (n_layers - 1) * (1 - node_width)
        used = sum(node_value[n] for n in col) * scale + node_padding * (len(col) - 1)
        y = 1.0 - (1.0 - used) / 2
        for n in col:
            h = node_value[n] * scale
            nodes[n] = {"x0": x0, "x1": x0 + node_width, "y0": y - h, "y1": y, "value": node_value[n]}
            y -= h + node_padding

    out_offset = {n: nodes[n]["y1"] for n in names}
    in_offset = {n: nodes[n]["y1"] for n in names}
    bands = []
    for link in clean:
        h = link["value"] * scale
        s, t = link["source"], link["target"]
        bands.append({
            "source": s,
            "target": t,
            "value": link["value"],
            "x0": nodes[s]["x1"],
            "x1": nodes[t]["x0"],
            "sy": (out_offset[s] - h, out_offset[s]),
            "ty": (in_offset[t] - h, in_offset[t]),
        })
        out_offset[s] -= h
        in_offset[t] -= h
    return nodes, bands


# ---------------------------------------------------------------------------
# Force-directed graph
# ---------------------------------------------------------------------------

def force_layout(
    node_ids: List[Any],
    links: List[Dict[str, Any]],
    iterations: int = 120,
    seed: int = 42,
) -> np.ndarray:
    """Spring-embedder positions in [0, 1]^2, one row per node id.

    Links naming unknown nodes are ignored. The fixed seed keeps the layout
    identical across renders of the same graph.
    """
    n = len(node_ids)
    if n == 0:
        return np.zeros((0, 2))
    if n == 1:
        return np.array([[0.5, 0.5]])

    G = nx.Graph()
    G.add_nodes_from(node_ids)
    G.add_edges_from(
        (link["source"], link["target"])
        for link in links
        if link.get("source") in G and link.get("target") in G
    )
    placed = nx.spring_layout(G, iterations=iterations, seed=seed)
    pos = np.array([placed[nid] for nid in node_ids], dtype=float)

    lo = pos.min(axis=0)
    span = np.maximum(pos.max(axis=0) - lo, 1e-9)
    return 0.08 + 0.84 * (pos - lo) / span


# ---------------------------------------------------------------------------
# Word cloud
# ---------------------------------------------------------------------------

def word_cloud_layout(
    words: List[Tuple[str, float]],
    width: float,
    height: float,
    min_size: float = 10.0,
    max_size: float = 48.0,
) -> List[Dict[str, Any]]:
    """Place words along a rectangular spiral from the centre, biggest first.

    Sizes are in pixels; a word whose box cannot be placed without overlap
    inside the canvas is dropped.
    """
    if not words:
        return []
    ordered = sorted(words, key=lambda w: w[1], reverse=True)
    lo = min(v for _, v in ordered)
    hi = max(v for _, v in ordered)
    placed: List[Dict[str, Any]] = []
    boxes: List[Tuple[float, float, float, float]] = []

    def overlaps(box: Tuple[float, float, float, float]) -> bool:
        x0, y0, x1, y1 = box
        if x0 < 0 or y0 < 0 or x1 > width or y1 > height:
            return True
        return any(x0 < b[2] and b[0] < x1 and y0 < b[3] and b[1] < y1 for b in boxes)

    step = 4.0
    for text, value in ordered:
        ratio = 1.0 if hi == lo else (value - lo) / (hi - lo)
        size = min_size + (max_size - min_size) * ratio
        w = max(len(text), 1) * size * 0.6
        h = size
        cx, cy = width / 2, height / 2
        dx, dy, leg, run, turns = step, 0.0, 1, 0, 0
        for _ in range(4000):
            box = (cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2)
            if not overlaps(box):
                boxes.append(box)
                placed.append({"text": text, "value": value, "x": cx, "y": cy, "size": size})
                break
            cx += dx
            cy += dy
            run += 1
            if run == leg:
                run = 0
                dx, dy = -dy, dx
                turns += 1
                if turns % 2 == 0:
                    leg += 1
    return placed


# ---------------------------------------------------------------------------
# Venn
# ---------------------------------------------------------------------------

def venn_circles(items: List[Dict[str, Any]]) -> Dict[str, Dict[str, float]]:
    """Circle centre/radius per single set, overlapping their neighbours.

    Radii are proportional to sqrt(size). Sets sit on a ring so adjacent
    circles overlap by roughly a third of their radii.
    """
    singles = []
    for item in items:
        sets = item.get("sets") or []
        if len(sets) == 1:
            try:
                value = float(item.get("value", 1))
            except (TypeError, ValueError):
                value = 1.0
            singles.append((str(sets[0]), max(value, 0.0)))
    if not singles:
        return {}

    biggest = max(v for _, v in singles) or 1.0
    radii = {name: 0.25 * math.sqrt(v / biggest) if v > 0 else 0.02 for name, v in singles}
    n = len(singles)
    if n == 1:
        name = singles[0][0]
        return {name: {"x": 0.5, "y": 0.5, "r": radii[name]}}

    mean_r = sum(radii.values()) / n
    ring = mean_r * 0.65 / math.sin(math.pi / n)
    circles = {}
    for i, (name, _) in enumerate(singles):
        angle = math.pi / 2 + 2 * math.pi * i / n
        circles[name] = {
            "x": 0.5 + ring * math.cos(angle),
            "y": 0.5 + ring * math.sin(angle),
            "r": radii[name],
        }
    return circles
