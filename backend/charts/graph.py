"""
Graph and hierarchy rules.

Mind maps, org charts and fishbone diagrams arrive as trees; network graphs
and flow diagrams arrive as explicit node/edge lists. Both end up as a
``{nodes, links}`` payload for a force-directed graph.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

Spec = Dict[str, Any]
Args = Dict[str, Any]

Nodes = List[Dict[str, Any]]
Links = List[Dict[str, Any]]


def flatten_tree(root: Dict[str, Any]) -> Tuple[Nodes, Links]:
    """Depth-first walk: one node per tree node, one link per parent/child edge."""
    nodes: Nodes = []
    links: Links = []
    if not isinstance(root, dict):
        return nodes, links

    # Iterative pre-order so deep trees don't hit the recursion limit.
    stack = [root]
    while stack:
        node = stack.pop()
        name = node.get("name")
        nodes.append({"id": name})
        children = [c for c in (node.get("children") or []) if isinstance(c, dict)]
        for child in children:
            links.append({"source": name, "target": child.get("name")})
        stack.extend(reversed(children))
    return nodes, links


def edge_list(data: Dict[str, Any]) -> Tuple[Nodes, Links]:
    if not isinstance(data, dict):
        return [], []
    nodes = [{"id": n.get("name")} for n in data.get("nodes") or [] if isinstance(n, dict)]
    links = [
        {"source": e.get("source"), "target": e.get("target")}
        for e in data.get("edges") or []
        if isinstance(e, dict)
    ]
    return nodes, links


def _force_graph(nodes: Nodes, links: Links) -> Spec:
    return {
        "type": "forceGraph",
        "data": {"type": "inline", "value": {"nodes": nodes, "links": links}},
    }


def network_graph_spec(args: Args) -> Spec:
    return _force_graph(*edge_list(args.get("data")))


def flow_diagram_spec(args: Args) -> Spec:
    return _force_graph(*edge_list(args.get("data")))


def tree_spec(args: Args) -> Spec:
    """Shared by mind-map, organization-chart and fishbone-diagram."""
    return _force_graph(*flatten_tree(args.get("data")))
