"""
Force-directed placement of an extracted dialog graph.

Layout is delegated to Graphviz's ``fdp`` engine (spring edges with a target
length, pairwise repulsion, overlap removal sized to the node boxes). The
Graphviz process is started per call and gone when the call returns.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import graphviz

from .dialog_graph import DialogGraph, GraphNode

logger = logging.getLogger(__name__)

POINTS_PER_INCH = 72.0

NODE_WIDTH = 250
HEADER_HEIGHT = 30
LINE_HEIGHT = 20
NODE_PADDING = 10
LINK_DISTANCE = 350

START_COLOR = "#10b981"
NODE_COLOR = "#6366f1"
LINE_LINK_COLOR = "#3b82f6"
PLAIN_LINK_COLOR = "#999999"


class LayoutUnavailableError(RuntimeError):
    """The Graphviz engine could not be run."""


def node_height(line_count: int) -> int:
    return HEADER_HEIGHT + line_count * LINE_HEIGHT + NODE_PADDING


def line_anchor_y(line_index: int) -> float:
    """Vertical offset of a line's row from the top of its node."""
    return HEADER_HEIGHT + line_index * LINE_HEIGHT + LINE_HEIGHT / 2


def _inches(points: float) -> str:
    return f"{points / POINTS_PER_INCH:.4f}"


def _node_label(node: GraphNode) -> str:
    rows = [node.label] + [line.label for line in node.lines]
    return "\n".join(rows)


def build_layout_digraph(graph: DialogGraph) -> graphviz.Digraph:
    dot = graphviz.Digraph(
        name="dialog",
        engine="fdp",
        graph_attr={"overlap": "false", "splines": "true", "sep": "+20"},
        node_attr={"shape": "box", "style": "rounded", "fontsize": "10", "fixedsize": "true"},
        edge_attr={"fontsize": "8"},
    )
    for node in graph.nodes:
        dot.node(
            node.id,
            label=_node_label(node),
            width=_inches(NODE_WIDTH),
            height=_inches(node_height(len(node.lines))),
            color=START_COLOR if node.is_start else NODE_COLOR,
            penwidth="3",
        )
    for link in graph.links:
        dot.edge(
            link.source,
            link.target,
            label=link.label or "",
            len=_inches(LINK_DISTANCE),
            color=LINE_LINK_COLOR if link.source_line_id is not None else PLAIN_LINK_COLOR,
        )
    return dot


@dataclass
class NodeBox:
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass
class LinkPlacement:
    source: str
    target: str
    label: Optional[str]
    source_line_id: Optional[int]
    # Offset from the top of the source node, None for section-level links
    anchor_y: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "label": self.label,
            "sourceLineId": self.source_line_id,
            "anchorY": self.anchor_y,
        }


@dataclass
class GraphLayout:
    width: float
    height: float
    nodes: Dict[str, NodeBox] = field(default_factory=dict)
    links: List[LinkPlacement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "nodes": {node_id: box.to_dict() for node_id, box in self.nodes.items()},
            "links": [link.to_dict() for link in self.links],
        }


def _pipe(dot: graphviz.Digraph, fmt: str) -> bytes:
    try:
        return dot.pipe(format=fmt)
    except graphviz.ExecutableNotFound as exc:
        raise LayoutUnavailableError("Graphviz executables are not installed") from exc
    except graphviz.CalledProcessError as exc:
        raise LayoutUnavailableError(f"Graphviz failed: {exc}") from exc


def _bounding_box(payload: Dict[str, Any]) -> tuple[float, float]:
    try:
        _, _, width, height = (float(v) for v in str(payload.get("bb", "0,0,0,0")).split(","))
    except ValueError:
        return 0.0, 0.0
    return width, height


def link_placements(graph: DialogGraph) -> List[LinkPlacement]:
    placements: List[LinkPlacement] = []
    for link in graph.links:
        anchor_y: Optional[float] = None
        source = graph.node(link.source)
        if source is not None and link.source_line_id is not None:
            index = next((i for i, line in enumerate(source.lines) if line.id == link.source_line_id), None)
            if index is not None:
                anchor_y = line_anchor_y(index)
        placements.append(
            LinkPlacement(
                source=link.source,
                target=link.target,
                label=link.label,
                source_line_id=link.source_line_id,
                anchor_y=anchor_y,
            )
        )
    return placements


def compute_layout(graph: DialogGraph) -> GraphLayout:
    """Run the force-directed engine and return node centers (top-left origin)."""
    if not graph.nodes:
        return GraphLayout(width=0.0, height=0.0)
    payload = json.loads(_pipe(build_layout_digraph(graph), "json").decode("utf-8"))
    width, height = _bounding_box(payload)
    layout = GraphLayout(width=width, height=height, links=link_placements(graph))
    for obj in payload.get("objects", []):
        name = obj.get("name")
        pos = obj.get("pos")
        if name is None or not pos:
            continue
        x, y = (float(v) for v in pos.split(",")[:2])
        layout.nodes[name] = NodeBox(
            x=x,
            # Graphviz puts the origin bottom-left
            y=height - y,
            width=float(obj.get("width", 0)) * POINTS_PER_INCH,
            height=float(obj.get("height", 0)) * POINTS_PER_INCH,
        )
    logger.info("Graph laid out", extra={"nodes": len(layout.nodes), "links": len(layout.links)})
    return layout


def render_svg(graph: DialogGraph) -> bytes:
    return _pipe(build_layout_digraph(graph), "svg")
