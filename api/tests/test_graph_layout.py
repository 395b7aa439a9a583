import json
import shutil

import graphviz
import pytest

from linedesk_api.utils import graph_layout
from linedesk_api.utils.dialog_graph import extract_graph
from linedesk_api.utils.graph_layout import (
    NODE_WIDTH,
    LayoutUnavailableError,
    build_layout_digraph,
    compute_layout,
    line_anchor_y,
    link_placements,
    node_height,
    render_svg,
)
from linedesk_models import LineState, SectionState

needs_graphviz = pytest.mark.skipif(shutil.which("fdp") is None, reason="Graphviz binaries not installed")


def _graph():
    return extract_graph(
        [
            SectionState(
                section_id="start",
                lines=[
                    LineState(id=1, type="dialog", speaker="Amy", text_key="k"),
                    LineState(id=2, type="nextSection", data='{"nextSection": "end"}'),
                ],
            ),
            SectionState(section_id="end"),
        ],
        "start",
    )


def test_presentation_constants() -> None:
    assert node_height(0) == 40
    assert node_height(3) == 100
    assert line_anchor_y(0) == 40
    assert line_anchor_y(2) == 80


def test_digraph_uses_force_directed_engine() -> None:
    dot = build_layout_digraph(_graph())
    assert dot.engine == "fdp"
    source = dot.source
    assert "start -> end" in source
    assert "#10b981" in source


def test_link_anchor_follows_line_row() -> None:
    placements = link_placements(_graph())
    assert len(placements) == 1
    assert placements[0].source_line_id == 2
    assert placements[0].anchor_y == line_anchor_y(1)


def test_empty_graph_needs_no_engine() -> None:
    layout = compute_layout(extract_graph([], None))
    assert layout.to_dict() == {"width": 0.0, "height": 0.0, "nodes": {}, "links": []}


def test_missing_binaries_raise_layout_unavailable(monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing(self, *args, **kwargs):
        raise graphviz.ExecutableNotFound(["fdp"])

    monkeypatch.setattr(graphviz.Digraph, "pipe", _missing)
    with pytest.raises(LayoutUnavailableError):
        compute_layout(_graph())
    with pytest.raises(LayoutUnavailableError):
        render_svg(_graph())


def test_layout_reads_engine_positions(monkeypatch: pytest.MonkeyPatch) -> None:
    engine_output = {
        "bb": "0,0,500,300",
        "objects": [
            {"name": "start", "pos": "125,250", "width": "3.4722", "height": "0.8333"},
            {"name": "end", "pos": "400.5,50", "width": "3.4722", "height": "0.5556"},
            {"name": "unplaced"},
        ],
    }
    formats = []

    def _canned(dot, fmt):
        formats.append(fmt)
        return json.dumps(engine_output).encode("utf-8")

    monkeypatch.setattr(graph_layout, "_pipe", _canned)
    layout = compute_layout(_graph())

    assert formats == ["json"]
    assert (layout.width, layout.height) == (500.0, 300.0)
    assert set(layout.nodes) == {"start", "end"}
    start = layout.nodes["start"]
    assert (start.x, start.y) == (125.0, 50.0)
    assert start.width == pytest.approx(NODE_WIDTH, abs=0.01)
    assert start.height == pytest.approx(60, abs=0.01)
    assert layout.nodes["end"].x == 400.5
    assert layout.nodes["end"].y == 250.0
    assert layout.to_dict()["links"] == [
        {"source": "start", "target": "end", "label": None, "sourceLineId": 2, "anchorY": line_anchor_y(1)}
    ]


@needs_graphviz
def test_layout_places_every_node() -> None:
    layout = compute_layout(_graph())
    assert set(layout.nodes) == {"start", "end"}
    start = layout.nodes["start"]
    assert start.width == pytest.approx(NODE_WIDTH, rel=0.01)
    assert start.height == pytest.approx(node_height(2), rel=0.01)
    assert layout.width > 0 and layout.height > 0


@needs_graphviz
def test_svg_rendered() -> None:
    assert b"<svg" in render_svg(_graph())
