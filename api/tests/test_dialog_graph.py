import json

from linedesk_api.utils.dialog_graph import describe_line, extract_graph, line_targets
from linedesk_models import LineState, SectionState


def _section(section_id: str, *lines: LineState) -> SectionState:
    return SectionState(section_id=section_id, lines=list(lines))


def _line(line_id: int, line_type: str, data=None, **columns) -> LineState:
    if data is not None and not isinstance(data, str):
        data = json.dumps(data)
    return LineState(id=line_id, type=line_type, data=data, **columns)


def _edges(graph) -> list:
    return [(link.source, link.target, link.label) for link in graph.links]


def test_next_section_edge_and_nodes() -> None:
    sections = [
        _section("start", _line(1, "dialog", speaker="Amy", text_key="line_1"), _line(2, "nextSection", {"nextSection": "end"})),
        _section("end"),
    ]
    graph = extract_graph(sections, "start")

    assert [node.id for node in graph.nodes] == ["start", "end"]
    assert graph.nodes[0].is_start and not graph.nodes[1].is_start
    assert _edges(graph) == [("start", "end", None)]
    assert graph.links[0].source_line_id == 2
    assert [line.label for line in graph.nodes[0].lines] == ["Amy: [line_1]", "→ end"]


def test_extraction_is_idempotent() -> None:
    sections = [
        _section("a", _line(1, "options", {"options": [{"text": "x", "nextSection": "b"}]})),
        _section("b", _line(2, "switch", {"condition": {"type": "flag"}, "nextSection": "a"})),
    ]
    assert extract_graph(sections, "a").to_dict() == extract_graph(sections, "a").to_dict()


def test_dangling_target_produces_no_edge() -> None:
    graph = extract_graph([_section("start", _line(1, "nextSection", {"nextSection": "missing"}))], "start")
    assert graph.links == []


def test_malformed_switch_produces_no_edge() -> None:
    graph = extract_graph([_section("start", _line(1, "switch", "not json")), _section("end")], "start")
    assert graph.links == []
    assert graph.nodes[0].lines[0].label == "switch"


def test_non_json_next_section_is_read_as_section_id() -> None:
    graph = extract_graph([_section("start", _line(1, "nextSection", "  end ")), _section("end")], "start")
    assert _edges(graph) == [("start", "end", None)]


def test_options_edges_keep_positions() -> None:
    data = {"options": [{"text": "a", "nextSection": "end"}, "junk", {"text": "c"}, {"text": "d", "nextSection": "end"}]}
    graph = extract_graph([_section("start", _line(1, "options", data)), _section("end")], "start")
    assert _edges(graph) == [("start", "end", "option 1"), ("start", "end", "option 4")]


def test_bare_option_list_is_read() -> None:
    graph = extract_graph([_section("start", _line(1, "options", [{"nextSection": "end"}])), _section("end")], "start")
    assert _edges(graph) == [("start", "end", "option 1")]


def test_switch_shapes() -> None:
    sections = [
        _section("start", _line(1, "switch", {"nextSection": "a"}), _line(2, "switch", {"condition": {"type": "hasKey"}, "nextSection": "b"})),
        _section("a", _line(3, "switch", {"cases": [{"value": 1, "nextSection": "b"}, {"nextSection": "start"}], "default": "a"})),
        _section("b"),
    ]
    graph = extract_graph(sections, "start")
    assert _edges(graph) == [
        ("start", "a", "switch"),
        ("start", "b", "if hasKey"),
        ("a", "b", "case: 1"),
        ("a", "start", "case: ?"),
        ("a", "a", "default"),
    ]


def test_condition_without_type_is_labelled_unknown() -> None:
    targets = line_targets(_line(1, "switch", {"condition": {}, "nextSection": "x"}))
    assert targets == [("x", "if ?")]


def test_other_line_types_have_no_targets() -> None:
    assert line_targets(_line(1, "event", {"nextSection": "x"}, event_name="e")) == []
    assert line_targets(_line(2, "dialog")) == []


def test_duplicate_section_ids_keep_first() -> None:
    sections = [_section("a", _line(1, "nextSection", {"nextSection": "b"})), _section("a"), _section("b")]
    graph = extract_graph(sections, None)
    assert [node.id for node in graph.nodes] == ["a", "b"]
    assert _edges(graph) == [("a", "b", None)]


def test_line_labels() -> None:
    assert describe_line(_line(1, "switch", {"nextSection": "a", "default": "b"})) == "switch → a, default: b"
    assert describe_line(_line(2, "options", {"options": [{"nextSection": "a"}, {"nextSection": "b"}]})) == "options → a, b"
    assert describe_line(_line(3, "event", event_name="x")) == "event"


def test_to_dict_shape() -> None:
    graph = extract_graph([_section("s", _line(7, "nextSection", {"nextSection": "s"}))], "s")
    body = graph.to_dict()
    assert set(body) == {"nodes", "links"}
    assert body["nodes"][0]["isStart"] is True
    assert body["nodes"][0]["lines"][0]["id"] == 7
    assert body["links"] == [{"source": "s", "target": "s", "sourceLineId": 7}]
