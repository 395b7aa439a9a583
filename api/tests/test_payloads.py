import json

import pytest

from linedesk_models import LineState
from linedesk_models.payloads import (
    BackgroundPayload,
    CaseListSwitchPayload,
    DialogPayload,
    EventPayload,
    MalformedPayloadError,
    SimpleSwitchPayload,
    column_payload,
    decode_line_data,
    decode_next_section,
    decode_options,
    decode_switch,
    with_option_text,
)


def test_decode_line_data_rejects_non_json() -> None:
    with pytest.raises(MalformedPayloadError):
        decode_line_data("not json")
    with pytest.raises(MalformedPayloadError):
        decode_line_data(None)


def test_next_section_reference_must_be_a_string() -> None:
    assert decode_next_section('{"nextSection": "end"}').next_section == "end"
    assert decode_next_section('{"nextSection": 5}').next_section is None
    assert decode_next_section('{"nextSection": ""}').next_section is None
    assert decode_next_section('"end"').next_section is None


def test_options_keep_unknown_fields_and_positions() -> None:
    payload = decode_options('{"options": [{"text": "a", "weight": 3}, 7, {"nextSection": "b"}]}')
    assert len(payload.options) == 3
    assert payload.options[0].model_extra == {"weight": 3}
    assert payload.options[1].text is None
    assert payload.options[2].next_section == "b"


def test_option_text_patch_keeps_stored_fields() -> None:
    data = '{"options": [{"text": "", "nextSection": "", "condition": {"type": "", "value": ""}, "note": null}], "x": 1}'
    assert json.loads(with_option_text(data, 0, "opt_key")) == {
        "options": [{"text": "opt_key", "nextSection": "", "condition": {"type": "", "value": ""}, "note": None}],
        "x": 1,
    }
    assert json.loads(with_option_text('[{"nextSection": 5}, 7]', 1, "k")) == [{"nextSection": 5}, {"text": "k"}]
    with pytest.raises(MalformedPayloadError):
        with_option_text('{"options": []}', 0, "k")


def test_non_finite_constants_are_not_json() -> None:
    for data in ('{"value": NaN}', "[Infinity]", "-Infinity"):
        with pytest.raises(MalformedPayloadError):
            decode_line_data(data)


def test_switch_shapes_are_told_apart() -> None:
    simple = decode_switch('{"condition": {"type": "hasKey"}, "nextSection": "a"}')
    assert [type(v) for v in simple] == [SimpleSwitchPayload]
    legacy = decode_switch('{"cases": [{"value": 1, "nextSection": "b"}], "default": "c"}')
    assert [type(v) for v in legacy] == [CaseListSwitchPayload]
    assert legacy[0].cases[0].next_section == "b"
    assert legacy[0].default == "c"
    both = decode_switch('{"nextSection": "a", "default": "c"}')
    assert [type(v) for v in both] == [SimpleSwitchPayload, CaseListSwitchPayload]
    assert decode_switch("[]") == []


def test_column_payloads() -> None:
    dialog = column_payload(LineState(type="dialog", speaker="Amy", text_key="k"))
    assert dialog == DialogPayload(speaker="Amy", text_key="k")
    event = column_payload(LineState(type="event", event_name="give", event_value="sword"))
    assert event == EventPayload(name="give", value="sword")
    background = column_payload(LineState(type="showBackground", background="bg.png"))
    assert background == BackgroundPayload(path="bg.png")
    assert column_payload(LineState(type="switch", data="{}")) is None
