from __future__ import annotations

import pytest

from askflow.errors import ConfigCoercionError
from askflow.visual.coercion import load_config, load_global_configs, save_config, save_global_config
from askflow.visual.models import AgentConfigEntry, parse_agent_definitions


def _schema():
    return [
        ("flag", AgentConfigEntry(value=True, type="boolean")),
        ("count", AgentConfigEntry(value=3, type="integer")),
        ("ratio", AgentConfigEntry(value=0.5, type="number")),
        ("name", AgentConfigEntry(value="bob", type="string")),
        ("notes", AgentConfigEntry(value="", type="text")),
        ("opts", AgentConfigEntry(value={"a": 1}, type="object")),
        ("raw", AgentConfigEntry(value=[1, 2], type=None)),
    ]


def test_load_applies_defaults_then_wire_overrides_and_keeps_extra_keys() -> None:
    schema = [
        ("a", AgentConfigEntry(value=1, type=None)),
        ("b", AgentConfigEntry(value=2, type=None)),
    ]
    assert load_config({"b": 99, "extra": "x"}, schema) == {"a": 1, "b": 99, "extra": "x"}


def test_load_textualizes_numbers_and_objects() -> None:
    cfg = load_config({"count": 42, "ratio": 2.5}, _schema())
    assert cfg["flag"] is True
    assert cfg["count"] == "42"
    assert cfg["ratio"] == "2.5"
    assert cfg["name"] == "bob"
    assert cfg["notes"] == ""
    assert cfg["opts"] == '{\n  "a": 1\n}'
    assert cfg["raw"] == [1, 2]


def test_load_keeps_schema_order_first() -> None:
    cfg = load_config({"zzz": 1, "name": "amy"}, _schema())
    assert list(cfg.keys()) == ["flag", "count", "ratio", "name", "notes", "opts", "raw", "zzz"]


def test_load_without_schema_copies_wire_bag() -> None:
    assert load_config({"x": 1}, None) == {"x": 1}
    assert load_config(None, None) == {}


def test_load_keeps_raw_value_when_it_does_not_match_declared_type() -> None:
    cfg = load_config({"count": "not a number"}, _schema())
    assert cfg["count"] == "not a number"


def test_save_parses_declared_types() -> None:
    editable = {
        "flag": False,
        "count": "42",
        "ratio": "1.25",
        "name": "amy",
        "notes": "hello\nworld",
        "opts": '{"b": [1, 2]}',
        "raw": {"anything": True},
    }
    saved = save_config(editable, _schema())
    assert saved.ok
    assert saved.config == {
        "flag": False,
        "count": 42,
        "ratio": 1.25,
        "name": "amy",
        "notes": "hello\nworld",
        "opts": {"b": [1, 2]},
        "raw": {"anything": True},
    }


def test_save_number_keeps_integer_text_integral() -> None:
    saved = save_config({"ratio": "3"}, _schema())
    assert saved.config == {"ratio": 3}
    assert isinstance(saved.config["ratio"], int)


def test_save_integer_accepts_integral_float_text() -> None:
    assert save_config({"count": "7.0"}, _schema()).config == {"count": 7}


def test_save_without_schema_is_pass_through() -> None:
    editable = {"count": "42", "whatever": [1]}
    saved = save_config(editable, None)
    assert saved.config == editable
    assert saved.ok


def test_save_none_bag_stays_none() -> None:
    assert save_config(None, _schema()).config is None


def test_save_carries_undeclared_keys() -> None:
    saved = save_config({"count": "1", "extra": "x"}, _schema())
    assert saved.config == {"count": 1, "extra": "x"}


def test_save_unrecognized_type_tag_passes_through() -> None:
    schema = [("mode", AgentConfigEntry(value="a", type="color"))]
    assert save_config({"mode": "#fff"}, schema).config == {"mode": "#fff"}


def test_save_aggregates_issues_instead_of_writing_sentinels() -> None:
    saved = save_config(
        {"count": "abc", "ratio": "nan", "opts": "{not json", "name": "ok"},
        _schema(),
        node_id="n1",
    )
    assert saved.config == {"name": "ok"}
    keys = sorted(i.key for i in saved.issues)
    assert keys == ["count", "opts", "ratio"]
    count_issue = [i for i in saved.issues if i.key == "count"][0]
    assert count_issue.node_id == "n1"
    assert count_issue.expected_type == "integer"
    assert count_issue.raw_value == "abc"

    with pytest.raises(ConfigCoercionError) as exc:
        saved.raise_for_issues()
    assert len(exc.value.issues) == 3


def test_save_rejects_non_standard_json_constants() -> None:
    for text in ('{"x": NaN}', "[Infinity]", "-Infinity"):
        saved = save_config({"opts": text}, _schema(), node_id="n1")
        assert saved.config == {}
        assert [i.key for i in saved.issues] == ["opts"]
        assert saved.issues[0].raw_value == text

    saved = save_config({"opts": {"x": float("nan")}}, _schema())
    assert saved.config == {}
    assert [i.key for i in saved.issues] == ["opts"]

    saved = save_config({"opts": '{"x": NaN}'}, _schema(), previous={"opts": {"x": 1}})
    assert saved.config == {"opts": {"x": 1}}


def test_load_keeps_non_finite_stored_numbers_raw() -> None:
    cfg = load_config({"count": float("inf"), "ratio": float("nan")}, _schema())
    assert cfg["count"] == float("inf")
    assert isinstance(cfg["ratio"], float)
    saved = save_config(cfg, _schema())
    assert sorted(i.key for i in saved.issues) == ["count", "ratio"]


def test_save_failed_key_falls_back_to_previous_value() -> None:
    saved = save_config({"count": "abc"}, _schema(), previous={"count": 5})
    assert saved.config == {"count": 5}
    assert len(saved.issues) == 1


def test_save_rejects_booleans_for_numbers() -> None:
    saved = save_config({"count": True}, _schema())
    assert [i.key for i in saved.issues] == ["count"]


@pytest.mark.parametrize(
    "key,editable",
    [
        ("count", "42"),
        ("ratio", "2.5"),
        ("ratio", "3"),
        ("flag", True),
        ("name", "x"),
        ("notes", "a\nb"),
        ("opts", '{\n  "a": 1\n}'),
    ],
)
def test_load_after_save_is_identity(key: str, editable) -> None:
    wire = save_config({key: editable}, _schema()).config
    assert load_config(wire, _schema())[key] == editable


def test_global_configs_use_global_schema() -> None:
    defs = parse_agent_definitions(
        {
            "llm": {
                "global_config": [
                    ["api_key", {"value": "", "type": "password"}],
                    ["timeout", {"value": 30, "type": "integer"}],
                ]
            }
        }
    )
    editable = load_global_configs({"llm": {"timeout": 10}, "other": {"x": 1}}, defs)
    assert editable == {"llm": {"api_key": "", "timeout": "10"}, "other": {"x": 1}}

    saved = save_global_config("llm", {"api_key": "k", "timeout": "15"}, defs)
    assert saved.config == {"api_key": "k", "timeout": 15}
