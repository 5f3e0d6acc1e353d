from __future__ import annotations

import pytest

from askflow.errors import CatalogUnavailableError, FlowSerializationError
from askflow.visual.capabilities import config_port_handle
from askflow.visual.models import AgentFlow, parse_agent_definitions
from askflow.visual.transform import deserialize_flow, serialize_flow
from askflow.visual.validation import EdgeDropReason


def _defs():
    return parse_agent_definitions(
        {
            "timer": {
                "outputs": ["tick"],
                "default_config": [
                    ["interval", {"value": 10, "type": "integer"}],
                    ["label", {"value": "timer", "type": "string"}],
                ],
            },
            "display": {
                "inputs": ["value"],
                "default_config": [
                    ["scale", {"value": 1.5, "type": "number"}],
                    ["style", {"value": {"color": "red"}, "type": "object"}],
                    ["secret", {"value": "", "type": "password", "hidden": True}],
                ],
                "display_config": [
                    ["value", {"type": "*"}],
                    ["history", {"type": "messages"}],
                ],
            },
        }
    )


def _wire() -> AgentFlow:
    return AgentFlow.model_validate(
        {
            "name": "main",
            "viewport": {"x": 12.0, "y": -4.0, "zoom": 0.75},
            "nodes": [
                {
                    "id": "t1",
                    "def_name": "timer",
                    "enabled": True,
                    "config": {"interval": 5},
                    "title": "Tick",
                    "x": 0,
                    "y": 10,
                },
                {
                    "id": "d1",
                    "def_name": "display",
                    "enabled": True,
                    "config": {"style": {"color": "blue"}, "scale": 2.5, "secret": "s"},
                    "title": None,
                    "x": 200,
                    "y": 10,
                    "width": 300,
                    "height": 120,
                },
            ],
            "edges": [
                {"id": "e1", "source": "t1", "source_handle": "tick", "target": "d1", "target_handle": "value"},
                {
                    "id": "e2",
                    "source": "t1",
                    "source_handle": "tick",
                    "target": "d1",
                    "target_handle": config_port_handle("scale"),
                },
            ],
        }
    )


def test_deserialize_builds_editable_nodes() -> None:
    loaded = deserialize_flow(_wire(), _defs())
    flow = loaded.flow
    assert loaded.dropped_edges == []

    t1, d1 = flow.nodes
    assert t1.type == "agent"
    assert t1.position.x == 0 and t1.position.y == 10
    assert t1.data.name == "timer"
    assert t1.data.enabled is True
    assert t1.data.title == "Tick"
    assert t1.data.config == {"interval": "5", "label": "timer"}
    assert t1.data.display is None

    assert d1.width == 300 and d1.height == 120
    assert d1.data.config == {"scale": "2.5", "style": '{\n  "color": "blue"\n}', "secret": "s"}
    assert d1.data.display == {"value": None, "history": None}

    assert [(e.id, e.sourceHandle, e.targetHandle) for e in flow.edges] == [
        ("e1", "tick", "value"),
        ("e2", "tick", config_port_handle("scale")),
    ]


def test_name_and_viewport_are_copied_both_ways() -> None:
    wire = _wire()
    editable = deserialize_flow(wire, _defs()).flow
    assert editable.name == "main"
    assert editable.viewport == wire.viewport

    back = serialize_flow(editable, _defs()).flow
    assert back.name == "main"
    assert back.viewport == wire.viewport


def test_unknown_agent_type_is_disabled_and_config_kept_raw() -> None:
    wire = AgentFlow.model_validate(
        {
            "name": "stale",
            "nodes": [
                {"id": "x", "def_name": "removed_agent", "enabled": True, "config": {"n": 1, "o": {"k": 2}}},
                {"id": "t1", "def_name": "timer", "enabled": True},
            ],
            "edges": [
                {"id": "e1", "source": "t1", "source_handle": "tick", "target": "x", "target_handle": "in"},
            ],
        }
    )
    loaded = deserialize_flow(wire, _defs())
    x, t1 = loaded.flow.nodes
    assert x.data.enabled is False
    assert x.data.config == {"n": 1, "o": {"k": 2}}
    assert x.data.display is None
    assert t1.data.enabled is True
    assert t1.data.config == {"interval": "10", "label": "timer"}
    assert loaded.flow.edges == []
    assert [d.reason for d in loaded.dropped_edges] == [EdgeDropReason.UNMATCHED_TARGET_NODE]


def test_disabled_wire_node_stays_disabled() -> None:
    wire = _wire()
    wire.nodes[0].enabled = False
    loaded = deserialize_flow(wire, _defs())
    assert loaded.flow.nodes[0].data.enabled is False


def test_edges_against_changed_schema_are_dropped() -> None:
    wire = _wire()
    wire.edges.append(
        wire.edges[0].model_copy(update={"id": "e3", "target_handle": config_port_handle("secret")})
    )
    wire.edges.append(wire.edges[0].model_copy(update={"id": "e4", "target": "missing"}))
    loaded = deserialize_flow(wire, _defs())
    assert [e.id for e in loaded.flow.edges] == ["e1", "e2"]
    assert [(d.edge.id, d.reason) for d in loaded.dropped_edges] == [
        ("e3", EdgeDropReason.UNKNOWN_CONFIG_PORT),
        ("e4", EdgeDropReason.MISSING_TARGET_NODE),
    ]


def test_deserialize_does_not_mutate_input() -> None:
    wire = _wire()
    before = wire.model_dump()
    deserialize_flow(wire, _defs())
    assert wire.model_dump() == before


def test_missing_catalog_fails_fast() -> None:
    with pytest.raises(CatalogUnavailableError):
        deserialize_flow(_wire(), None)
    with pytest.raises(CatalogUnavailableError):
        serialize_flow(deserialize_flow(_wire(), _defs()).flow, None)


def test_serialize_restores_typed_config() -> None:
    editable = deserialize_flow(_wire(), _defs()).flow
    wire = serialize_flow(editable, _defs()).flow
    t1, d1 = wire.nodes
    assert t1.def_name == "timer"
    assert t1.enabled is True
    assert t1.config == {"interval": 5, "label": "timer"}
    assert t1.title == "Tick"
    assert (t1.x, t1.y, t1.width, t1.height) == (0, 10, None, None)
    assert d1.config == {"scale": 2.5, "style": {"color": "blue"}, "secret": "s"}
    assert (d1.width, d1.height) == (300, 120)
    assert [e.model_dump() for e in wire.edges] == [e.model_dump() for e in _wire().edges]


def test_round_trip_is_stable() -> None:
    defs = _defs()
    editable = deserialize_flow(_wire(), defs).flow
    again = deserialize_flow(serialize_flow(editable, defs).flow, defs).flow
    assert again.model_dump() == editable.model_dump()


def test_unknown_agent_config_passes_through_on_save() -> None:
    wire = AgentFlow.model_validate(
        {"name": "f", "nodes": [{"id": "x", "def_name": "nope", "enabled": False, "config": {"a": "1", "b": [2]}}]}
    )
    editable = deserialize_flow(wire, _defs()).flow
    back = serialize_flow(editable, _defs()).flow
    assert back.nodes[0].config == {"a": "1", "b": [2]}


def test_serialize_does_not_filter_edges() -> None:
    editable = deserialize_flow(_wire(), _defs()).flow
    editable.edges.append(editable.edges[0].model_copy(update={"id": "dangling", "target": "nowhere"}))
    wire = serialize_flow(editable, _defs()).flow
    assert [e.id for e in wire.edges] == ["e1", "e2", "dangling"]


def test_serialize_reports_bad_values_for_every_node() -> None:
    editable = deserialize_flow(_wire(), _defs()).flow
    editable.nodes[0].data.config["interval"] = "soon"
    editable.nodes[1].data.config["style"] = "{broken"

    result = serialize_flow(editable, _defs())
    assert not result.ok
    assert sorted((i.node_id, i.key) for i in result.issues) == [("d1", "style"), ("t1", "interval")]
    assert "interval" not in result.flow.nodes[0].config

    with pytest.raises(FlowSerializationError) as exc:
        serialize_flow(editable, _defs(), strict=True)
    assert len(exc.value.issues) == 2


def test_serialize_falls_back_to_previous_wire_values() -> None:
    previous = _wire()
    editable = deserialize_flow(previous, _defs()).flow
    editable.nodes[0].data.config["interval"] = "soon"
    result = serialize_flow(editable, _defs(), previous=previous)
    assert result.flow.nodes[0].config["interval"] == 5
    assert len(result.issues) == 1
