"""Per-node connection capabilities derived from the agent catalog."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from .models import AgentDefinitions, AgentFlowNode, EditableNode

# Target handles starting with this prefix address a config field, not an input.
CONFIG_PORT_PREFIX = "config:"


@dataclass(frozen=True)
class CapabilityIndex:
    outputs: frozenset = frozenset()
    inputs: frozenset = frozenset()
    config_ports: frozenset = frozenset()
    matched: bool = False


UNMATCHED = CapabilityIndex()


def config_port_handle(key: str) -> str:
    """Target handle name for the config field `key`."""
    return f"{CONFIG_PORT_PREFIX}{key}"


def split_config_port(handle: Optional[str]) -> Optional[str]:
    """Return the config key addressed by `handle`, or None for a plain input handle."""
    if handle is not None and handle.startswith(CONFIG_PORT_PREFIX):
        return handle[len(CONFIG_PORT_PREFIX):]
    return None


def build_capability_index(def_name: str, definitions: AgentDefinitions) -> CapabilityIndex:
    """Look up the handles and config-ports exposed by an agent type."""
    agent_def = definitions.get(def_name)
    if agent_def is None:
        return UNMATCHED
    return CapabilityIndex(
        outputs=frozenset(agent_def.outputs or []),
        inputs=frozenset(agent_def.inputs or []),
        config_ports=frozenset(
            key for key, entry in (agent_def.default_config or []) if entry.hidden is not True
        ),
        matched=True,
    )


def _def_name(node: EditableNode | AgentFlowNode) -> str:
    if isinstance(node, EditableNode):
        return node.data.name
    return node.def_name


def build_capability_indexes(
    nodes: Iterable[EditableNode | AgentFlowNode],
    definitions: AgentDefinitions,
) -> Dict[str, CapabilityIndex]:
    """Capability index of every node, keyed by node id."""
    return {node.id: build_capability_index(_def_name(node), definitions) for node in nodes}
