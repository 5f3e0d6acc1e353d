"""Wire <-> editor transforms for agent flows.

deserialize: AgentFlow -> EditableFlow (coerces configs, repairs edges)
serialize:   EditableFlow -> AgentFlow (coerces configs back, edges as-is)

Both directions take the agent catalog explicitly and never mutate it or the
input flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Mapping, Optional

from ..errors import CatalogUnavailableError, ConfigCoercionIssue, FlowSerializationError
from .capabilities import build_capability_indexes
from .coercion import load_config, save_config
from .models import (
    AgentDefinitions,
    AgentFlow,
    AgentFlowEdge,
    AgentFlowNode,
    DisplaySchema,
    EditableEdge,
    EditableFlow,
    EditableNode,
    EditableNodeData,
    Position,
)
from .validation import DroppedEdge, validate_edges

logger = logging.getLogger(__name__)


@dataclass
class DeserializedFlow:
    flow: EditableFlow
    dropped_edges: List[DroppedEdge] = field(default_factory=list)


@dataclass
class SerializedFlow:
    flow: AgentFlow
    issues: List[ConfigCoercionIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def raise_for_issues(self) -> None:
        if self.issues:
            raise FlowSerializationError(self.issues)


def _require_catalog(definitions: Optional[AgentDefinitions]) -> AgentDefinitions:
    if definitions is None:
        raise CatalogUnavailableError("Agent definitions are not available")
    return definitions


# deserialize: AgentFlow -> EditableFlow


def _display_bag(display_config: Optional[DisplaySchema]) -> Optional[Dict[str, None]]:
    if display_config is None:
        return None
    return {key: None for key, _entry in display_config}


def deserialize_node(node: AgentFlowNode, definitions: AgentDefinitions) -> EditableNode:
    agent_def = definitions.get(node.def_name)
    if agent_def is None:
        logger.debug("Unknown agent type '%s' for node '%s'; disabling", node.def_name, node.id)
        config = dict(node.config or {})
        display = None
    else:
        config = load_config(node.config, agent_def.default_config)
        display = _display_bag(agent_def.display_config)

    return EditableNode(
        id=node.id,
        position=Position(x=node.x, y=node.y),
        width=node.width,
        height=node.height,
        data=EditableNodeData(
            name=node.def_name,
            enabled=agent_def is not None and node.enabled,
            title=node.title,
            config=config,
            display=display,
        ),
    )


def deserialize_edge(edge: AgentFlowEdge) -> EditableEdge:
    return EditableEdge(
        id=edge.id,
        source=edge.source,
        sourceHandle=edge.source_handle,
        target=edge.target,
        targetHandle=edge.target_handle,
    )


def deserialize_flow(flow: AgentFlow, definitions: Optional[AgentDefinitions]) -> DeserializedFlow:
    """Build the editable form of `flow`, dropping edges its catalog no longer supports."""
    definitions = _require_catalog(definitions)

    nodes = [deserialize_node(node, definitions) for node in flow.nodes]
    indexes = build_capability_indexes(nodes, definitions)
    checked = validate_edges(flow.edges, indexes)

    if checked.dropped:
        logger.info("Flow '%s': dropped %d invalid edge(s)", flow.name, len(checked.dropped))

    editable = EditableFlow(
        nodes=nodes,
        edges=[deserialize_edge(edge) for edge in checked.kept],
        name=flow.name,
        viewport=flow.viewport.model_copy() if flow.viewport is not None else None,
    )
    return DeserializedFlow(flow=editable, dropped_edges=checked.dropped)


# serialize: EditableFlow -> AgentFlow


def serialize_node(
    node: EditableNode,
    definitions: AgentDefinitions,
    previous: Optional[AgentFlowNode] = None,
) -> tuple[AgentFlowNode, List[ConfigCoercionIssue]]:
    agent_def = definitions.get(node.data.name)
    schema = agent_def.default_config if agent_def is not None else None
    saved = save_config(
        node.data.config,
        schema,
        node_id=node.id,
        previous=previous.config if previous is not None else None,
    )
    wire = AgentFlowNode(
        id=node.id,
        def_name=node.data.name,
        enabled=node.data.enabled,
        config=saved.config,
        title=node.data.title,
        x=node.position.x,
        y=node.position.y,
        width=node.width,
        height=node.height,
    )
    return wire, saved.issues


def serialize_edge(edge: EditableEdge) -> AgentFlowEdge:
    return AgentFlowEdge(
        id=edge.id,
        source=edge.source,
        source_handle=edge.sourceHandle,
        target=edge.target,
        target_handle=edge.targetHandle,
    )


def serialize_flow(
    flow: EditableFlow,
    definitions: Optional[AgentDefinitions],
    *,
    previous: Optional[AgentFlow] = None,
    strict: bool = False,
) -> SerializedFlow:
    """Build the wire form of `flow`.

    Every node is converted even if an earlier one has bad config values; the
    issues are collected on the result. With `strict=True` they are raised as a
    single `FlowSerializationError` instead. Values that fail to convert fall back
    to the matching node of `previous` when given.
    """
    definitions = _require_catalog(definitions)

    previous_nodes: Mapping[str, AgentFlowNode] = (
        {node.id: node for node in previous.nodes} if previous is not None else {}
    )

    nodes: List[AgentFlowNode] = []
    issues: List[ConfigCoercionIssue] = []
    for node in flow.nodes:
        wire, node_issues = serialize_node(node, definitions, previous_nodes.get(node.id))
        nodes.append(wire)
        issues.extend(node_issues)

    result = SerializedFlow(
        flow=AgentFlow(
            nodes=nodes,
            edges=[serialize_edge(edge) for edge in flow.edges],
            name=flow.name,
            viewport=flow.viewport.model_copy() if flow.viewport is not None else None,
        ),
        issues=issues,
    )
    if strict:
        result.raise_for_issues()
    return result
