"""Structural edge validation against node capabilities.

Used at load time to repair flows whose agent catalog changed since they were
saved: an edge that no longer lines up with its endpoints' handles is dropped and
reported back to the caller with the reason.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
from typing import Iterable, List, Mapping, Optional

from .capabilities import CapabilityIndex, split_config_port
from .models import AgentFlowEdge

logger = logging.getLogger(__name__)


class EdgeDropReason(str, Enum):
    MISSING_SOURCE_NODE = "missing_source_node"
    MISSING_TARGET_NODE = "missing_target_node"
    UNMATCHED_SOURCE_NODE = "unmatched_source_node"
    UNMATCHED_TARGET_NODE = "unmatched_target_node"
    UNKNOWN_SOURCE_HANDLE = "unknown_source_handle"
    UNKNOWN_TARGET_HANDLE = "unknown_target_handle"
    UNKNOWN_CONFIG_PORT = "unknown_config_port"


@dataclass(frozen=True)
class DroppedEdge:
    edge: AgentFlowEdge
    reason: EdgeDropReason

    def to_dict(self) -> dict:
        return {"edge": self.edge.model_dump(), "reason": self.reason.value}


@dataclass
class EdgeValidation:
    kept: List[AgentFlowEdge] = field(default_factory=list)
    dropped: List[DroppedEdge] = field(default_factory=list)


def check_edge(edge: AgentFlowEdge, indexes: Mapping[str, CapabilityIndex]) -> Optional[EdgeDropReason]:
    """Return why `edge` is not admissible, or None if it is."""
    source = indexes.get(edge.source)
    if source is None:
        return EdgeDropReason.MISSING_SOURCE_NODE
    target = indexes.get(edge.target)
    if target is None:
        return EdgeDropReason.MISSING_TARGET_NODE
    # Endpoint whose agent type left the catalog.
    if not source.matched:
        return EdgeDropReason.UNMATCHED_SOURCE_NODE
    if not target.matched:
        return EdgeDropReason.UNMATCHED_TARGET_NODE

    # A missing handle is the literal "" handle, never a wildcard.
    if (edge.source_handle or "") not in source.outputs:
        return EdgeDropReason.UNKNOWN_SOURCE_HANDLE

    target_handle = edge.target_handle or ""
    config_key = split_config_port(target_handle)
    if config_key is not None:
        if config_key not in target.config_ports:
            return EdgeDropReason.UNKNOWN_CONFIG_PORT
    elif target_handle not in target.inputs:
        return EdgeDropReason.UNKNOWN_TARGET_HANDLE
    return None


def validate_edges(
    edges: Iterable[AgentFlowEdge],
    indexes: Mapping[str, CapabilityIndex],
) -> EdgeValidation:
    """Split `edges` into admissible and dropped ones, preserving order."""
    result = EdgeValidation()
    for edge in edges:
        reason = check_edge(edge, indexes)
        if reason is None:
            result.kept.append(edge)
            continue
        logger.info(
            "Dropping edge '%s' (%s:%s -> %s:%s): %s",
            edge.id,
            edge.source,
            edge.source_handle,
            edge.target,
            edge.target_handle,
            reason.value,
        )
        result.dropped.append(DroppedEdge(edge=edge, reason=reason))
    return result
