"""Structural edits on wire-form flows: new nodes, sub-flow copies, imports."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple
import uuid

from pydantic import ValidationError

from ..errors import FlowImportError
from .models import AgentDefinition, AgentFlow, AgentFlowEdge, AgentFlowNode

logger = logging.getLogger(__name__)


def new_id() -> str:
    return str(uuid.uuid4())[:8]


def new_flow_node(definition: AgentDefinition, *, x: float = 0.0, y: float = 0.0) -> AgentFlowNode:
    """Create a wire node for `definition`, configured with its defaults."""
    config = {key: entry.value for key, entry in (definition.default_config or [])}
    return AgentFlowNode(
        id=new_id(),
        def_name=definition.name,
        enabled=True,
        config=config,
        title=None,
        x=x,
        y=y,
    )


def copy_sub_flow(
    nodes: Sequence[AgentFlowNode],
    edges: Iterable[AgentFlowEdge],
) -> Tuple[List[AgentFlowNode], List[AgentFlowEdge]]:
    """Copy nodes and the edges between them under fresh ids.

    Edges with an endpoint outside `nodes` are not copied.
    """
    id_map: Dict[str, str] = {}
    new_nodes: List[AgentFlowNode] = []
    for node in nodes:
        nid = new_id()
        while nid in id_map.values():
            nid = new_id()
        id_map[node.id] = nid
        new_nodes.append(node.model_copy(update={"id": nid}, deep=True))

    new_edges: List[AgentFlowEdge] = []
    for edge in edges:
        source = id_map.get(edge.source)
        target = id_map.get(edge.target)
        if source is None or target is None:
            continue
        new_edges.append(edge.model_copy(update={"id": new_id(), "source": source, "target": target}))
    return new_nodes, new_edges


def disable_all_nodes(flow: AgentFlow) -> AgentFlow:
    """Return a copy of `flow` with every node disabled."""
    return flow.model_copy(
        update={"nodes": [node.model_copy(update={"enabled": False}) for node in flow.nodes]}
    )


def unique_flow_name(name: str, existing: Iterable[str]) -> str:
    """`name`, or `name` with the smallest numeric suffix not already taken."""
    taken = set(existing)
    if name not in taken:
        return name
    i = 1
    while f"{name}{i}" in taken:
        i += 1
    return f"{name}{i}"


def flow_file_path(root: str | Path, name: str) -> Path:
    """Map a `/`-separated flow name to its JSON file under `root`."""
    parts = [p for p in str(name).split("/") if p]
    if not parts:
        raise ValueError("Agent flow name is empty")
    path = Path(root).joinpath(*parts[:-1])
    return path / f"{parts[-1]}.json"


def read_flow_file(path: str | Path) -> AgentFlow:
    """Read a flow JSON file, naming it after the file and renaming all ids."""
    p = Path(path).expanduser()
    if not p.is_file() or p.suffix != ".json":
        raise FlowImportError(f"Invalid flow file: {p}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("expected a JSON object")
        flow = AgentFlow.model_validate({**data, "name": data.get("name") or p.stem})
    except (ValueError, ValidationError) as e:
        raise FlowImportError(f"Failed to parse flow file {p}: {e}") from e

    name = p.stem.strip()
    if not name:
        raise FlowImportError("Agent flow name is empty")

    nodes, edges = copy_sub_flow(flow.nodes, flow.edges)
    return flow.model_copy(update={"name": name, "nodes": nodes, "edges": edges})


def import_flow(path: str | Path, existing_names: Optional[Iterable[str]] = None) -> AgentFlow:
    """Read a flow file as a new flow: unique name, fresh ids, all nodes disabled."""
    flow = read_flow_file(path)
    flow = flow.model_copy(update={"name": unique_flow_name(flow.name, existing_names or [])})
    flow = disable_all_nodes(flow)
    logger.info("Imported flow '%s' from %s (%d nodes)", flow.name, path, len(flow.nodes))
    return flow
