"""Pydantic models for agent flows, in both persisted and editor form.

The *wire* models (`AgentFlow`, `AgentFlowNode`, `AgentFlowEdge`) mirror the JSON
stored by the agent host. The *editable* models (`EditableFlow`, `EditableNode`,
`EditableEdge`) mirror what the canvas editor works with. Agent definitions form
the schema catalog that both directions are resolved against.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field


class ConfigValueType(str, Enum):
    """Declared value types of agent configuration entries."""

    UNIT = "unit"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    PASSWORD = "password"
    TEXT = "text"
    OBJECT = "object"


class DisplayValueType(str, Enum):
    """Declared value types of agent display entries."""

    ANY = "*"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    TEXT = "text"
    OBJECT = "object"
    MESSAGES = "messages"


class AgentConfigEntry(BaseModel):
    """One configuration field of an agent definition."""

    value: Any = None
    # Kept as a plain string so unrecognized tags survive validation.
    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    hidden: Optional[bool] = None


class AgentDisplayConfigEntry(BaseModel):
    """One display slot of an agent definition."""

    type: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    hideTitle: Optional[bool] = None


# Ordered (key, entry) pairs, as published by the agent host.
ConfigSchema = List[Tuple[str, AgentConfigEntry]]
DisplaySchema = List[Tuple[str, AgentDisplayConfigEntry]]


class AgentDefinition(BaseModel):
    """Schema of a single agent type."""

    kind: str = "Agent"
    name: str
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    path: str = ""
    inputs: Optional[List[str]] = None
    outputs: Optional[List[str]] = None
    default_config: Optional[ConfigSchema] = None
    global_config: Optional[ConfigSchema] = None
    display_config: Optional[DisplaySchema] = None


# Schema catalog: agent-type name -> definition.
AgentDefinitions = Dict[str, AgentDefinition]


def parse_agent_definitions(raw: Mapping[str, Any]) -> AgentDefinitions:
    """Validate a raw `{name: definition}` mapping into an agent catalog."""
    defs: AgentDefinitions = {}
    for name, value in dict(raw).items():
        if isinstance(value, AgentDefinition):
            defs[str(name)] = value
            continue
        data = dict(value)
        data.setdefault("name", str(name))
        defs[str(name)] = AgentDefinition.model_validate(data)
    return defs


class Viewport(BaseModel):
    """Canvas pan/zoom state."""

    x: float = 0.0
    y: float = 0.0
    zoom: float = 1.0


# Wire form


class AgentFlowNode(BaseModel):
    """A node as persisted by the agent host."""

    id: str
    def_name: str
    enabled: bool = False
    config: Optional[Dict[str, Any]] = None
    title: Optional[str] = None
    x: float = 0.0
    y: float = 0.0
    width: Optional[float] = None
    height: Optional[float] = None


class AgentFlowEdge(BaseModel):
    """An edge as persisted by the agent host."""

    id: str
    source: str
    source_handle: Optional[str] = None
    target: str
    target_handle: Optional[str] = None


class AgentFlow(BaseModel):
    """A complete persisted agent flow."""

    nodes: List[AgentFlowNode] = Field(default_factory=list)
    edges: List[AgentFlowEdge] = Field(default_factory=list)
    name: str
    viewport: Optional[Viewport] = None


# Editable form


class Position(BaseModel):
    """2D position on canvas."""

    x: float
    y: float


class EditableNodeData(BaseModel):
    """Data block carried by an editor node."""

    name: str
    enabled: bool = False
    title: Optional[str] = None
    config: Optional[Dict[str, Any]] = None
    display: Optional[Dict[str, Any]] = None


class EditableNode(BaseModel):
    """A node in the canvas editor."""

    id: str
    type: str = "agent"
    position: Position
    width: Optional[float] = None
    height: Optional[float] = None
    data: EditableNodeData


class EditableEdge(BaseModel):
    """An edge in the canvas editor."""

    id: str
    source: str
    sourceHandle: Optional[str] = None
    target: str
    targetHandle: Optional[str] = None


class EditableFlow(BaseModel):
    """A complete agent flow as held by the editor."""

    nodes: List[EditableNode] = Field(default_factory=list)
    edges: List[EditableEdge] = Field(default_factory=list)
    name: str
    viewport: Optional[Viewport] = None


# Runtime messages emitted by the agent host, keyed by agent (node) id.


class DisplayMessage(BaseModel):
    agent_id: str
    key: str
    data: Any = None


class ErrorMessage(BaseModel):
    agent_id: str
    message: str


class InputMessage(BaseModel):
    agent_id: str
    ch: str
