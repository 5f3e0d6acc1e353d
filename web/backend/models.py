"""Request/response models for the transform backend.

Flow and catalog models are re-exported from `askflow.visual.models` so the
backend speaks exactly the JSON schema the library validates.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from askflow.visual.models import (
    AgentDefinition,
    AgentFlow,
    AgentFlowEdge,
    ConfigSchema,
    EditableFlow,
)


class DeserializeRequest(BaseModel):
    """Convert a stored flow to its editable form."""

    flow: AgentFlow
    definitions: Optional[Dict[str, AgentDefinition]] = None


class DroppedEdgeModel(BaseModel):
    edge: AgentFlowEdge
    reason: str


class DeserializeResponse(BaseModel):
    flow: EditableFlow
    dropped_edges: List[DroppedEdgeModel] = Field(default_factory=list)


class SerializeRequest(BaseModel):
    """Convert an editable flow back to its stored form."""

    flow: EditableFlow
    definitions: Optional[Dict[str, AgentDefinition]] = None
    previous: Optional[AgentFlow] = None
    strict: bool = False


class CoercionIssueModel(BaseModel):
    node_id: Optional[str] = None
    key: str
    expected_type: str
    raw_value: Any = None
    message: str


class SerializeResponse(BaseModel):
    flow: AgentFlow
    issues: List[CoercionIssueModel] = Field(default_factory=list)


class ConfigLoadRequest(BaseModel):
    """Coerce a single config bag to its editable form."""

    config: Optional[Dict[str, Any]] = None
    config_schema: Optional[ConfigSchema] = Field(default=None, alias="schema")


class ConfigSaveRequest(BaseModel):
    """Coerce a single editable config bag to its stored form."""

    config: Optional[Dict[str, Any]] = None
    config_schema: Optional[ConfigSchema] = Field(default=None, alias="schema")
    previous: Optional[Dict[str, Any]] = None
    node_id: Optional[str] = None


class ConfigSaveResponse(BaseModel):
    config: Optional[Dict[str, Any]] = None
    issues: List[CoercionIssueModel] = Field(default_factory=list)


__all__ = [
    "CoercionIssueModel",
    "ConfigLoadRequest",
    "ConfigSaveRequest",
    "ConfigSaveResponse",
    "DeserializeRequest",
    "DeserializeResponse",
    "DroppedEdgeModel",
    "SerializeRequest",
    "SerializeResponse",
]
