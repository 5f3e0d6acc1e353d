"""Agent flow models and the wire <-> editor transforms."""

from .capabilities import CONFIG_PORT_PREFIX, CapabilityIndex, build_capability_index, build_capability_indexes
from .coercion import ConfigSaveResult, load_config, save_config
from .models import AgentDefinition, AgentDefinitions, AgentFlow, EditableFlow, parse_agent_definitions
from .transform import DeserializedFlow, SerializedFlow, deserialize_flow, serialize_flow
from .validation import DroppedEdge, EdgeDropReason, validate_edges

__all__ = [
    "AgentDefinition",
    "AgentDefinitions",
    "AgentFlow",
    "CONFIG_PORT_PREFIX",
    "CapabilityIndex",
    "ConfigSaveResult",
    "DeserializedFlow",
    "DroppedEdge",
    "EdgeDropReason",
    "EditableFlow",
    "SerializedFlow",
    "build_capability_index",
    "build_capability_indexes",
    "deserialize_flow",
    "load_config",
    "parse_agent_definitions",
    "save_config",
    "serialize_flow",
    "validate_edges",
]
