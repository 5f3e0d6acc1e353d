"""askflow: keeps agent flow graphs consistent with their agent catalog."""

__version__ = "0.1.0"

from .errors import (
    AskflowError,
    CatalogUnavailableError,
    ConfigCoercionError,
    ConfigCoercionIssue,
    FlowImportError,
    FlowSerializationError,
)
from .visual import deserialize_flow, serialize_flow

__all__ = [
    "AskflowError",
    "CatalogUnavailableError",
    "ConfigCoercionError",
    "ConfigCoercionIssue",
    "FlowImportError",
    "FlowSerializationError",
    "deserialize_flow",
    "serialize_flow",
]
