"""Exceptions raised by askflow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence


class AskflowError(Exception):
    """Base class for askflow errors."""


class CatalogUnavailableError(AskflowError):
    """Raised when a transform is attempted without a usable agent catalog."""


class FlowImportError(AskflowError):
    """Raised when a flow file cannot be imported."""


@dataclass(frozen=True)
class ConfigCoercionIssue:
    """A single configuration value that could not be converted to its declared type."""

    node_id: Optional[str]
    key: str
    expected_type: str
    raw_value: Any
    message: str

    def describe(self) -> str:
        where = f"node '{self.node_id}' " if self.node_id else ""
        return f"{where}config '{self.key}': expected {self.expected_type}, got {self.raw_value!r} ({self.message})"

    def to_dict(self) -> dict:
        return {
            "node_id": self.node_id,
            "key": self.key,
            "expected_type": self.expected_type,
            "raw_value": self.raw_value,
            "message": self.message,
        }


class ConfigCoercionError(AskflowError, ValueError):
    """Raised when one or more configuration values fail to coerce."""

    def __init__(self, issues: Sequence[ConfigCoercionIssue]):
        self.issues: List[ConfigCoercionIssue] = list(issues)
        lines = "; ".join(i.describe() for i in self.issues)
        super().__init__(f"{len(self.issues)} config value(s) failed to coerce: {lines}")


class FlowSerializationError(ConfigCoercionError):
    """Raised by strict flow serialization when any node config fails to coerce."""
