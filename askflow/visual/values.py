"""Tagged configuration values.

Each declared config type has one value class. A value is built from either its
wire form (`from_wire`) or its editor form (`from_editable`) and can render both
(`to_wire`, `to_editable`), so a config value carries its own conversion rules
instead of relying on a type table looked up at every access.

`None` means "unset" and is passed through untouched by every class.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import json
import math
from typing import Any, Dict, Optional, Type

from .models import ConfigValueType


@dataclass(frozen=True)
class ConfigValue:
    """Base class: an untyped value, stored and edited as-is."""

    value: Any

    type_name = "untyped"

    @classmethod
    def from_wire(cls, raw: Any) -> "ConfigValue":
        return cls(raw)

    @classmethod
    def from_editable(cls, raw: Any) -> "ConfigValue":
        return cls(raw)

    def to_wire(self) -> Any:
        return self.value

    def to_editable(self) -> Any:
        return self.value


class UntypedValue(ConfigValue):
    pass


class BoolValue(ConfigValue):
    type_name = ConfigValueType.BOOLEAN.value


class StrValue(ConfigValue):
    type_name = ConfigValueType.STRING.value


class TextValue(ConfigValue):
    type_name = ConfigValueType.TEXT.value


def _is_number(raw: Any) -> bool:
    return isinstance(raw, (int, float)) and not isinstance(raw, bool)


def _stored_number(raw: Any, kind: str) -> Any:
    if raw is None:
        return None
    if not _is_number(raw):
        raise TypeError(f"expected {kind}, got {type(raw).__name__}")
    if isinstance(raw, float) and not math.isfinite(raw):
        raise ValueError("not a finite number")
    return raw


def _number_text(raw: Any) -> Optional[str]:
    if raw is None:
        return None
    if not _is_number(raw):
        raise TypeError(f"expected a number, got {type(raw).__name__}")
    return str(raw)


class IntValue(ConfigValue):
    type_name = ConfigValueType.INTEGER.value

    @classmethod
    def from_wire(cls, raw: Any) -> "IntValue":
        return cls(_stored_number(raw, "an integer"))

    @classmethod
    def from_editable(cls, raw: Any) -> "IntValue":
        if raw is None:
            return cls(None)
        if _is_number(raw):
            if isinstance(raw, float) and not raw.is_integer():
                raise ValueError("not an integer")
            return cls(int(raw))
        if not isinstance(raw, str):
            raise TypeError(f"expected integer text, got {type(raw).__name__}")
        text = raw.strip()
        try:
            return cls(int(text))
        except ValueError:
            pass
        parsed = float(text)
        if not math.isfinite(parsed) or not parsed.is_integer():
            raise ValueError("not an integer")
        return cls(int(parsed))

    def to_editable(self) -> Any:
        return _number_text(self.value)


class NumValue(ConfigValue):
    type_name = ConfigValueType.NUMBER.value

    @classmethod
    def from_wire(cls, raw: Any) -> "NumValue":
        return cls(_stored_number(raw, "a number"))

    @classmethod
    def from_editable(cls, raw: Any) -> "NumValue":
        if raw is None:
            return cls(None)
        if _is_number(raw):
            parsed: Any = raw
        elif isinstance(raw, str):
            text = raw.strip()
            try:
                parsed = int(text)
            except ValueError:
                parsed = float(text)
        else:
            raise TypeError(f"expected number text, got {type(raw).__name__}")
        if isinstance(parsed, float) and not math.isfinite(parsed):
            raise ValueError("not a finite number")
        return cls(parsed)

    def to_editable(self) -> Any:
        return _number_text(self.value)


def _reject_constant(token: str) -> Any:
    raise ValueError(f"{token} is not valid JSON")


class JsonValue(ConfigValue):
    type_name = ConfigValueType.OBJECT.value

    @classmethod
    def from_editable(cls, raw: Any) -> "JsonValue":
        if isinstance(raw, str):
            return cls(json.loads(raw, parse_constant=_reject_constant))
        # Already structured (e.g. set programmatically); must still be strict JSON.
        json.dumps(raw, allow_nan=False)
        return cls(raw)

    def to_editable(self) -> Any:
        if self.value is None:
            return None
        return json.dumps(self.value, indent=2, ensure_ascii=False)


_VALUE_CLASSES: Dict[str, Type[ConfigValue]] = {
    ConfigValueType.BOOLEAN.value: BoolValue,
    ConfigValueType.INTEGER.value: IntValue,
    ConfigValueType.NUMBER.value: NumValue,
    ConfigValueType.STRING.value: StrValue,
    ConfigValueType.PASSWORD.value: StrValue,
    ConfigValueType.TEXT.value: TextValue,
    ConfigValueType.OBJECT.value: JsonValue,
}


def value_class_for(type_tag: Any) -> Type[ConfigValue]:
    """Return the value class for a declared type tag (unknown/absent -> untyped)."""
    if isinstance(type_tag, Enum):
        type_tag = type_tag.value
    if not isinstance(type_tag, str):
        return UntypedValue
    return _VALUE_CLASSES.get(type_tag, UntypedValue)
