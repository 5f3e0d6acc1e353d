"""Schema-driven conversion of agent config bags between wire and editor form.

Load direction (wire -> editor) never fails: values that do not match their
declared type are kept raw and logged. Save direction (editor -> wire) collects
every failure as a `ConfigCoercionIssue` instead of writing a placeholder, and
lets the caller decide whether to abort (`raise_for_issues`) or keep going.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Dict, List, Mapping, Optional

from ..errors import ConfigCoercionError, ConfigCoercionIssue
from .models import AgentDefinitions, ConfigSchema
from .values import UntypedValue, value_class_for

logger = logging.getLogger(__name__)


@dataclass
class ConfigSaveResult:
    config: Optional[Dict[str, Any]]
    issues: List[ConfigCoercionIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def raise_for_issues(self) -> None:
        if self.issues:
            raise ConfigCoercionError(self.issues)


def _schema_types(schema: Optional[ConfigSchema]) -> Dict[str, Any]:
    return {key: entry.type for key, entry in (schema or [])}


def load_config(
    wire_config: Optional[Mapping[str, Any]],
    schema: Optional[ConfigSchema],
) -> Dict[str, Any]:
    """Build the editable config bag for a node.

    Schema defaults are applied first (in schema order), then every key of the
    wire bag overrides them. Undeclared wire keys are kept as-is.
    """
    config: Dict[str, Any] = {}
    for key, entry in schema or []:
        config[key] = entry.value
    if wire_config:
        for key, value in wire_config.items():
            config[key] = value

    types = _schema_types(schema)
    for key, value in config.items():
        if key not in types:
            continue
        value_cls = value_class_for(types[key])
        if value_cls is UntypedValue:
            continue
        try:
            config[key] = value_cls.from_wire(value).to_editable()
        except (TypeError, ValueError) as e:
            logger.warning("Keeping raw value for config '%s' (declared %s): %s", key, types[key], e)
    return config


def save_config(
    editable_config: Optional[Mapping[str, Any]],
    schema: Optional[ConfigSchema],
    *,
    node_id: Optional[str] = None,
    previous: Optional[Mapping[str, Any]] = None,
) -> ConfigSaveResult:
    """Convert an editable config bag back to its typed wire form.

    Without a schema the bag is copied unchanged. A key that fails to convert is
    reported and takes its value from `previous` (the last saved wire bag) when
    it has one; otherwise it is left out.
    """
    if editable_config is None:
        return ConfigSaveResult(config=None)

    if schema is None:
        return ConfigSaveResult(config=dict(editable_config))

    config: Dict[str, Any] = {}
    issues: List[ConfigCoercionIssue] = []
    types = _schema_types(schema)

    for key, entry in schema:
        if key not in editable_config:
            continue
        raw = editable_config[key]
        value_cls = value_class_for(entry.type)
        try:
            config[key] = value_cls.from_editable(raw).to_wire()
        except (TypeError, ValueError) as e:
            issue = ConfigCoercionIssue(
                node_id=node_id,
                key=key,
                expected_type=str(entry.type),
                raw_value=raw,
                message=str(e),
            )
            issues.append(issue)
            logger.info("Config coercion failed: %s", issue.describe())
            if previous is not None and key in previous:
                config[key] = previous[key]

    for key, value in editable_config.items():
        if key not in types:
            config[key] = value

    return ConfigSaveResult(config=config, issues=issues)


def load_global_configs(
    configs: Mapping[str, Optional[Mapping[str, Any]]],
    definitions: AgentDefinitions,
) -> Dict[str, Dict[str, Any]]:
    """Editable form of per-agent-type global configs."""
    out: Dict[str, Dict[str, Any]] = {}
    for def_name, config in configs.items():
        agent_def = definitions.get(def_name)
        schema = agent_def.global_config if agent_def is not None else None
        out[def_name] = load_config(config, schema)
    return out


def save_global_config(
    def_name: str,
    config: Optional[Mapping[str, Any]],
    definitions: AgentDefinitions,
    *,
    previous: Optional[Mapping[str, Any]] = None,
) -> ConfigSaveResult:
    """Wire form of one agent type's global config."""
    agent_def = definitions.get(def_name)
    schema = agent_def.global_config if agent_def is not None else None
    return save_config(config, schema, node_id=None, previous=previous)
