"""Async load/save routines against an agent host.

The host (whatever stores flows and publishes agent definitions) is abstracted
as `AgentFlowBackend`. These routines only sequence the calls: the agent catalog
is always fetched before any flow is transformed against it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from .errors import CatalogUnavailableError
from .visual.coercion import ConfigSaveResult, load_global_configs, save_global_config
from .visual.models import AgentDefinitions, AgentFlow, EditableFlow
from .visual.transform import DeserializedFlow, SerializedFlow, deserialize_flow, serialize_flow

logger = logging.getLogger(__name__)


class AgentFlowBackend(Protocol):
    async def fetch_agent_definitions(self) -> AgentDefinitions: ...

    async def fetch_flow(self, name: str) -> AgentFlow: ...

    async def save_flow(self, flow: AgentFlow) -> None: ...

    async def rename_flow(self, old_name: str, new_name: str) -> str: ...

    async def remove_flow(self, name: str) -> None: ...

    async def import_flow(self, path: str) -> AgentFlow: ...

    async def fetch_global_configs(self) -> Dict[str, Dict[str, Any]]: ...

    async def set_global_config(self, def_name: str, config: Dict[str, Any]) -> None: ...


async def fetch_catalog(backend: AgentFlowBackend) -> AgentDefinitions:
    """Fetch the agent catalog, failing fast if it cannot be obtained."""
    try:
        definitions = await backend.fetch_agent_definitions()
    except CatalogUnavailableError:
        raise
    except Exception as e:
        raise CatalogUnavailableError(f"Failed to fetch agent definitions: {e}") from e
    if definitions is None:
        raise CatalogUnavailableError("Agent host returned no agent definitions")
    return definitions


async def load_agent_flow(
    backend: AgentFlowBackend,
    name: str,
    *,
    definitions: Optional[AgentDefinitions] = None,
) -> DeserializedFlow:
    if definitions is None:
        definitions = await fetch_catalog(backend)
    flow = await backend.fetch_flow(name)
    return deserialize_flow(flow, definitions)


async def load_agent_flows(backend: AgentFlowBackend, names: Iterable[str]) -> Dict[str, DeserializedFlow]:
    definitions = await fetch_catalog(backend)
    out: Dict[str, DeserializedFlow] = {}
    for name in names:
        out[name] = await load_agent_flow(backend, name, definitions=definitions)
    return out


async def import_agent_flow(backend: AgentFlowBackend, path: str) -> DeserializedFlow:
    definitions = await fetch_catalog(backend)
    flow = await backend.import_flow(path)
    return deserialize_flow(flow, definitions)


async def save_agent_flow(
    backend: AgentFlowBackend,
    flow: EditableFlow,
    definitions: AgentDefinitions,
    *,
    previous: Optional[AgentFlow] = None,
    strict: bool = True,
) -> SerializedFlow:
    """Serialize and save `flow`.

    With `strict=True` (default) nothing is saved when any config value fails to
    coerce. Otherwise the flow is saved with failing values replaced from
    `previous` (or left out) and the issues are returned.
    """
    result = serialize_flow(flow, definitions, previous=previous, strict=strict)
    await backend.save_flow(result.flow)
    if result.issues:
        logger.warning("Saved flow '%s' with %d config issue(s)", flow.name, len(result.issues))
    return result


async def fetch_editable_global_configs(
    backend: AgentFlowBackend,
    definitions: AgentDefinitions,
) -> Dict[str, Dict[str, Any]]:
    configs = await backend.fetch_global_configs()
    return load_global_configs(configs or {}, definitions)


async def store_global_config(
    backend: AgentFlowBackend,
    def_name: str,
    config: Mapping[str, Any],
    definitions: AgentDefinitions,
    *,
    previous: Optional[Mapping[str, Any]] = None,
) -> ConfigSaveResult:
    """Coerce an editable global config and push it, unless it has issues."""
    result = save_global_config(def_name, config, definitions, previous=previous)
    result.raise_for_issues()
    await backend.set_global_config(def_name, dict(result.config or {}))
    return result


async def rename_agent_flow(backend: AgentFlowBackend, old_name: str, new_name: str) -> str:
    return await backend.rename_flow(old_name, new_name)


async def remove_agent_flow(backend: AgentFlowBackend, name: str) -> None:
    await backend.remove_flow(name)


def dropped_edge_summary(results: Mapping[str, DeserializedFlow]) -> List[str]:
    """Human-friendly lines describing edges dropped while loading flows."""
    lines: List[str] = []
    for name, loaded in results.items():
        for d in loaded.dropped_edges:
            lines.append(f"{name}: edge '{d.edge.id}' dropped ({d.reason.value})")
    return lines
