"""Environment-driven settings for the askflow CLI and web backend."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
from typing import Optional

from .errors import CatalogUnavailableError
from .visual.models import AgentDefinitions, parse_agent_definitions


def _flag_enabled(value: str | None) -> bool:
    s = str(value or "").strip().lower()
    return s in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    definitions_path: Optional[Path] = None
    strict_save: bool = True


def load_settings() -> Settings:
    raw_defs = str(os.getenv("ASKFLOW_DEFINITIONS") or "").strip()
    return Settings(
        host=os.getenv("ASKFLOW_HOST") or os.getenv("HOST") or "0.0.0.0",
        port=int(os.getenv("ASKFLOW_PORT") or os.getenv("PORT") or "8080"),
        log_level=os.getenv("LOG_LEVEL") or "info",
        definitions_path=Path(raw_defs).expanduser() if raw_defs else None,
        strict_save=not _flag_enabled(os.getenv("ASKFLOW_LENIENT_SAVE")),
    )


def configure_logging(level: str = "info") -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def load_definitions_file(path: str | Path) -> AgentDefinitions:
    """Read an agent catalog JSON file (`{name: definition}`)."""
    p = Path(path).expanduser()
    try:
        raw = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise CatalogUnavailableError(f"Failed to read agent definitions from {p}: {e}") from e
    if not isinstance(raw, dict):
        raise CatalogUnavailableError(f"Agent definitions in {p} must be a JSON object")
    return parse_agent_definitions(raw)
