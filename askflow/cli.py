"""Command-line interface for askflow.

Commands:
- load:   wire flow JSON -> editable flow JSON (reports dropped edges)
- save:   editable flow JSON -> wire flow JSON (reports config coercion issues)
- import: read a flow file as a new flow (fresh ids, disabled nodes)
- serve:  run the transform web backend (FastAPI)
"""

from __future__ import annotations

import argparse
import json
from pathlib import Path
import sys
from typing import Any, List, Optional

from .config import configure_logging, load_definitions_file, load_settings
from .errors import AskflowError
from .visual.editing import import_flow
from .visual.models import AgentDefinitions, AgentFlow, EditableFlow
from .visual.transform import deserialize_flow, serialize_flow


def _build_parser() -> argparse.ArgumentParser:
    settings = load_settings()
    p = argparse.ArgumentParser(prog="askflow", add_help=True)
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="command")

    defs_default = str(settings.definitions_path) if settings.definitions_path else None

    load = sub.add_parser("load", help="Convert a stored flow to its editable form")
    load.add_argument("flow", help="Path to a stored flow JSON file")
    load.add_argument("--definitions", default=defs_default, help="Agent definitions JSON (default: $ASKFLOW_DEFINITIONS)")

    save = sub.add_parser("save", help="Convert an editable flow back to its stored form")
    save.add_argument("flow", help="Path to an editable flow JSON file")
    save.add_argument("--definitions", default=defs_default, help="Agent definitions JSON (default: $ASKFLOW_DEFINITIONS)")
    save.add_argument("--previous", default=None, help="Previously stored flow JSON, used for values that fail to convert")
    save.add_argument(
        "--lenient",
        action="store_true",
        default=not settings.strict_save,
        help="Write the flow even if some config values fail to convert",
    )

    imp = sub.add_parser("import", help="Import a flow file as a new flow")
    imp.add_argument("path", help="Path to a flow JSON file")
    imp.add_argument("--existing", action="append", default=None, help="Existing flow name (repeatable)")

    serve = sub.add_parser("serve", help="Run the transform web backend (FastAPI)")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--reload", action="store_true", help="Enable auto-reload (dev)")

    return p


def _read_json(path: str) -> Any:
    return json.loads(Path(path).expanduser().read_text(encoding="utf-8"))


def _write_json(value: Any) -> None:
    sys.stdout.write(json.dumps(value, indent=2, ensure_ascii=False) + "\n")


def _definitions(parser: argparse.ArgumentParser, path: Optional[str]) -> AgentDefinitions:
    if not path:
        parser.error("--definitions is required (or set ASKFLOW_DEFINITIONS)")
    return load_definitions_file(path)


def main(args: Optional[List[str]] = None) -> int:
    if args is None:
        args = sys.argv[1:]

    parser = _build_parser()
    ns = parser.parse_args(args)
    configure_logging(ns.log_level)

    try:
        if ns.command == "load":
            definitions = _definitions(parser, ns.definitions)
            flow = AgentFlow.model_validate(_read_json(ns.flow))
            loaded = deserialize_flow(flow, definitions)
            _write_json(
                {
                    "flow": loaded.flow.model_dump(),
                    "dropped_edges": [d.to_dict() for d in loaded.dropped_edges],
                }
            )
            for d in loaded.dropped_edges:
                sys.stderr.write(f"dropped edge '{d.edge.id}': {d.reason.value}\n")
            return 0

        if ns.command == "save":
            definitions = _definitions(parser, ns.definitions)
            flow = EditableFlow.model_validate(_read_json(ns.flow))
            previous = AgentFlow.model_validate(_read_json(ns.previous)) if ns.previous else None
            saved = serialize_flow(flow, definitions, previous=previous)
            for issue in saved.issues:
                sys.stderr.write(issue.describe() + "\n")
            if saved.issues and not ns.lenient:
                return 1
            _write_json(saved.flow.model_dump())
            return 0

        if ns.command == "import":
            flow = import_flow(ns.path, ns.existing or [])
            _write_json(flow.model_dump())
            return 0
    except AskflowError as e:
        sys.stderr.write(f"error: {e}\n")
        return 2

    if ns.command == "serve":
        try:
            import uvicorn  # type: ignore
        except Exception:
            sys.stderr.write(
                "Server dependencies are not installed.\n"
                "Install with: pip install \"askflow[server]\"\n"
            )
            return 2

        # Validate backend import early so we can give a clear error message.
        try:
            import web.backend.main  # noqa: F401
        except Exception as e:
            sys.stderr.write(
                "Failed to import the askflow web backend.\n"
                f"Error: {e}\n"
                "Run from a source checkout with: pip install \"askflow[server]\"\n"
            )
            return 2

        uvicorn.run(
            "web.backend.main:app",
            host=str(ns.host),
            port=int(ns.port),
            reload=bool(ns.reload),
            log_level=str(ns.log_level).lower(),
        )
        return 0

    parser.print_help()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
