"""ticketsuite CLI.

Subcommands:
  from-text -> plain text to rich-text document JSON
  to-text   -> document JSON to plain text
  inspect   -> decode an issue (or bare fields) payload and print key fields
  get       -> fetch an issue from the server and inspect it
  schema    -> print the JSON Schemas used for strict decoding

Exit codes: 0 success, 1 decode error, 2 configuration or API error.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from .config import ClientConfig, config_from_env, load_config
from .datetimes import format_rfc3339
from .document import Document
from .errors import ConfigError, DecodeError, TrackerAPIError, classify_error
from .logging import configure_logging, get_logger
from .models import Issue
from .rest import IssueService, TrackerRestClient
from .schemas import get_schemas
from .serialization import decode_issue, decode_issue_fields

EXIT_OK = 0
EXIT_DECODE = 1
EXIT_FAILURE = 2

_MAX_HELP_WIDTH = 100


class _HelpFormatter(argparse.HelpFormatter):
    def __init__(self, prog: str) -> None:
        super().__init__(prog, max_help_position=30, width=_MAX_HELP_WIDTH)


class _FormatterArgumentParser(argparse.ArgumentParser):
    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("formatter_class", _HelpFormatter)
        super().__init__(*args, **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    p = _FormatterArgumentParser(
        prog="ticketsuite", description="Ticket tracker document and field tools"
    )
    sub = p.add_subparsers(
        dest="cmd",
        required=True,
        parser_class=_FormatterArgumentParser,
        metavar="<command>",
    )

    pf = sub.add_parser("from-text", help="Convert plain text to document JSON")
    pf.add_argument("file", nargs="?", default="-", help="Input file ('-' for stdin)")
    pf.add_argument("--compact", action="store_true", help="Single-line JSON output")

    pt = sub.add_parser("to-text", help="Extract plain text from document JSON")
    pt.add_argument("file", help="Document JSON file ('-' for stdin)")

    pi = sub.add_parser("inspect", help="Decode an issue payload and print key fields")
    pi.add_argument("file", help="Issue or fields JSON file ('-' for stdin)")

    pg = sub.add_parser("get", help="Fetch an issue and print key fields")
    pg.add_argument("key", help="Issue key or ID")
    pg.add_argument("--config", help="YAML config file (default: JIRA_* environment)")
    pg.add_argument("--no-dotenv", action="store_true", help="Do not load a .env file")

    psc = sub.add_parser("schema", help="Print JSON Schemas used for decoding")
    psc.add_argument("--name", choices=sorted(get_schemas()), help="Print a single schema")
    return p


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _inspection(issue: Issue) -> dict[str, Any]:
    due = issue.get_due_date()
    return {
        "key": issue.key,
        "summary": issue.get_summary(),
        "status": issue.get_status_name(),
        "due_date": format_rfc3339(due) if due is not None else None,
        "description": issue.get_description_text(),
        "custom_fields": issue.get_custom_fields().to_map(),
    }


def _cmd_from_text(args: argparse.Namespace) -> int:
    doc = Document.from_plain_text(_read_input(args.file))
    print(doc.to_json() if args.compact else str(doc))
    return EXIT_OK


def _cmd_to_text(args: argparse.Namespace) -> int:
    doc = Document.from_json(_read_input(args.file))
    print(doc.to_plain_text())
    return EXIT_OK


def _cmd_inspect(args: argparse.Namespace) -> int:
    raw = _read_input(args.file)
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        payload = None
    if isinstance(payload, dict) and "fields" in payload:
        issue = decode_issue(payload)
    else:
        issue = Issue(fields=decode_issue_fields(raw))
    print(json.dumps(_inspection(issue), indent=2))
    return EXIT_OK


def _load_client_config(args: argparse.Namespace) -> ClientConfig:
    if args.config:
        return load_config(args.config)
    return config_from_env(load_dotenv=not args.no_dotenv)


def _cmd_get(args: argparse.Namespace) -> int:
    cfg = _load_client_config(args)
    configure_logging(json_logging=cfg.logging_json_enabled, level=cfg.logging_level)
    service = IssueService(TrackerRestClient.from_config(cfg))
    issue = service.get(args.key)
    print(json.dumps(_inspection(issue), indent=2))
    return EXIT_OK


def _cmd_schema(args: argparse.Namespace) -> int:
    schemas = get_schemas()
    print(json.dumps(schemas[args.name] if args.name else schemas, indent=2))
    return EXIT_OK


_HANDLERS = {
    "from-text": _cmd_from_text,
    "to-text": _cmd_to_text,
    "inspect": _cmd_inspect,
    "get": _cmd_get,
    "schema": _cmd_schema,
}


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    handler = _HANDLERS.get(args.cmd)
    if handler is None:  # pragma: no cover - argparse enforces valid choices
        parser.print_help()
        return EXIT_FAILURE
    try:
        return handler(args)
    except DecodeError as exc:
        info = classify_error(exc)
        get_logger().debug("command failed", command=args.cmd, category=info.category)
        print(f"[error] {info.message}", file=sys.stderr)
        return EXIT_DECODE
    except (ConfigError, TrackerAPIError, OSError) as exc:
        info = classify_error(exc)
        get_logger().debug("command failed", command=args.cmd, category=info.category)
        print(f"[error] {info.category}: {info.message}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
