"""Command-line interface router for kepview."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from collections.abc import Iterator, Mapping, Sequence
from contextlib import contextmanager
from pathlib import Path

from kepview.config import (
    ConfigLoadError,
    ConfigValidationError,
    load_config,
)
from kepview.config.schema import SORT_CHOICES
from kepview.observability import setup_logging, shutdown_logging
from kepview.proposals import (
    DocumentFailure,
    EnhancementFinder,
    FileOpener,
    Proposal,
    ProposalError,
    ProposalParser,
    Proposals,
    default_filters,
    find_proposals,
    validate_proposal,
)


class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code.

    Must stay mutable: ``contextlib`` assigns ``__traceback__`` when it
    re-raises out of ``_logging_scope``.
    """

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code

    def __str__(self) -> str:
        return self.message


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for all supported CLI workflows."""

    parser = argparse.ArgumentParser(
        prog="kepview",
        description=(
            "kepview: browse and validate enhancement proposal metadata.\n\n"
            "Common workflows:\n"
            "  kepview list keps/                   List proposals, newest first\n"
            "  kepview list --status implementable  Only implementable proposals\n"
            "  kepview validate keps/               Report metadata violations\n"
            "  kepview show keps/0001-foo.md        Show one proposal\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to kepview TOML config (default: ./kepview.toml if present).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Emit debug logs to stderr.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # list ----------------------------------------------------------------
    list_parser = subparsers.add_parser(
        "list",
        parents=[common],
        help="List proposals found under a directory",
        description=(
            "Discover proposals, optionally filter them, and print them sorted.\n\n"
            "Examples:\n"
            "  kepview list keps/\n"
            "  kepview list keps/ --sort title\n"
            "  kepview list keps/ --author @jpbetz --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    list_parser.add_argument("root", nargs="?", default=None, help="Directory to search")
    list_parser.add_argument(
        "--sort",
        choices=SORT_CHOICES,
        default=None,
        help="Sort key (default: output.sort from config)",
    )
    list_parser.add_argument("--author", default=None, help="Only proposals with this author")
    list_parser.add_argument("--status", default=None, help="Only proposals with this status")
    list_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    list_parser.set_defaults(handler=_cmd_list)

    # validate ------------------------------------------------------------
    validate_parser = subparsers.add_parser(
        "validate",
        parents=[common],
        help="Validate proposal metadata under a directory",
        description=(
            "Check every proposal against the metadata schema and report all violations.\n"
            "Exits 1 when any proposal is invalid or cannot be parsed.\n\n"
            "Examples:\n"
            "  kepview validate keps/\n"
            "  kepview validate keps/ --json\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    validate_parser.add_argument("root", nargs="?", default=None, help="Directory to search")
    validate_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    validate_parser.set_defaults(handler=_cmd_validate)

    # show ----------------------------------------------------------------
    show_parser = subparsers.add_parser(
        "show",
        parents=[common],
        help="Show the metadata of one proposal document",
    )
    show_parser.add_argument("path", help="Proposal document")
    show_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    show_parser.set_defaults(handler=_cmd_show)

    # config --------------------------------------------------------------
    config_parser = subparsers.add_parser(
        "config",
        parents=[common],
        help="Show effective configuration",
    )
    config_parser.add_argument("--json", action="store_true", help="Emit JSON output")
    config_parser.set_defaults(handler=_cmd_config)

    return parser


# ---------------------------------------------------------------------------
# Entrypoints
# ---------------------------------------------------------------------------


def run_cli(argv: Sequence[str] | None = None) -> int:
    """Parse argv, route to a command handler, and return process exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    try:
        result = handler(namespace)
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    return int(result)


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _cmd_list(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    root = _discovery_root(args, config)

    with _logging_scope(args, config) as logger:
        proposals, failures = _discover(root, config, logger)
        for key in ("author", "status"):
            value = getattr(args, key, None)
            if value is not None:
                proposals = proposals.filtered(key, value)
        sort_key = args.sort or _section(config, "output")["sort"]
        proposals.sort_by(sort_key)
        logger.debug("listing %d proposal(s) sorted by %s", len(proposals), sort_key)

    if _wants_json(args, config):
        _emit_json(
            {
                "command": "list",
                "root": root.as_posix(),
                "proposals": [_proposal_payload(p, root) for p in proposals],
                "failures": [_failure_payload(f, root) for f in failures],
            }
        )
        return 0

    renderer = _get_renderer(args)
    if not proposals:
        renderer.text(f"No proposals found under {root}")
    renderer.table(
        ("TITLE", "STATUS", "OWNING SIG", "CREATED", "FILE"),
        [
            (
                p.title,
                p.status,
                p.owning_sig,
                p.creation_date.isoformat() if p.creation_date else "",
                _display_path(p.filename, root),
            )
            for p in proposals
        ],
    )
    if failures:
        renderer.section("Unreadable documents:")
        renderer.items([f"{_display_path(f.path, root)}: {f.message}" for f in failures])
    return 0


def _cmd_validate(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    root = _discovery_root(args, config)

    with _logging_scope(args, config) as logger:
        proposals, failures = _discover(root, config, logger)

    results = [(proposal, validate_proposal(proposal)) for proposal in proposals]
    invalid = [item for item in results if item[1]]
    exit_code = 1 if invalid or failures else 0

    if _wants_json(args, config):
        _emit_json(
            {
                "command": "validate",
                "root": root.as_posix(),
                "valid": exit_code == 0,
                "results": [
                    {
                        "filename": _display_path(proposal.filename, root),
                        "violations": [issue.message for issue in issues],
                    }
                    for proposal, issues in results
                ],
                "failures": [_failure_payload(f, root) for f in failures],
            }
        )
        return exit_code

    renderer = _get_renderer(args)
    for proposal, issues in results:
        label = _display_path(proposal.filename, root)
        if not issues:
            renderer.ok(label)
            continue
        renderer.fail(label)
        renderer.items([issue.message for issue in issues])
    for failure in failures:
        renderer.fail(_display_path(failure.path, root))
        renderer.items([failure.message])

    renderer.blank()
    renderer.text(
        f"{len(results) - len(invalid)} valid, {len(invalid)} invalid, "
        f"{len(failures)} unreadable"
    )
    return exit_code


def _cmd_show(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    path = Path(args.path).expanduser()
    if not path.is_file():
        raise CLIError(f"not a file: {path}", exit_code=2)

    with _logging_scope(args, config) as logger:
        logger.debug("parsing %s", path)
        try:
            with FileOpener().open(str(path)) as stream:
                proposal = ProposalParser().parse(stream).with_filename(str(path))
        except (OSError, ProposalError) as exc:
            raise CLIError(f"{path}: {exc}", exit_code=1) from exc

    issues = validate_proposal(proposal)
    if _wants_json(args, config):
        payload = proposal.to_dict()
        payload["violations"] = [issue.message for issue in issues]
        _emit_json({"command": "show", "proposal": payload})
        return 0

    renderer = _get_renderer(args)
    for key, value in proposal.to_dict().items():
        if isinstance(value, list):
            value = ", ".join(value)
        renderer.kv(key, "" if value is None else value)
    if issues:
        renderer.section("Violations:")
        renderer.items([issue.message for issue in issues])
    return 0


def _cmd_config(args: argparse.Namespace) -> int:
    config = _load_effective_config(args)
    if _flag(args, "json"):
        _emit_json({"command": "config", "config": config})
        return 0

    renderer = _get_renderer(args)
    renderer.text(json.dumps(config, indent=2, sort_keys=True, ensure_ascii=False))
    return 0


# ---------------------------------------------------------------------------
# Rendering helpers
# ---------------------------------------------------------------------------


def _emit_json(payload: Mapping[str, object]) -> None:
    """Emit a JSON payload to stdout with deterministic formatting."""

    print(json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False))


def _get_renderer(args: argparse.Namespace):  # type: ignore[no-untyped-def]
    from kepview.ui.render import create_renderer

    return create_renderer(no_color=_flag(args, "no_color"), verbose=_flag(args, "verbose"))


def _proposal_payload(proposal: Proposal, root: Path) -> dict[str, object]:
    payload = proposal.to_dict()
    payload["filename"] = _display_path(proposal.filename, root)
    return payload


def _failure_payload(failure: DocumentFailure, root: Path) -> dict[str, object]:
    return {"filename": _display_path(failure.path, root), "error": failure.message}


def _display_path(path: str, root: Path) -> str:
    try:
        return Path(path).resolve().relative_to(root).as_posix()
    except ValueError:
        return Path(path).as_posix()


# ---------------------------------------------------------------------------
# Helpers: config and discovery
# ---------------------------------------------------------------------------


def _load_effective_config(args: argparse.Namespace) -> dict[str, object]:
    config_path = getattr(args, "config_path", None)
    try:
        return load_config(config_path)
    except (ConfigLoadError, ConfigValidationError) as exc:
        raise CLIError(str(exc), exit_code=2) from exc


def _section(config: Mapping[str, object], name: str) -> Mapping[str, object]:
    section = config.get(name)
    if not isinstance(section, Mapping):
        raise CLIError(f"config section [{name}] is missing", exit_code=2)
    return section


def _discovery_root(args: argparse.Namespace, config: Mapping[str, object]) -> Path:
    raw = getattr(args, "root", None)
    if raw is None:
        raw = _section(config, "discovery")["root"]
    candidate = Path(str(raw)).expanduser().resolve()
    if not candidate.is_dir():
        raise CLIError(f"proposal root is not a directory: {candidate}", exit_code=2)
    return candidate


def _discover(
    root: Path, config: Mapping[str, object], logger: logging.Logger
) -> tuple[Proposals, list[DocumentFailure]]:
    discovery = _section(config, "discovery")
    finder = EnhancementFinder(
        log=logger,
        filename_filters=default_filters(
            include_suffixes=_string_list(discovery.get("include_suffixes")),
            exclude_patterns=_string_list(discovery.get("exclude_patterns")),
        ),
    )
    try:
        proposals, failures = find_proposals(os.fspath(root), finder=finder)
    except OSError as exc:
        raise CLIError(f"cannot walk {root}: {exc}", exit_code=2) from exc
    logger.debug("found %d proposal(s), %d failure(s) under %s", len(proposals), len(failures), root)
    return proposals, failures


@contextmanager
def _logging_scope(
    args: argparse.Namespace, config: Mapping[str, object]
) -> Iterator[logging.Logger]:
    logger = setup_logging(_section(config, "observability"), verbose=_flag(args, "verbose"))
    try:
        yield logger
    finally:
        shutdown_logging()


def _wants_json(args: argparse.Namespace, config: Mapping[str, object]) -> bool:
    return _flag(args, "json") or _section(config, "output").get("format") == "json"


def _flag(args: argparse.Namespace, name: str) -> bool:
    return bool(getattr(args, name, False))


def _string_list(value: object) -> list[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


__all__ = ["CLIError", "build_parser", "run_cli"]
