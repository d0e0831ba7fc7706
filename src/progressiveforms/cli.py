"""CLI entry point for ProgressiveForms."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from progressiveforms import __version__, logger
from progressiveforms.analysis import build_form_analyzer
from progressiveforms.dependencies import ensure_recommendation_dependencies
from progressiveforms.exceptions import InvalidRequestError, PackageError
from progressiveforms.logging import configure_logging
from progressiveforms.rule_store import RuleFileStore, default_rules, dump_rules
from progressiveforms.sessions import SessionService
from progressiveforms.settings import Settings, get_settings
from progressiveforms.store import InMemoryFormStore
from progressiveforms.typing.models import DisclosureRule, FormAnalysis, NewSession


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="progressiveforms")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser("analyze", help="Compute field visibility and completion for form data")
    analyze_parser.add_argument("--form-data", required=True, type=Path, dest="form_data_path")
    analyze_parser.add_argument("--rules", type=Path, default=None, dest="rules_path")
    analyze_parser.add_argument("--scheme", default=None, dest="scheme_id")
    analyze_parser.add_argument("--user", default="cli", dest="user_id")
    analyze_parser.add_argument("--no-ai", action="store_true", dest="no_ai")
    analyze_parser.add_argument("--output", type=Path, default=None, dest="output_path")

    rules_parser = subparsers.add_parser("rules", help="Manage disclosure rule files")
    rules_subparsers = rules_parser.add_subparsers(dest="rules_command")
    init_parser = rules_subparsers.add_parser("init", help="Write the built-in rules to a file")
    init_parser.add_argument("--output", type=Path, default=None, dest="output_path")

    return parser


def _load_form_data(path: Path) -> dict[str, Any]:
    """Read form data from a JSON file.

    Args:
        path (Path): JSON file path.

    Raises:
        InvalidRequestError: If the file is unreadable or not a JSON object.

    Returns:
        dict[str, Any]: Form data.
    """
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidRequestError(message=f"Cannot read form data: {exc}", field="form_data") from exc
    if not isinstance(payload, dict):
        raise InvalidRequestError(message="Form data must be a JSON object", field="form_data")
    return payload


def _load_rules(args: argparse.Namespace, settings: Settings) -> list[DisclosureRule]:
    """Load rules from the CLI path, the configured path, or the built-in set."""
    if args.rules_path is not None:
        return RuleFileStore(path=args.rules_path).load()
    configured = Path(settings.rules_path)
    if configured.is_file():
        return RuleFileStore(path=configured).load()
    logger.info("No rules file found, using built-in rules", extra={"rules_path": str(configured)})
    return default_rules()


def run_analyze(args: argparse.Namespace, settings: Settings) -> FormAnalysis:
    """Run one analysis against an ephemeral in-memory session.

    Args:
        args (argparse.Namespace): Parsed CLI args.
        settings (Settings): Runtime settings.

    Returns:
        FormAnalysis: Analysis result.
    """
    if args.no_ai:
        settings = settings.model_copy(update={"recommendations_enabled": False})
    else:
        ensure_recommendation_dependencies()

    form_data = _load_form_data(args.form_data_path)
    store = InMemoryFormStore(rules=_load_rules(args, settings))
    session_id = SessionService(store).create_session(NewSession(user_id=args.user_id))
    analyzer = build_form_analyzer(store, settings)
    analysis, _ = analyzer.analyze_and_record(session_id, form_data, args.scheme_id)
    return analysis


def _write_output(text: str, output_path: Path | None) -> None:
    if output_path is None:
        sys.stdout.write(text + "\n")
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    logger.info("Output written", extra={"output_path": str(output_path)})


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to ``sys.argv[1:]``.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "rules" and args.rules_command == "init":
        if args.output_path is not None:
            RuleFileStore(path=args.output_path).save(default_rules())
        else:
            _write_output(dump_rules(default_rules()), None)
        return 0

    if args.command != "analyze":
        parser.print_help()
        return 0

    settings = get_settings()
    configure_logging(settings=settings)

    try:
        analysis = run_analyze(args, settings)
    except PackageError:
        logger.exception("Analysis failed")
        return 1
    except KeyboardInterrupt:
        logger.info("Analysis aborted by user")
        return 130
    except Exception:
        logger.exception("Unexpected error during analysis")
        return 1
    finally:
        settings.close_http_client()

    _write_output(analysis.model_dump_json(indent=2), args.output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
