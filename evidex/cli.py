from __future__ import annotations

import argparse
import json
import subprocess
import sys
from pathlib import Path
from typing import Any


REGULATION_CHOICES = ("ERISA", "MIFID II", "HIPAA")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="evidex compliance evidence viewer")
    parser.add_argument("--log-level", default=None, help="Logging level (default from env EVIDEX_LOG_LEVEL)")
    subparsers = parser.add_subparsers(dest="command", required=False)

    api_parser = subparsers.add_parser("api", help="Run the viewer HTTP API")
    api_parser.add_argument("--host", default=None)
    api_parser.add_argument("--port", type=int, default=None)

    view_parser = subparsers.add_parser("view", help="Open a document in the terminal viewer")
    view_parser.add_argument("document", help="Path to a PDF document")
    evidence_source = view_parser.add_mutually_exclusive_group()
    evidence_source.add_argument("--result", default=None, help="Evaluation result JSON to take evidence from")
    evidence_source.add_argument(
        "--evaluate",
        action="store_true",
        help="Run the evaluation backend on the document first and show its evidence",
    )
    view_parser.add_argument("--page", default=None, help="Printed page to open at")
    view_parser.add_argument("--fragment", default=None, help="Deep-link fragment, e.g. page-342")
    view_parser.add_argument("--regulation", choices=REGULATION_CHOICES, default="ERISA")

    evaluate_parser = subparsers.add_parser("evaluate", help="Evaluate a document and print the result JSON")
    evaluate_parser.add_argument("document", help="Path to a PDF document")
    evaluate_parser.add_argument("--regulation", choices=REGULATION_CHOICES, default="ERISA")
    evaluate_parser.add_argument("--output", default=None, help="Write the result to this file instead of stdout")

    test_parser = subparsers.add_parser("test", help="Run all tests with pytest")
    test_parser.add_argument(
        "pytest_args",
        nargs=argparse.REMAINDER,
        help="Optional extra pytest args; use `--` before args (e.g. evidex test -- -k offset)",
    )

    return parser


def run_tests(args: argparse.Namespace) -> int:
    cmd = [sys.executable, "-m", "pytest"]
    pytest_args = [arg for arg in args.pytest_args if arg != "--"] if args.pytest_args else []
    cmd.extend(pytest_args)
    print("Running:", " ".join(cmd))
    return subprocess.call(cmd)


def _evaluate(document: str, regulation: str) -> dict[str, Any]:
    from evidex.core.config import get_settings
    from evidex.core.input_discovery import validate_document
    from evidex.core.models import Regulation
    from evidex.runtime.evaluation_client import build_evaluation_client

    path = validate_document(document)
    client = build_evaluation_client(get_settings())
    return client.evaluate(path, Regulation(regulation))


def run_evaluate(args: argparse.Namespace) -> int:
    from evidex.runtime.evaluation_client import EvaluationError

    try:
        result = _evaluate(args.document, args.regulation)
    except (EvaluationError, ValueError) as exc:
        print(f"Evaluation failed: {exc}", file=sys.stderr)
        return 1

    payload = json.dumps(result, indent=2, ensure_ascii=False)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote {args.output}")
    else:
        print(payload)
    return 0


def _load_result(path: str) -> Any:
    return json.loads(Path(path).expanduser().read_text(encoding="utf-8"))


def run_view(args: argparse.Namespace) -> int:
    from evidex.core.evidence import flatten_evidence, parse_int
    from evidex.core.input_discovery import validate_document
    from evidex.runtime.evaluation_client import EvaluationError
    from evidex.tui.app import run_viewer

    try:
        path = validate_document(args.document)
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    result: Any = None
    if args.result:
        try:
            result = _load_result(args.result)
        except (OSError, json.JSONDecodeError) as exc:
            print(f"Could not read result {args.result}: {exc}", file=sys.stderr)
            return 1
    elif args.evaluate:
        try:
            result = _evaluate(str(path), args.regulation)
        except EvaluationError as exc:
            print(f"Evaluation failed: {exc}", file=sys.stderr)
            return 1

    run_viewer(
        str(path),
        evidence=flatten_evidence(result),
        target_page=parse_int(args.page),
        fragment=args.fragment,
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    from evidex.core.config import get_settings
    from evidex.core.log import configure_logging

    settings = get_settings()
    log_path = settings.state_path / "viewer.log" if args.command == "view" else None
    configure_logging(args.log_level or settings.log_level, log_path=log_path)

    if args.command == "api":
        import uvicorn

        from evidex.app.api import app

        host = args.host or settings.api_host
        port = args.port or settings.api_port
        uvicorn.run(app, host=host, port=port, log_level="info")
        return

    if args.command == "view":
        raise SystemExit(run_view(args))

    if args.command == "evaluate":
        raise SystemExit(run_evaluate(args))

    if args.command == "test":
        raise SystemExit(run_tests(args))

    parser.print_help()


if __name__ == "__main__":
    main()
