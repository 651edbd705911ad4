"""CLI entrypoints for doccov commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .drift import format_drift_summary_line, get_drift_summary
from .logging import configure_logging
from .orchestrator import Orchestrator
from .validation import SpecValidationError


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="doccov",
        description="Extract TypeScript API specs, measure documentation coverage and diff releases.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    spec_parser = subparsers.add_parser(
        "spec",
        help="Extract the OpenPkg spec for a package entry file.",
    )
    _add_verbose_option(spec_parser, suppress_default=True)
    spec_parser.add_argument(
        "entry",
        nargs="?",
        default=".",
        help="Entry file or package directory (defaults to current directory).",
    )
    spec_parser.add_argument(
        "-o",
        "--output",
        default="openpkg.json",
        help="Where to write the spec (defaults to openpkg.json).",
    )
    spec_parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum type nesting depth to serialize.",
    )
    spec_parser.add_argument(
        "--resolve-external-types",
        action="store_true",
        default=None,
        help="Follow types imported from node_modules.",
    )
    spec_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore and do not update the on-disk spec cache.",
    )

    check_parser = subparsers.add_parser(
        "check",
        help="Report documentation coverage and drift.",
    )
    _add_verbose_option(check_parser, suppress_default=True)
    check_parser.add_argument(
        "entry",
        nargs="?",
        default=".",
        help="Entry file or package directory (defaults to current directory).",
    )
    check_parser.add_argument(
        "--run-examples",
        action="store_true",
        default=None,
        help="Execute @example samples in a sandbox.",
    )
    check_parser.add_argument(
        "--min-coverage",
        type=int,
        default=None,
        help="Fail when the coverage score is below this percentage.",
    )
    check_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the doccov.json report to this path.",
    )

    diff_parser = subparsers.add_parser(
        "diff",
        help="Compare two spec files.",
    )
    _add_verbose_option(diff_parser, suppress_default=True)
    diff_parser.add_argument("base", help="Spec JSON of the previous release.")
    diff_parser.add_argument("head", help="Spec JSON of the new release.")
    diff_parser.add_argument(
        "--docs",
        nargs="+",
        default=[],
        metavar="FILE",
        help="Markdown files or directories to check for impacted samples.",
    )
    diff_parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Write the diff as JSON to this path.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for doccov commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    orchestrator = Orchestrator()

    if args.command == "spec":
        try:
            outcome = orchestrator.run_spec(
                args.entry,
                output=args.output,
                max_depth=args.max_depth,
                resolve_external_types=args.resolve_external_types,
                use_cache=False if args.no_cache else None,
            )
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (RuntimeError, ValueError) as exc:
            parser.exit(1, f"doccov spec failed: {exc}\nRun with --verbose for more details.\n")
        for diagnostic in outcome.diagnostics:
            if diagnostic.severity != "info":
                location = f"{diagnostic.file}: " if diagnostic.file else ""
                print(f"{diagnostic.severity}: {location}{diagnostic.message}", file=sys.stderr)
        source = " (cached)" if outcome.from_cache else ""
        print(
            f"Wrote {len(outcome.spec.exports)} exports to {_relativize(outcome.output_path)}{source}"
        )
    elif args.command == "check":
        try:
            result = orchestrator.run_check(
                args.entry,
                run_examples=args.run_examples,
                min_coverage=args.min_coverage,
                output=args.output,
            )
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except (RuntimeError, ValueError) as exc:
            parser.exit(1, f"doccov check failed: {exc}\nRun with --verbose for more details.\n")
        summary = result.report["summary"]
        print(
            f"Coverage: {summary['score']}% "
            f"({summary['documentedExports']}/{summary['totalExports']} exports fully documented)"
        )
        drifts = [drift for entry in result.spec.exports if entry.docs for drift in entry.docs.drift]
        print(format_drift_summary_line(get_drift_summary(drifts)))
        if result.output_path is not None:
            print(f"Report written to {_relativize(result.output_path)}")
        if not result.passed:
            parser.exit(1, "".join(f"{failure}\n" for failure in result.failures))
    elif args.command == "diff":
        try:
            diff = orchestrator.run_diff(args.base, args.head, docs=args.docs, output=args.output)
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except SpecValidationError as exc:
            parser.exit(1, f"doccov diff failed: {exc}\n")
        except RuntimeError as exc:
            parser.exit(1, f"doccov diff failed: {exc}\nRun with --verbose for more details.\n")
        if args.output is None:
            print(json.dumps(diff.to_dict(), indent=2))
        else:
            bump = diff.recommended_bump.bump if diff.recommended_bump else "none"
            print(
                f"{len(diff.breaking)} breaking, {len(diff.non_breaking)} non-breaking, "
                f"{len(diff.docs_only)} docs-only; recommended bump: {bump}"
            )
    elif args.command == "serve":
        from .service import run_service

        try:
            run_service(host=args.host, port=args.port)
        except RuntimeError as exc:
            parser.exit(1, f"doccov serve failed: {exc}\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _relativize(path: Path | None) -> str:
    if path is None:
        return "-"
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
