from __future__ import annotations

import argparse
import dataclasses
import json
import logging

from i18n_scanner.config import ConfigError, default_configuration, load_config
from i18n_scanner.discovery import DiscoveryError, normalize_patterns
from i18n_scanner.models import ALL_CHECKS, CHECK_CALLS, CHECK_MARKUP
from i18n_scanner.pipeline import run_check
from i18n_scanner.reporting import DEFAULT_CONTEXT_LINES, DiagnosticReporter, render_summary, write_report_files
from i18n_scanner.scanners.keys import suggest_key


logger = logging.getLogger("i18n_scanner")

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="i18n-scanner",
        description="Find user-facing text in JS/TS/JSX sources that bypasses the i18n lookup function",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check_parser = subparsers.add_parser("check", help="Scan source files for hardcoded text")
    check_parser.add_argument(
        "patterns",
        nargs="*",
        help="Glob patterns or directories to check; prefix with ! to exclude (default: src)",
    )
    check_parser.add_argument("--root", default=".", help="Directory the patterns are relative to")
    check_parser.add_argument("--config", default=None, help="JSON rule configuration")
    only = check_parser.add_mutually_exclusive_group()
    only.add_argument("--markup-only", action="store_true", help="Only check markup text and attributes")
    only.add_argument("--calls-only", action="store_true", help="Only check notification calls and properties")
    check_parser.add_argument(
        "--check-free-standing-properties",
        action="store_true",
        help="Also flag user-facing object properties outside notification calls",
    )
    check_parser.add_argument("--context-lines", type=int, default=DEFAULT_CONTEXT_LINES)
    check_parser.add_argument("--jobs", type=int, default=1, help="Files to scan in parallel")
    check_parser.add_argument("--format", choices=["text", "json"], default="text")
    check_parser.add_argument("--output-dir", default=None, help="Also write summary.json and findings.csv here")
    verbosity = check_parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true")
    verbosity.add_argument("-q", "--quiet", action="store_true")

    key_parser = subparsers.add_parser("suggest-key", help="Print the suggested i18n key for a text")
    key_parser.add_argument("context", help="Call, property or attribute name, e.g. Message.error")
    key_parser.add_argument("value", help="The hardcoded text")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "suggest-key":
        print(suggest_key(args.context, args.value))
        return EXIT_OK

    if args.command == "check":
        _configure_logging(verbose=args.verbose, quiet=args.quiet)

        try:
            config = load_config(args.config) if args.config else default_configuration()
        except ConfigError as exc:
            parser.error(str(exc))
            return EXIT_FATAL

        if args.check_free_standing_properties:
            config = dataclasses.replace(config, check_free_standing_properties=True)

        if args.markup_only:
            checks = (CHECK_MARKUP,)
        elif args.calls_only:
            checks = (CHECK_CALLS,)
        else:
            checks = ALL_CHECKS

        patterns = normalize_patterns(args.patterns, args.root)
        reporter = DiagnosticReporter(context_lines=args.context_lines)
        try:
            result = run_check(
                patterns,
                config,
                checks=checks,
                root=args.root,
                jobs=max(1, args.jobs),
                reporter=reporter,
            )
        except DiscoveryError as exc:
            logger.error("File discovery failed: %s", exc)
            return EXIT_FATAL

        if args.output_dir:
            written = write_report_files(result, args.output_dir)
            logger.info("Report files written: %s", ", ".join(written["files"].values()))

        if args.format == "json":
            print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(reporter.report(result.diagnostics))
            print(render_summary(result))

        return EXIT_OK if result.passed else EXIT_FINDINGS

    parser.error(f"Unsupported command: {args.command}")
    return EXIT_FATAL


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")


if __name__ == "__main__":
    raise SystemExit(main())
