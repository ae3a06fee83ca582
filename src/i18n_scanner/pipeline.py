from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable

from i18n_scanner.config import default_configuration
from i18n_scanner.discovery import discover_files
from i18n_scanner.models import ALL_CHECKS, Diagnostic, FileResult, RuleConfiguration, RunResult
from i18n_scanner.reporting import DiagnosticReporter, FileLineCache
from i18n_scanner.scanners import ParseError, scan_source


logger = logging.getLogger(__name__)


def run_check(
    patterns: Iterable[str],
    config: RuleConfiguration | None = None,
    *,
    checks: Iterable[str] = ALL_CHECKS,
    root: str | Path = ".",
    jobs: int = 1,
    reporter: DiagnosticReporter | None = None,
) -> RunResult:
    started = time.perf_counter()
    config = config or default_configuration()
    reporter = reporter or DiagnosticReporter()

    requested = set(checks)
    unknown = requested.difference(ALL_CHECKS)
    if unknown:
        raise ValueError(f"Unknown checks: {', '.join(sorted(unknown))}")
    enabled = tuple(check for check in ALL_CHECKS if check in requested)
    if not enabled:
        raise ValueError("At least one check must be enabled")

    files = discover_files(patterns, root)

    if jobs > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            results = list(executor.map(lambda path: check_file(path, config, enabled, reporter.cache), files))
    else:
        results = [check_file(path, config, enabled, reporter.cache) for path in files]

    diagnostics: list[Diagnostic] = []
    skipped = 0
    for result in results:
        if result.error is not None:
            skipped += 1
            continue
        for finding in result.findings:
            diagnostics.append(reporter.format(finding, result.file_path))

    verdicts = {check: not any(item.finding.check == check for item in diagnostics) for check in enabled}

    return RunResult(
        diagnostics=tuple(diagnostics),
        passed=all(verdicts.values()),
        duration_seconds=time.perf_counter() - started,
        checks=enabled,
        check_verdicts=verdicts,
        files_scanned=len(files),
        files_skipped=skipped,
    )


def check_file(
    path: str,
    config: RuleConfiguration,
    checks: Iterable[str] = ALL_CHECKS,
    cache: FileLineCache | None = None,
) -> FileResult:
    try:
        source = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s: %s", path, exc)
        return FileResult(file_path=path, error=str(exc))

    try:
        findings = scan_source(source, path, config, checks)
    except ParseError as exc:
        logger.warning("Parse error in %s: %s", path, exc)
        return FileResult(file_path=path, error=str(exc))

    if findings and cache is not None:
        cache.prime(path, source)

    logger.debug("%s: %d finding(s)", path, len(findings))
    return FileResult(file_path=path, findings=tuple(findings))
