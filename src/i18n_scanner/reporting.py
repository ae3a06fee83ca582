from __future__ import annotations

import csv
import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Sequence

from i18n_scanner.models import CHECK_CALLS, CHECK_MARKUP, Diagnostic, Finding, RunResult


logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 2
SEPARATOR = "─" * 80

CHECK_LABELS = {
    CHECK_MARKUP: "Markup text and attributes",
    CHECK_CALLS: "Notification calls and properties",
}

FIX_GUIDE = """How to fix:
  1. Markup text:        <div>Hello</div>            ->  <div>{t('common.hello')}</div>
  2. Attribute values:   <img alt="Logo" />          ->  <img alt={t('alt.logo')} />
  3. Notification calls: message.error('Failed')     ->  message.error(t('error.failed'))
  4. Object properties:  title: 'Settings'           ->  title: t('title.settings')
Suggested keys are derived from the text; check them against your locale files before editing."""


class FileLineCache:
    """Lines of each source file, read at most once per process."""

    def __init__(self):
        self._lines: dict[str, tuple[str, ...] | None] = {}
        self._lock = threading.Lock()

    def prime(self, path: str | Path, content: str) -> None:
        key = str(path)
        with self._lock:
            if key not in self._lines:
                self._lines[key] = split_lines(content)

    def get(self, path: str | Path) -> tuple[str, ...] | None:
        key = str(path)
        with self._lock:
            if key not in self._lines:
                self._lines[key] = _read_lines(key)
            return self._lines[key]

    def __contains__(self, path: object) -> bool:
        with self._lock:
            return str(path) in self._lines


def split_lines(content: str) -> tuple[str, ...]:
    return tuple(line[:-1] if line.endswith("\r") else line for line in content.split("\n"))


def _read_lines(path: str) -> tuple[str, ...] | None:
    try:
        return split_lines(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Cannot read %s for code frame: %s", path, exc)
        return None


def render_code_frame(
    lines: Sequence[str],
    line: int,
    column: int,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> str:
    if line < 1 or line > len(lines):
        raise IndexError(f"line {line} is outside the file ({len(lines)} lines)")

    start = max(1, line - context_lines)
    end = min(len(lines), line + context_lines)
    width = len(str(end))

    rendered: list[str] = []
    for number in range(start, end + 1):
        content = lines[number - 1]
        gutter = str(number).rjust(width)
        if number == line:
            rendered.append(f"> {gutter} | {content}".rstrip())
            # Keep tabs so the caret lines up with the rendered source.
            padding = "".join("\t" if char == "\t" else " " for char in content[:column])
            rendered.append(f"  {' ' * width} | {padding}^")
        else:
            rendered.append(f"  {gutter} | {content}".rstrip())
    return "\n".join(rendered)


class DiagnosticReporter:
    def __init__(
        self,
        cache: FileLineCache | None = None,
        context_lines: int = DEFAULT_CONTEXT_LINES,
    ):
        self.cache = cache if cache is not None else FileLineCache()
        self.context_lines = max(0, int(context_lines))

    def format(self, finding: Finding, file_path: str | None = None) -> Diagnostic:
        path = file_path or finding.file_path
        return Diagnostic(finding=finding, code_frame=self.code_frame(path, finding.line, finding.column))

    def code_frame(self, file_path: str, line: int, column: int) -> str:
        lines = self.cache.get(file_path)
        if lines is None:
            return f"[code frame unavailable: cannot read {file_path}]"
        try:
            return render_code_frame(lines, line, column, self.context_lines)
        except IndexError as exc:
            logger.debug("No code frame for %s: %s", file_path, exc)
            return f"[code frame unavailable: {file_path}:{line}:{column}]"

    def report(self, diagnostics: Iterable[Diagnostic]) -> str:
        items = list(diagnostics)
        if not items:
            return "No hardcoded text found."

        grouped: dict[str, list[Diagnostic]] = {}
        for item in items:
            grouped.setdefault(item.file_path, []).append(item)

        report: list[str] = [f"Found {len(items)} hardcoded string(s) in {len(grouped)} file(s)", ""]
        for file_path, file_items in grouped.items():
            report.append(f"{file_path} ({len(file_items)} finding(s))")
            report.append(SEPARATOR)
            for index, item in enumerate(file_items, start=1):
                finding = item.finding
                report.append(f"Error {index}: {finding.message} [{finding.kind}] at {finding.line}:{finding.column}")
                report.append(f"  Text: {finding.value}")
                if finding.suggestion:
                    report.append(f"  Suggestion: {finding.suggestion}")
                report.append(item.code_frame)
                if index < len(file_items):
                    report.append("")
            report.append(SEPARATOR)
            report.append("")

        report.append(FIX_GUIDE)
        return "\n".join(report)


def render_summary(result: RunResult) -> str:
    lines = ["=" * 60, "Summary", "-" * 30]
    for check in result.checks:
        status = "PASS" if result.check_verdicts.get(check, True) else "FAIL"
        lines.append(f"{CHECK_LABELS.get(check, check) + ':':<36}{status}")
    lines.append("-" * 30)
    lines.append(f"{'Files scanned:':<36}{result.files_scanned}")
    if result.files_skipped:
        lines.append(f"{'Files skipped:':<36}{result.files_skipped}")
    lines.append(f"{'Elapsed:':<36}{result.duration_seconds:.2f}s")
    lines.append("-" * 30)
    if result.passed:
        lines.append("All hardcoding checks passed.")
    else:
        lines.append("Hardcoded text found. Fix the findings above and run again.")
    lines.append("=" * 60)
    return "\n".join(lines)


def write_report_files(result: RunResult, output_dir: str | Path) -> dict:
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    summary = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "run": {key: value for key, value in result.to_dict().items() if key != "findings"},
        "counts": {
            "findings_total": len(result.diagnostics),
            "files_with_findings": len(result.by_file()),
        },
        "files": {},
    }

    summary_json = out_dir / "summary.json"
    findings_csv = out_dir / "findings.csv"

    _write_csv(findings_csv, [item.to_dict() for item in result.diagnostics])
    summary["files"] = {
        "summary": str(summary_json.resolve()),
        "findings": str(findings_csv.resolve()),
    }
    _write_json(summary_json, summary)
    return summary


def _write_json(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, ensure_ascii=False)


def _write_csv(path: Path, rows: list[dict]) -> None:
    with path.open("w", encoding="utf-8", newline="") as handle:
        if not rows:
            handle.write("")
            return

        fieldnames: list[str] = []
        seen = set()
        for row in rows:
            for key in row:
                if key not in seen:
                    seen.add(key)
                    fieldnames.append(key)

        writer = csv.DictWriter(handle, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)
