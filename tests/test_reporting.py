import csv
import json
import threading

import pytest

from i18n_scanner import reporting
from i18n_scanner.models import CHECK_CALLS, CHECK_MARKUP, Diagnostic, Finding, RunResult
from i18n_scanner.reporting import (
    DiagnosticReporter,
    FileLineCache,
    render_code_frame,
    render_summary,
    write_report_files,
)


def _finding(path, line=1, column=0, value="Hello", kind="markup-text"):
    return Finding(
        file_path=str(path),
        line=line,
        column=column,
        message="Hardcoded text in <p>",
        kind=kind,
        value=value,
        suggestion="{t('common.hello')}",
        context_name="p",
    )


def test_code_frame_marks_line_and_column():
    lines = ["one", "two", "three", "four", "five"]

    assert render_code_frame(lines, 3, 2, context_lines=1).splitlines() == [
        "  2 | two",
        "> 3 | three",
        "    |   ^",
        "  4 | four",
    ]


def test_code_frame_clamps_to_file_and_pads_gutter():
    lines = [f"line {number}" for number in range(1, 11)]
    frame = render_code_frame(lines, 10, 0).splitlines()

    assert frame[0] == "   8 | line 8"
    assert frame[2] == "> 10 | line 10"
    assert frame[-1].endswith("^")


def test_code_frame_keeps_tabs_before_caret():
    frame = render_code_frame(["\tfoo(x)"], 1, 5, context_lines=0).splitlines()
    assert frame[1] == "    | \t    ^"


def test_code_frame_out_of_range():
    with pytest.raises(IndexError):
        render_code_frame(["only"], 2, 0)


def test_line_cache_reads_each_file_once(tmp_path, monkeypatch):
    source = tmp_path / "App.tsx"
    source.write_text("a\nb\n", encoding="utf-8")

    calls = []
    read_lines = reporting._read_lines

    def counting(path):
        calls.append(path)
        return read_lines(path)

    monkeypatch.setattr(reporting, "_read_lines", counting)
    cache = FileLineCache()

    threads = [threading.Thread(target=cache.get, args=(source,)) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    source.unlink()
    assert cache.get(source) == ("a", "b", "")
    assert len(calls) == 1


def test_primed_cache_never_touches_disk(tmp_path, monkeypatch):
    monkeypatch.setattr(reporting, "_read_lines", lambda path: pytest.fail("file was read"))
    cache = FileLineCache()
    cache.prime(tmp_path / "x.ts", "first\r\nsecond")

    assert tmp_path / "x.ts" in cache
    assert cache.get(tmp_path / "x.ts") == ("first", "second")


def test_unreadable_file_gives_placeholder_frame(tmp_path):
    reporter = DiagnosticReporter()
    diagnostic = reporter.format(_finding(tmp_path / "missing.tsx"))

    assert diagnostic.code_frame.startswith("[code frame unavailable")


def test_report_groups_by_file_in_order(tmp_path):
    reporter = DiagnosticReporter(context_lines=0)
    reporter.cache.prime("b.tsx", "<p>Hello</p>\n<p>World</p>")
    reporter.cache.prime("a.tsx", "<p>Hello</p>")

    diagnostics = [
        reporter.format(_finding("b.tsx", 1, 3)),
        reporter.format(_finding("b.tsx", 2, 3, value="World")),
        reporter.format(_finding("a.tsx", 1, 3)),
    ]
    report = reporter.report(diagnostics)

    assert report.startswith("Found 3 hardcoded string(s) in 2 file(s)")
    assert report.index("b.tsx (2 finding(s))") < report.index("a.tsx (1 finding(s))")
    assert "Error 2: Hardcoded text in <p> [markup-text] at 2:3" in report
    assert "  Text: World" in report
    assert "> 2 | <p>World</p>" in report
    assert report.rstrip().endswith(reporting.FIX_GUIDE.splitlines()[-1])


def test_empty_report():
    assert DiagnosticReporter().report([]) == "No hardcoded text found."


def _result(diagnostics, passed):
    return RunResult(
        diagnostics=tuple(diagnostics),
        passed=passed,
        duration_seconds=0.25,
        checks=(CHECK_MARKUP, CHECK_CALLS),
        check_verdicts={CHECK_MARKUP: passed, CHECK_CALLS: True},
        files_scanned=4,
        files_skipped=1,
    )


def test_summary_lists_each_check():
    summary = render_summary(_result([], passed=False))

    assert "Markup text and attributes:" in summary
    assert "FAIL" in summary and "PASS" in summary
    assert "Files skipped:" in summary
    assert "0.25s" in summary


def test_report_files(tmp_path):
    diagnostic = Diagnostic(finding=_finding("src/App.tsx"), code_frame="> 1 | x")
    summary = write_report_files(_result([diagnostic], passed=False), tmp_path / "out")

    payload = json.loads((tmp_path / "out" / "summary.json").read_text(encoding="utf-8"))
    assert payload["counts"] == {"findings_total": 1, "files_with_findings": 1}
    assert payload["run"]["passed"] is False
    assert summary["files"]["findings"].endswith("findings.csv")

    with (tmp_path / "out" / "findings.csv").open(encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["file_path"] == "src/App.tsx"
    assert rows[0]["value"] == "Hello"
    assert rows[0]["code_frame"] == "> 1 | x"
