import pytest

from i18n_scanner.config import build_configuration
from i18n_scanner.discovery import DiscoveryError
from i18n_scanner.models import CHECK_CALLS, CHECK_MARKUP
from i18n_scanner.pipeline import check_file, run_check
from i18n_scanner.reporting import DiagnosticReporter


APP = """import { message } from 'antd';

export function App() {
  const save = () => message.error("Save failed");
  return <div title="Dashboard">{t('app.title')}</div>;
}
"""

BROKEN = "export const Broken = () => <div>Unclosed;\nfunction (\n"

CLEAN = "export const Clean = () => <p>{t('clean.text')}</p>;\n"


def _project(tmp_path, **files):
    for name, content in files.items():
        path = tmp_path / "src" / name.replace("__", ".")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return tmp_path


def _keys(result):
    return sorted((item.file_path, item.finding.line, item.finding.column, item.finding.kind) for item in result.diagnostics)


def test_run_reports_findings_per_check(tmp_path):
    root = _project(tmp_path, App__tsx=APP, Clean__tsx=CLEAN)
    result = run_check(["src/**/*.{ts,tsx}"], root=root)

    assert result.passed is False
    assert result.files_scanned == 2
    assert result.files_skipped == 0
    assert result.check_verdicts == {CHECK_MARKUP: False, CHECK_CALLS: False}
    assert [item.finding.value for item in result.diagnostics] == ["Save failed", "Dashboard"]
    assert all(item.code_frame for item in result.diagnostics)


def test_broken_file_is_skipped_and_does_not_change_other_findings(tmp_path):
    root = _project(tmp_path, App__tsx=APP, Clean__tsx=CLEAN)
    before = run_check(["src/**/*.tsx"], root=root)

    (tmp_path / "src" / "Broken.tsx").write_text(BROKEN, encoding="utf-8")
    after = run_check(["src/**/*.tsx"], root=root)

    assert after.files_scanned == 3
    assert after.files_skipped == 1
    assert _keys(after) == _keys(before)


def test_single_check_run(tmp_path):
    root = _project(tmp_path, App__tsx=APP)

    markup = run_check(["src/**/*.tsx"], root=root, checks=[CHECK_MARKUP])
    calls = run_check(["src/**/*.tsx"], root=root, checks=[CHECK_CALLS])

    assert markup.checks == (CHECK_MARKUP,)
    assert [item.finding.value for item in markup.diagnostics] == ["Dashboard"]
    assert [item.finding.value for item in calls.diagnostics] == ["Save failed"]


def test_clean_project_passes(tmp_path):
    root = _project(tmp_path, Clean__tsx=CLEAN)
    result = run_check(["src/**/*.tsx"], root=root)

    assert result.passed is True
    assert result.diagnostics == ()
    assert all(result.check_verdicts.values())


def test_parallel_run_matches_sequential(tmp_path):
    files = {f"Page{index}__tsx": APP for index in range(6)}
    root = _project(tmp_path, **files)

    sequential = run_check(["src/**/*.tsx"], root=root, jobs=1)
    parallel = run_check(["src/**/*.tsx"], root=root, jobs=4)

    assert [item.to_dict() for item in parallel.diagnostics] == [item.to_dict() for item in sequential.diagnostics]


def test_custom_configuration_is_used(tmp_path):
    root = _project(tmp_path, App__tsx=APP)
    config = build_configuration({"allowPatterns": ["Save", "Dash"]})

    assert run_check(["src/**/*.tsx"], config, root=root).passed is True


def test_invalid_arguments(tmp_path):
    with pytest.raises(ValueError):
        run_check(["src/**/*.tsx"], root=tmp_path, checks=["spelling"])
    with pytest.raises(ValueError):
        run_check(["src/**/*.tsx"], root=tmp_path, checks=[])
    with pytest.raises(DiscoveryError):
        run_check(["src/{a"], root=tmp_path)


def test_check_file_primes_line_cache(tmp_path):
    root = _project(tmp_path, App__tsx=APP)
    path = str(root / "src" / "App.tsx")
    reporter = DiagnosticReporter()

    result = check_file(path, build_configuration({}), cache=reporter.cache)

    assert result.error is None
    assert len(result.findings) == 2
    assert path in reporter.cache


def test_check_file_reports_unreadable_file(tmp_path):
    result = check_file(str(tmp_path / "missing.tsx"), build_configuration({}))

    assert result.error
    assert result.findings == ()
