import pytest

from i18n_scanner.discovery import (
    DEFAULT_PATTERNS,
    DiscoveryError,
    discover_files,
    expand_braces,
    is_excluded,
    normalize_patterns,
)


def _touch(root, *paths):
    for relative in paths:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("export {};\n", encoding="utf-8")


def _relative(files, root):
    return [str(path)[len(str(root)) + 1:].replace("\\", "/") for path in files]


def test_expand_braces():
    assert expand_braces("src/**/*.{js,ts}") == ["src/**/*.js", "src/**/*.ts"]
    assert expand_braces("{a,b/{c,d}}.tsx") == ["a.tsx", "b/c.tsx", "b/d.tsx"]
    assert expand_braces("plain.ts") == ["plain.ts"]

    with pytest.raises(DiscoveryError):
        expand_braces("src/{a,b")
    with pytest.raises(DiscoveryError):
        expand_braces("src/a}")


def test_normalize_patterns(tmp_path):
    _touch(tmp_path, "src/App.tsx", "lib/util.js")

    assert normalize_patterns([], tmp_path) == list(DEFAULT_PATTERNS)
    assert normalize_patterns(["lib", "src/App.tsx", "!src/legacy", "!**/*.d.ts"], tmp_path) == [
        "lib/**/*.{js,jsx,ts,tsx}",
        "src/App.tsx",
        "!src/legacy/**",
        "!**/*.d.ts",
    ]


def test_discovery_applies_default_and_user_excludes(tmp_path):
    _touch(
        tmp_path,
        "src/App.tsx",
        "src/App.test.tsx",
        "src/Button.stories.jsx",
        "src/legacy/Old.js",
        "src/utils/format.ts",
        "src/node_modules/pkg/index.js",
        "src/styles.css",
    )

    files = discover_files(["src/**/*.{js,jsx,ts,tsx}", "!src/legacy/**"], tmp_path)

    # One sorted batch per extension, in brace order.
    assert _relative(files, tmp_path) == ["src/utils/format.ts", "src/App.tsx"]


def test_discovery_without_default_excludes(tmp_path):
    _touch(tmp_path, "src/App.tsx", "src/App.test.tsx")

    files = discover_files(["src/**/*.tsx"], tmp_path, use_default_excludes=False)
    assert sorted(_relative(files, tmp_path)) == ["src/App.test.tsx", "src/App.tsx"]


def test_files_matched_twice_are_listed_once(tmp_path):
    _touch(tmp_path, "src/App.tsx")

    files = discover_files(["src/**/*.tsx", "src/App.tsx"], tmp_path)
    assert _relative(files, tmp_path) == ["src/App.tsx"]


def test_discovery_errors(tmp_path):
    with pytest.raises(DiscoveryError):
        discover_files(["!src/**"], tmp_path)
    with pytest.raises(DiscoveryError):
        discover_files(["src/**/*.tsx"], tmp_path / "missing")
    with pytest.raises(DiscoveryError):
        discover_files(["src/{a,b"], tmp_path)


def test_is_excluded_matches_top_level_paths():
    assert is_excluded("node_modules/pkg/index.js", ["**/node_modules/**"])
    assert is_excluded("src/a/b.test.tsx", ["**/*.test.tsx"])
    assert not is_excluded("src/App.tsx", ["**/*.test.tsx"])
