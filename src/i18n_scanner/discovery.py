from __future__ import annotations

import fnmatch
import glob
import logging
from pathlib import Path
from typing import Iterable


logger = logging.getLogger(__name__)

SOURCE_GLOB = "**/*.{js,jsx,ts,tsx}"
DEFAULT_PATTERNS = (f"src/{SOURCE_GLOB}",)

DEFAULT_EXCLUDES = (
    "**/*.test.{js,jsx,ts,tsx}",
    "**/*.stories.{js,jsx,ts,tsx}",
    "**/*.spec.{js,jsx,ts,tsx}",
    "**/node_modules/**",
    "**/dist/**",
    "**/build/**",
)

_GLOB_CHARS = set("*?[{")


class DiscoveryError(RuntimeError):
    pass


def normalize_patterns(args: Iterable[str], root: str | Path = ".") -> list[str]:
    """Turn command-line arguments into glob patterns.

    A bare directory becomes ``<dir>/**/*.{js,jsx,ts,tsx}`` and a bare
    ``!dir`` exclusion becomes ``!dir/**``. No arguments at all means the
    ``src`` tree.
    """
    base = Path(root)
    patterns: list[str] = []
    for arg in args:
        if not arg:
            continue
        if arg.startswith("!"):
            body = arg[1:].rstrip("/")
            if body and not _has_glob(body) and not (base / body).is_file():
                body = f"{body}/**"
            patterns.append(f"!{body}")
            continue

        if _has_glob(arg) or (base / arg).is_file():
            patterns.append(arg)
        else:
            patterns.append(f"{arg.rstrip('/')}/{SOURCE_GLOB}")

    return patterns or list(DEFAULT_PATTERNS)


def split_patterns(patterns: Iterable[str]) -> tuple[list[str], list[str]]:
    includes: list[str] = []
    excludes: list[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            if pattern[1:]:
                excludes.append(pattern[1:])
        elif pattern:
            includes.append(pattern)
    return includes, excludes


def expand_braces(pattern: str) -> list[str]:
    start = pattern.find("{")
    if start == -1:
        if "}" in pattern:
            raise DiscoveryError(f"Unbalanced braces in pattern: {pattern!r}")
        return [pattern]

    depth = 0
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                end = index
                break
    else:
        raise DiscoveryError(f"Unbalanced braces in pattern: {pattern!r}")

    prefix, body, suffix = pattern[:start], pattern[start + 1:end], pattern[end + 1:]
    expanded: list[str] = []
    for option in _split_top_level(body):
        for tail in expand_braces(option + suffix):
            expanded.append(prefix + tail)
    return expanded


def _split_top_level(body: str) -> list[str]:
    options: list[str] = []
    depth = 0
    current = ""
    for char in body:
        if char == "," and depth == 0:
            options.append(current)
            current = ""
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current += char
    options.append(current)
    return options


def discover_files(
    patterns: Iterable[str],
    root: str | Path = ".",
    *,
    use_default_excludes: bool = True,
) -> list[str]:
    includes, excludes = split_patterns(patterns)
    if not includes:
        raise DiscoveryError("At least one include pattern is required")

    root_path = Path(root)
    if not root_path.is_dir():
        raise DiscoveryError(f"Root directory does not exist: {root_path}")

    exclude_globs: list[str] = []
    for pattern in (*(DEFAULT_EXCLUDES if use_default_excludes else ()), *excludes):
        exclude_globs.extend(expand_braces(pattern))

    logger.info("Include patterns: [%s]", ", ".join(includes))
    logger.info("Exclude patterns: [%s]", ", ".join(excludes))

    files: list[str] = []
    seen: set[str] = set()
    for pattern in includes:
        for expanded in expand_braces(pattern):
            try:
                matches = sorted(glob.glob(expanded, root_dir=root_path, recursive=True))
            except (OSError, ValueError) as exc:
                raise DiscoveryError(f"Failed to expand pattern {expanded!r}: {exc}") from exc

            for match in matches:
                relative = Path(match).as_posix()
                if relative in seen:
                    continue
                seen.add(relative)
                if not (root_path / relative).is_file():
                    continue
                if is_excluded(relative, exclude_globs):
                    logger.debug("Excluded %s", relative)
                    continue
                files.append(str(root_path / relative))

    logger.info("Files to check: %d", len(files))
    return files


def is_excluded(relative_path: str, exclude_globs: Iterable[str]) -> bool:
    for pattern in exclude_globs:
        if fnmatch.fnmatchcase(relative_path, pattern):
            return True
        if pattern.startswith("**/") and fnmatch.fnmatchcase(relative_path, pattern[3:]):
            return True
    return False


def _has_glob(text: str) -> bool:
    return any(char in _GLOB_CHARS for char in text)
