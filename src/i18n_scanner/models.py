from __future__ import annotations

import fnmatch
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Mapping


KIND_MARKUP_TEXT = "markup-text"
KIND_MARKUP_ATTRIBUTE = "markup-attribute"
KIND_CALL_ARGUMENT = "call-argument"
KIND_OBJECT_PROPERTY = "object-property"
KIND_NESTED_OBJECT_PROPERTY = "nested-object-property"

CHECK_MARKUP = "markup"
CHECK_CALLS = "calls"
ALL_CHECKS = (CHECK_MARKUP, CHECK_CALLS)

DEFAULT_POLICY_KEY = "default"


@dataclass(frozen=True)
class AllowPattern:
    text: str
    regex: re.Pattern[str] | None = None

    def matches(self, value: str) -> bool:
        if self.regex is not None:
            return self.regex.search(value) is not None
        return self.text in value


@dataclass(frozen=True)
class CallPattern:
    text: str
    segments: tuple[str, ...]
    wildcard: bool = False

    def matches(self, callee_path: str) -> bool:
        if not self.wildcard:
            return callee_path == self.text
        parts = callee_path.split(".")
        if len(parts) != len(self.segments):
            return False
        return all(fnmatch.fnmatchcase(part, pattern) for part, pattern in zip(parts, self.segments))


@dataclass(frozen=True)
class ElementPolicy:
    check_props: tuple[str, ...] = ()
    allow_strings: bool = False
    allow_numbers: bool = True


@dataclass(frozen=True)
class PolicyOverride:
    check_props: tuple[str, ...] | None = None
    allow_strings: bool | None = None
    allow_numbers: bool | None = None

    def apply(self, base: ElementPolicy) -> ElementPolicy:
        return ElementPolicy(
            check_props=base.check_props if self.check_props is None else self.check_props,
            allow_strings=base.allow_strings if self.allow_strings is None else self.allow_strings,
            allow_numbers=base.allow_numbers if self.allow_numbers is None else self.allow_numbers,
        )


@dataclass(frozen=True)
class RuleConfiguration:
    notification_call_names: tuple[CallPattern, ...]
    user_facing_property_names: frozenset[str]
    allow_patterns: tuple[AllowPattern, ...]
    default_policy: ElementPolicy
    element_policies: Mapping[str, ElementPolicy] = field(default_factory=dict)
    component_policies: Mapping[str, ElementPolicy] = field(default_factory=dict)
    minimum_static_template_length: int = 3
    check_free_standing_properties: bool = False

    def is_notification_call(self, callee_path: str) -> bool:
        if not callee_path:
            return False
        return any(pattern.matches(callee_path) for pattern in self.notification_call_names)


@dataclass(frozen=True)
class Finding:
    file_path: str
    line: int
    column: int
    message: str
    kind: str
    value: str
    suggestion: str
    context_name: str | None = None

    @property
    def check(self) -> str:
        if self.kind in (KIND_MARKUP_TEXT, KIND_MARKUP_ATTRIBUTE):
            return CHECK_MARKUP
        return CHECK_CALLS

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Diagnostic:
    finding: Finding
    code_frame: str

    @property
    def file_path(self) -> str:
        return self.finding.file_path

    def to_dict(self) -> dict[str, Any]:
        payload = self.finding.to_dict()
        payload["code_frame"] = self.code_frame
        return payload


@dataclass(frozen=True)
class FileResult:
    file_path: str
    findings: tuple[Finding, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class RunResult:
    diagnostics: tuple[Diagnostic, ...]
    passed: bool
    duration_seconds: float
    checks: tuple[str, ...] = ALL_CHECKS
    check_verdicts: Mapping[str, bool] = field(default_factory=dict)
    files_scanned: int = 0
    files_skipped: int = 0

    def by_file(self) -> dict[str, list[Diagnostic]]:
        grouped: dict[str, list[Diagnostic]] = {}
        for item in self.diagnostics:
            grouped.setdefault(item.file_path, []).append(item)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "duration_seconds": round(self.duration_seconds, 3),
            "checks": list(self.checks),
            "check_verdicts": dict(self.check_verdicts),
            "files_scanned": self.files_scanned,
            "files_skipped": self.files_skipped,
            "findings_count": len(self.diagnostics),
            "findings": [item.to_dict() for item in self.diagnostics],
        }
