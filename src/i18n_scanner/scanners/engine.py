from __future__ import annotations

from pathlib import Path
from typing import Iterable

from i18n_scanner.models import ALL_CHECKS, CHECK_CALLS, CHECK_MARKUP, Finding, RuleConfiguration
from i18n_scanner.scanners.rules import NodeClassifier
from i18n_scanner.scanners.syntax import (
    CallExpression,
    MarkupElement,
    ObjectProperty,
    SyntaxTree,
    collect_imports,
    iter_nodes,
    parse_source,
)


def scan_source(
    source: str,
    file_path: str | Path,
    config: RuleConfiguration,
    checks: Iterable[str] = ALL_CHECKS,
) -> list[Finding]:
    tree = parse_source(source, file_path)
    return walk_tree(tree, config, checks)


def walk_tree(
    tree: SyntaxTree,
    config: RuleConfiguration,
    checks: Iterable[str] = ALL_CHECKS,
) -> list[Finding]:
    enabled = set(checks)
    markup = CHECK_MARKUP in enabled
    calls = CHECK_CALLS in enabled
    free_standing = calls and config.check_free_standing_properties

    classifier = NodeClassifier(config, tree.path, collect_imports(tree))
    findings: list[Finding] = []
    # Spans of properties already inspected through a notification call's arguments.
    reached: set[tuple[int, int]] = set()

    for node in iter_nodes(tree, include_properties=free_standing):
        if isinstance(node, MarkupElement):
            if markup:
                findings.extend(classifier.check_markup_text(node))
                findings.extend(classifier.check_markup_attributes(node))

        elif isinstance(node, CallExpression):
            if calls:
                findings.extend(classifier.check_notification_call(node, reached))

        elif isinstance(node, ObjectProperty):
            if node.span in reached:
                continue
            finding = classifier.check_object_property(node)
            if finding is not None:
                findings.append(finding)

    deduped: dict[tuple, Finding] = {}
    for item in findings:
        key = (item.line, item.column, item.kind, item.value)
        deduped.setdefault(key, item)

    return sorted(deduped.values(), key=lambda item: (item.line, item.column))
