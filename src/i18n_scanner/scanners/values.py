from __future__ import annotations

from i18n_scanner.scanners.syntax import (
    ExpressionContainer,
    MarkupText,
    NumberLiteral,
    StringLiteral,
    SyntaxNode,
    TemplateLiteral,
)


COMPLEX_EXPRESSION = "[complex expression]"
TEMPLATE_LITERAL = "[template literal]"


def extract_display_value(node: SyntaxNode | None) -> str:
    if node is None:
        return ""

    if isinstance(node, StringLiteral):
        return node.value

    if isinstance(node, MarkupText):
        return node.value.strip()

    if isinstance(node, TemplateLiteral):
        if not node.has_interpolations:
            return node.quasis[0] if node.quasis else ""
        return static_text(node) or TEMPLATE_LITERAL

    if isinstance(node, NumberLiteral):
        return node.raw

    if isinstance(node, ExpressionContainer):
        return extract_display_value(node.expression)

    return COMPLEX_EXPRESSION


def static_text(node: TemplateLiteral) -> str:
    return "".join(node.quasis)


def static_length(node: TemplateLiteral) -> int:
    return sum(len(part) for part in node.quasis)
