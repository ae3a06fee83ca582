"""Hardcoded-text rules for the four syntactic contexts.

A value is *hardcoded* when it is literal text an end user would read and
it did not go through the translation function. Each ``check_*`` method
looks at one context and returns the findings it produced; none of them
keep state between calls.
"""

from __future__ import annotations

from typing import Iterable

from i18n_scanner.models import (
    KIND_CALL_ARGUMENT,
    KIND_MARKUP_ATTRIBUTE,
    KIND_MARKUP_TEXT,
    KIND_NESTED_OBJECT_PROPERTY,
    KIND_OBJECT_PROPERTY,
    ElementPolicy,
    Finding,
    RuleConfiguration,
)
from i18n_scanner.scanners.allowlist import is_allowed
from i18n_scanner.scanners.keys import suggest_key
from i18n_scanner.scanners.syntax import (
    ArrayLiteral,
    CallExpression,
    Expression,
    ExpressionContainer,
    Identifier,
    ImportBinding,
    MarkupElement,
    MarkupText,
    MemberAccess,
    NumberLiteral,
    ObjectLiteral,
    ObjectProperty,
    SpreadElement,
    StringLiteral,
    SyntaxNode,
    TemplateLiteral,
)
from i18n_scanner.scanners.values import extract_display_value, static_length


def callee_path(node: Expression | None) -> str:
    """Dotted name of a callee such as ``Message.error``; empty when it has no static name."""
    if isinstance(node, Identifier):
        return node.name
    if isinstance(node, MemberAccess):
        base = callee_path(node.object)
        if not base:
            return ""
        return f"{base}.{node.property}"
    return ""


def is_dom_tag(name: str) -> bool:
    if not name or "." in name:
        return False
    return name[0].islower()


class NodeClassifier:
    def __init__(
        self,
        config: RuleConfiguration,
        file_path: str,
        imports: Iterable[ImportBinding] = (),
    ):
        self.config = config
        self.file_path = file_path
        self._imports = {binding.local: binding for binding in imports}

    # Shared predicates

    def is_hardcoded(self, node: Expression | None) -> bool:
        if isinstance(node, StringLiteral):
            return not is_allowed(node.value, self.config)
        if isinstance(node, TemplateLiteral):
            return self._is_hardcoded_template(node)
        if isinstance(node, ExpressionContainer):
            return self.is_hardcoded(node.expression)
        return False

    def _is_hardcoded_template(self, node: TemplateLiteral) -> bool:
        if not node.has_interpolations:
            return not is_allowed(node.quasis[0] if node.quasis else "", self.config)
        return static_length(node) >= self.config.minimum_static_template_length

    def _is_invalid_content(self, node: Expression | None, policy: ElementPolicy) -> bool:
        if node is None:
            return False

        if isinstance(node, (MarkupText, StringLiteral)):
            value = node.value.strip()
            if not value or policy.allow_strings:
                return False
            return not is_allowed(value, self.config)

        if isinstance(node, NumberLiteral):
            return not policy.allow_numbers

        if isinstance(node, TemplateLiteral):
            if policy.allow_strings:
                return False
            return self._is_hardcoded_template(node)

        if isinstance(node, ExpressionContainer):
            return self._is_invalid_content(node.expression, policy)

        return False

    # Markup

    def resolve_policy(self, element: MarkupElement) -> ElementPolicy:
        name = element.name
        if not name:
            return self.config.default_policy

        if is_dom_tag(name):
            return self.config.element_policies.get(name, self.config.default_policy)

        for key in self._component_keys(name):
            policy = self.config.component_policies.get(key)
            if policy is not None:
                return policy
        return self.config.default_policy

    def _component_keys(self, name: str) -> list[str]:
        root, _, rest = name.partition(".")
        keys: list[str] = []
        binding = self._imports.get(root)
        if binding is not None:
            if binding.imported == "*":
                if rest:
                    keys.append(f"{binding.module}:{rest}")
            else:
                suffix = f".{rest}" if rest else ""
                keys.append(f"{binding.module}:{binding.imported}{suffix}")
        keys.append(name)
        return keys

    def check_markup_text(self, element: MarkupElement) -> list[Finding]:
        policy = self.resolve_policy(element)
        findings: list[Finding] = []
        for child in element.children:
            if not self._is_invalid_content(child, policy):
                continue
            value = extract_display_value(child)
            tag = element.name or "fragment"
            findings.append(
                self._finding(
                    child,
                    kind=KIND_MARKUP_TEXT,
                    message=f"Hardcoded text in <{tag}>",
                    value=value,
                    suggestion=f"{{t('{suggest_key(tag, value)}')}}",
                    context_name=element.name or None,
                )
            )
        return findings

    def check_markup_attributes(self, element: MarkupElement) -> list[Finding]:
        policy = self.resolve_policy(element)
        findings: list[Finding] = []
        for attribute in element.attributes:
            if attribute.name not in policy.check_props:
                continue
            if not self._is_invalid_content(attribute.value, policy):
                continue
            value = extract_display_value(attribute.value)
            findings.append(
                self._finding(
                    attribute.value or attribute,
                    kind=KIND_MARKUP_ATTRIBUTE,
                    message=f'Hardcoded markup attribute "{attribute.name}"',
                    value=value,
                    suggestion=f"{attribute.name}={{t('{suggest_key(attribute.name, value)}')}}",
                    context_name=attribute.name,
                )
            )
        return findings

    # Calls and object literals

    def check_notification_call(
        self,
        call: CallExpression,
        reached: set[tuple[int, int]] | None = None,
    ) -> list[Finding]:
        """Check every argument of a notification call.

        When ``reached`` is given, the spans of the object properties this
        call inspected are added to it.
        """
        name = callee_path(call.callee)
        if not self.config.is_notification_call(name):
            return []

        findings: list[Finding] = []
        seen = reached if reached is not None else set()
        for argument in call.arguments:
            self._check_argument(argument, name, findings, seen)
        return findings

    def _check_argument(
        self,
        node: Expression,
        call_name: str,
        findings: list[Finding],
        reached: set[tuple[int, int]],
    ) -> None:
        if isinstance(node, ObjectLiteral):
            self._expand_object(node, call_name, 0, findings, reached)
            return

        if isinstance(node, ArrayLiteral):
            for element in node.elements:
                self._check_argument(element, call_name, findings, reached)
            return

        if isinstance(node, SpreadElement):
            if isinstance(node.argument, (ObjectLiteral, ArrayLiteral)):
                self._check_argument(node.argument, call_name, findings, reached)
            return

        if self.is_hardcoded(node):
            value = extract_display_value(node)
            findings.append(
                self._finding(
                    node,
                    kind=KIND_CALL_ARGUMENT,
                    message=f"Hardcoded {call_name} message",
                    value=value,
                    suggestion=f"{call_name}(t('{suggest_key(call_name, value)}'))",
                    context_name=call_name,
                )
            )

    def _expand_object(
        self,
        node: ObjectLiteral,
        call_name: str,
        depth: int,
        findings: list[Finding],
        reached: set[tuple[int, int]],
    ) -> None:
        kind = KIND_OBJECT_PROPERTY if depth == 0 else KIND_NESTED_OBJECT_PROPERTY
        for member in node.properties:
            if isinstance(member, SpreadElement):
                if isinstance(member.argument, ObjectLiteral):
                    self._expand_object(member.argument, call_name, depth, findings, reached)
                continue

            if not isinstance(member, ObjectProperty):
                continue

            reached.add(member.span)
            value = member.value
            user_facing = member.key in self.config.user_facing_property_names
            if isinstance(value, ObjectLiteral):
                self._expand_object(value, call_name, depth + 1, findings, reached)
            elif isinstance(value, ArrayLiteral):
                self._expand_array(
                    value, member.key or "", call_name, depth + 1, user_facing, findings, reached
                )
            elif user_facing and self.is_hardcoded(value):
                findings.append(self._property_finding(member.key or "", value, kind, call_name))

    def _expand_array(
        self,
        node: ArrayLiteral,
        key: str,
        call_name: str,
        depth: int,
        user_facing: bool,
        findings: list[Finding],
        reached: set[tuple[int, int]],
    ) -> None:
        for element in node.elements:
            if isinstance(element, SpreadElement):
                element = element.argument
            if isinstance(element, ObjectLiteral):
                self._expand_object(element, call_name, depth, findings, reached)
            elif isinstance(element, ArrayLiteral):
                self._expand_array(element, key, call_name, depth, user_facing, findings, reached)
            elif user_facing and self.is_hardcoded(element):
                findings.append(self._property_finding(key, element, KIND_NESTED_OBJECT_PROPERTY, call_name))

    def _property_finding(self, key: str, value: Expression, kind: str, call_name: str | None) -> Finding:
        text = extract_display_value(value)
        if call_name:
            message = f'Hardcoded {call_name} object property "{key}"'
        else:
            message = f'Hardcoded object property "{key}"'
        return self._finding(
            value,
            kind=kind,
            message=message,
            value=text,
            suggestion=f"{key}: t('{suggest_key(key, text)}')",
            context_name=key,
        )

    def check_object_property(self, prop: ObjectProperty) -> Finding | None:
        if prop.key not in self.config.user_facing_property_names:
            return None

        value = prop.value
        if isinstance(value, ArrayLiteral):
            hardcoded = [element for element in value.elements if self.is_hardcoded(element)]
            if not hardcoded:
                return None
            text = ", ".join(extract_display_value(element) for element in hardcoded)
            return self._finding(
                value,
                kind=KIND_OBJECT_PROPERTY,
                message=f'Hardcoded object property "{prop.key}"',
                value=text,
                suggestion=f"{prop.key}: [t('{suggest_key(prop.key or '', extract_display_value(hardcoded[0]))}'), ...]",
                context_name=prop.key,
            )

        if self.is_hardcoded(value):
            return self._property_finding(prop.key or "", value, KIND_OBJECT_PROPERTY, None)
        return None

    def _finding(
        self,
        node: SyntaxNode,
        *,
        kind: str,
        message: str,
        value: str,
        suggestion: str,
        context_name: str | None,
    ) -> Finding:
        return Finding(
            file_path=self.file_path,
            line=node.position.line,
            column=node.position.column,
            message=message,
            kind=kind,
            value=value,
            suggestion=suggestion,
            context_name=context_name,
        )
