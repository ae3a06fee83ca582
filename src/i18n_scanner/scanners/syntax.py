"""Typed syntax tree for JS/TS/JSX sources, built on tree-sitter.

tree-sitter trees are converted into a small closed set of frozen node
classes. The classifier only ever sees these classes, so every shape it
has to handle is listed in ``Expression`` below.

Positions are 1-based lines and 0-based character columns. tree-sitter
reports byte columns, which differ from character columns as soon as a
line holds non-ASCII text before the node.
"""

from __future__ import annotations

import bisect
import html
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Union

from tree_sitter import Language, Node, Parser


class ParseError(ValueError):
    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column


@dataclass(frozen=True)
class Position:
    line: int
    column: int


@dataclass(frozen=True)
class SyntaxNode:
    position: Position
    span: tuple[int, int]


@dataclass(frozen=True)
class StringLiteral(SyntaxNode):
    value: str


@dataclass(frozen=True)
class NumberLiteral(SyntaxNode):
    raw: str


@dataclass(frozen=True)
class TemplateLiteral(SyntaxNode):
    quasis: tuple[str, ...]
    expression_count: int

    @property
    def has_interpolations(self) -> bool:
        return self.expression_count > 0


@dataclass(frozen=True)
class Identifier(SyntaxNode):
    name: str


@dataclass(frozen=True)
class MemberAccess(SyntaxNode):
    object: "Expression"
    property: str


@dataclass(frozen=True)
class SpreadElement(SyntaxNode):
    argument: "Expression"


@dataclass(frozen=True)
class ObjectProperty(SyntaxNode):
    key: str | None
    value: "Expression"


@dataclass(frozen=True)
class ObjectLiteral(SyntaxNode):
    properties: tuple["Expression", ...]


@dataclass(frozen=True)
class ArrayLiteral(SyntaxNode):
    elements: tuple["Expression", ...]


@dataclass(frozen=True)
class CallExpression(SyntaxNode):
    callee: "Expression"
    arguments: tuple["Expression", ...]


@dataclass(frozen=True)
class ExpressionContainer(SyntaxNode):
    expression: "Expression | None"


@dataclass(frozen=True)
class MarkupText(SyntaxNode):
    value: str


@dataclass(frozen=True)
class MarkupAttribute(SyntaxNode):
    name: str
    value: "Expression | None"


@dataclass(frozen=True)
class MarkupElement(SyntaxNode):
    name: str
    attributes: tuple[MarkupAttribute, ...]
    children: tuple["Expression", ...]


@dataclass(frozen=True)
class OtherNode(SyntaxNode):
    node_type: str


@dataclass(frozen=True)
class ImportBinding:
    module: str
    local: str
    imported: str


Expression = Union[
    StringLiteral,
    NumberLiteral,
    TemplateLiteral,
    Identifier,
    MemberAccess,
    SpreadElement,
    ObjectProperty,
    ObjectLiteral,
    ArrayLiteral,
    CallExpression,
    ExpressionContainer,
    MarkupText,
    MarkupAttribute,
    MarkupElement,
    OtherNode,
]

TYPESCRIPT_SUFFIXES = {".ts", ".mts", ".cts"}
JAVASCRIPT_SUFFIXES = {".js", ".jsx", ".mjs", ".cjs"}

_ELEMENT_TYPES = {"jsx_element", "jsx_self_closing_element", "jsx_fragment"}
_TEXT_TYPES = {"jsx_text", "html_character_reference"}
_SKIPPED_TYPES = {"comment", "html_comment"}

_ESCAPE_RE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_SURROGATE_RE = re.compile("[\ud800-\udfff]")
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}

_LANGUAGES: dict[str, Language] = {}


@dataclass(frozen=True)
class SyntaxTree:
    path: str
    root: Node
    source: bytes
    line_starts: tuple[int, ...]

    def position(self, byte_offset: int) -> Position:
        index = bisect.bisect_right(self.line_starts, byte_offset) - 1
        line_start = self.line_starts[index]
        prefix = self.source[line_start:byte_offset].decode("utf-8", errors="replace")
        return Position(line=index + 1, column=len(prefix))

    def text(self, node: Node) -> str:
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def language_for(path: str | Path) -> Language:
    suffix = Path(path).suffix.lower()
    if suffix in TYPESCRIPT_SUFFIXES:
        name = "typescript"
    elif suffix in JAVASCRIPT_SUFFIXES:
        name = "javascript"
    else:
        name = "tsx"

    if name not in _LANGUAGES:
        _LANGUAGES[name] = _load_language(name)
    return _LANGUAGES[name]


def _load_language(name: str) -> Language:
    if name == "javascript":
        import tree_sitter_javascript as ts_javascript

        return Language(ts_javascript.language())

    import tree_sitter_typescript as ts_typescript

    if name == "typescript":
        return Language(ts_typescript.language_typescript())
    return Language(ts_typescript.language_tsx())


def parse_source(source: str, path: str | Path) -> SyntaxTree:
    data = source.encode("utf-8")
    parser = Parser(language_for(path))
    tree = parser.parse(data)

    line_starts = [0]
    for match in re.finditer(b"\n", data):
        line_starts.append(match.end())

    syntax = SyntaxTree(path=str(path), root=tree.root_node, source=data, line_starts=tuple(line_starts))
    if tree.root_node.has_error:
        broken = _first_error(tree.root_node)
        position = syntax.position(broken.start_byte)
        if broken.is_missing:
            message = f"Missing {broken.type!r}"
        else:
            message = "Unexpected syntax"
        raise ParseError(
            f"{message} ({position.line}:{position.column})",
            line=position.line,
            column=position.column,
        )
    return syntax


def _first_error(root: Node) -> Node:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        if node.has_error:
            stack.extend(reversed(node.children))
    return root


def collect_imports(tree: SyntaxTree) -> list[ImportBinding]:
    bindings: list[ImportBinding] = []
    for statement in tree.root.named_children:
        if statement.type != "import_statement":
            continue
        source_node = statement.child_by_field_name("source")
        if source_node is None:
            continue
        module = _string_value(tree, source_node)

        for clause in statement.named_children:
            if clause.type != "import_clause":
                continue
            for item in clause.named_children:
                if item.type == "identifier":
                    bindings.append(ImportBinding(module=module, local=tree.text(item), imported="default"))
                elif item.type == "namespace_import":
                    for name in item.named_children:
                        if name.type == "identifier":
                            bindings.append(ImportBinding(module=module, local=tree.text(name), imported="*"))
                elif item.type == "named_imports":
                    for spec in item.named_children:
                        if spec.type != "import_specifier":
                            continue
                        imported = spec.child_by_field_name("name")
                        alias = spec.child_by_field_name("alias")
                        if imported is None:
                            continue
                        bindings.append(
                            ImportBinding(
                                module=module,
                                local=tree.text(alias if alias is not None else imported),
                                imported=tree.text(imported),
                            )
                        )
    return bindings


def iter_nodes(tree: SyntaxTree, *, include_properties: bool = True) -> Iterator[SyntaxNode]:
    """Yield markup elements, calls and object properties in document order."""
    stack = [tree.root]
    while stack:
        node = stack.pop()
        node_type = node.type

        if node_type in _ELEMENT_TYPES:
            yield _element(tree, node)
        elif node_type == "call_expression":
            yield _call(tree, node, with_arguments=True)
        elif node_type == "pair" and include_properties:
            parent = node.parent
            if parent is not None and parent.type == "object":
                yield _pair(tree, node)

        stack.extend(reversed(node.children))


def to_expression(tree: SyntaxTree, node: Node) -> Expression:
    node_type = node.type
    position = tree.position(node.start_byte)
    span = (node.start_byte, node.end_byte)

    if node_type == "parenthesized_expression":
        inner = _named(node)
        if len(inner) == 1:
            return to_expression(tree, inner[0])
        return OtherNode(position=position, span=span, node_type=node_type)

    if node_type == "string":
        return StringLiteral(position=position, span=span, value=_string_value(tree, node))

    if node_type == "number":
        return NumberLiteral(position=position, span=span, raw=tree.text(node))

    if node_type == "template_string":
        return _template(tree, node)

    if node_type in {"identifier", "this", "undefined"}:
        return Identifier(position=position, span=span, name=tree.text(node))

    if node_type == "member_expression":
        object_node = node.child_by_field_name("object")
        property_node = node.child_by_field_name("property")
        if object_node is not None and property_node is not None:
            return MemberAccess(
                position=position,
                span=span,
                object=to_expression(tree, object_node),
                property=tree.text(property_node),
            )
        return OtherNode(position=position, span=span, node_type=node_type)

    if node_type == "object":
        return ObjectLiteral(
            position=position,
            span=span,
            properties=tuple(_object_member(tree, child) for child in _named(node)),
        )

    if node_type == "array":
        return ArrayLiteral(
            position=position,
            span=span,
            elements=tuple(to_expression(tree, child) for child in _named(node)),
        )

    if node_type == "spread_element":
        inner = _named(node)
        if inner:
            return SpreadElement(position=position, span=span, argument=to_expression(tree, inner[0]))
        return OtherNode(position=position, span=span, node_type=node_type)

    if node_type == "call_expression":
        return _call(tree, node, with_arguments=False)

    if node_type == "jsx_expression":
        inner = _named(node)
        expression = to_expression(tree, inner[0]) if inner else None
        return ExpressionContainer(position=position, span=span, expression=expression)

    return OtherNode(position=position, span=span, node_type=node_type)


def _object_member(tree: SyntaxTree, node: Node) -> Expression:
    if node.type == "pair":
        return _pair(tree, node)
    if node.type == "shorthand_property_identifier":
        name = tree.text(node)
        position = tree.position(node.start_byte)
        span = (node.start_byte, node.end_byte)
        return ObjectProperty(
            position=position,
            span=span,
            key=name,
            value=Identifier(position=position, span=span, name=name),
        )
    return to_expression(tree, node)


def _pair(tree: SyntaxTree, node: Node) -> ObjectProperty:
    key_node = node.child_by_field_name("key")
    value_node = node.child_by_field_name("value")
    position = tree.position(node.start_byte)
    span = (node.start_byte, node.end_byte)

    key: str | None = None
    if key_node is not None:
        if key_node.type in {"property_identifier", "identifier", "private_property_identifier"}:
            key = tree.text(key_node)
        elif key_node.type == "string":
            key = _string_value(tree, key_node)
        elif key_node.type == "number":
            key = tree.text(key_node)

    if value_node is None:
        value: Expression = OtherNode(position=position, span=span, node_type="missing")
    else:
        value = to_expression(tree, value_node)
    return ObjectProperty(position=position, span=span, key=key, value=value)


def _call(tree: SyntaxTree, node: Node, *, with_arguments: bool) -> CallExpression:
    function_node = node.child_by_field_name("function")
    arguments_node = node.child_by_field_name("arguments")
    position = tree.position(node.start_byte)
    span = (node.start_byte, node.end_byte)

    if function_node is None:
        callee: Expression = OtherNode(position=position, span=span, node_type="missing")
    elif function_node.type == "call_expression":
        # Chained calls never form a dotted path, so skip converting them.
        callee = OtherNode(
            position=tree.position(function_node.start_byte),
            span=(function_node.start_byte, function_node.end_byte),
            node_type=function_node.type,
        )
    else:
        callee = to_expression(tree, function_node)

    arguments: tuple[Expression, ...] = ()
    if with_arguments and arguments_node is not None and arguments_node.type == "arguments":
        arguments = tuple(to_expression(tree, child) for child in _named(arguments_node))

    return CallExpression(position=position, span=span, callee=callee, arguments=arguments)


def _element(tree: SyntaxTree, node: Node) -> MarkupElement:
    if node.type == "jsx_self_closing_element":
        opening = node
    else:
        opening = node.child_by_field_name("open_tag")
        if opening is None:
            opening = next((child for child in node.children if child.type == "jsx_opening_element"), None)

    name = ""
    attributes: list[MarkupAttribute] = []
    if opening is not None:
        name_node = opening.child_by_field_name("name")
        if name_node is not None:
            name = tree.text(name_node)
        for child in opening.named_children:
            if child.type == "jsx_attribute":
                attributes.append(_attribute(tree, child))

    children: list[Expression] = []
    if node.type != "jsx_self_closing_element":
        children = _element_children(tree, node)

    return MarkupElement(
        position=tree.position(node.start_byte),
        span=(node.start_byte, node.end_byte),
        name=name,
        attributes=tuple(attributes),
        children=tuple(children),
    )


def _element_children(tree: SyntaxTree, node: Node) -> list[Expression]:
    children: list[Expression] = []
    run: list[Node] = []

    for child in node.children:
        if child.type in _TEXT_TYPES:
            run.append(child)
            continue
        if run:
            children.append(_text_run(tree, run))
            run = []
        if child.type in {"jsx_opening_element", "jsx_closing_element"} or not child.is_named:
            continue
        if child.type in _ELEMENT_TYPES:
            children.append(
                OtherNode(
                    position=tree.position(child.start_byte),
                    span=(child.start_byte, child.end_byte),
                    node_type=child.type,
                )
            )
        elif child.type not in _SKIPPED_TYPES:
            children.append(to_expression(tree, child))

    if run:
        children.append(_text_run(tree, run))
    return children


def _text_run(tree: SyntaxTree, run: list[Node]) -> MarkupText:
    start = run[0].start_byte
    end = run[-1].end_byte
    raw = tree.source[start:end]
    leading = len(raw) - len(raw.lstrip())
    return MarkupText(
        position=tree.position(start + leading),
        span=(start, end),
        value=html.unescape(raw.decode("utf-8", errors="replace")),
    )


def _attribute(tree: SyntaxTree, node: Node) -> MarkupAttribute:
    named = _named(node)
    name = tree.text(named[0]) if named else ""
    value: Expression | None = None
    if len(named) > 1:
        value_node = named[1]
        if value_node.type == "string":
            value = StringLiteral(
                position=tree.position(value_node.start_byte),
                span=(value_node.start_byte, value_node.end_byte),
                value=html.unescape(tree.text(value_node)[1:-1]),
            )
        elif value_node.type in _ELEMENT_TYPES:
            value = OtherNode(
                position=tree.position(value_node.start_byte),
                span=(value_node.start_byte, value_node.end_byte),
                node_type=value_node.type,
            )
        else:
            value = to_expression(tree, value_node)

    return MarkupAttribute(
        position=tree.position(node.start_byte),
        span=(node.start_byte, node.end_byte),
        name=name,
        value=value,
    )


def _template(tree: SyntaxTree, node: Node) -> TemplateLiteral:
    quasis: list[str] = []
    cursor = node.start_byte + 1
    substitutions = 0
    for child in node.children:
        if child.type == "template_substitution":
            quasis.append(tree.source[cursor:child.start_byte].decode("utf-8", errors="replace"))
            cursor = child.end_byte
            substitutions += 1
    quasis.append(tree.source[cursor:max(cursor, node.end_byte - 1)].decode("utf-8", errors="replace"))

    return TemplateLiteral(
        position=tree.position(node.start_byte),
        span=(node.start_byte, node.end_byte),
        quasis=tuple(quasis),
        expression_count=substitutions,
    )


def _string_value(tree: SyntaxTree, node: Node) -> str:
    raw = tree.text(node)
    if len(raw) >= 2 and raw[0] in "'\"" and raw[-1] == raw[0]:
        raw = raw[1:-1]
    value = _ESCAPE_RE.sub(_decode_escape, raw)
    if _SURROGATE_RE.search(value):
        # Astral escapes arrive as UTF-16 halves; join pairs and replace lone halves with U+FFFD.
        value = value.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
    return value


def _decode_escape(match: re.Match[str]) -> str:
    body = match.group(1)
    if body.startswith("u{"):
        code_point = int(body[2:-1], 16)
        return chr(code_point) if code_point <= 0x10FFFF else body
    if body.startswith("u") and len(body) == 5:
        return chr(int(body[1:], 16))
    if body.startswith("x") and len(body) == 3:
        return chr(int(body[1:], 16))
    if body in {"\n", "\r\n", "\r", "\u2028", "\u2029"}:
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def _named(node: Node) -> list[Node]:
    return [child for child in node.named_children if child.type not in _SKIPPED_TYPES]
