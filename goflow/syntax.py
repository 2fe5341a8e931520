"""Helpers over tree-sitter Go nodes shared by the interpreter and the outline."""

from __future__ import annotations

from . import constants
from .values import map_type, slice_type

COMMENT_TYPES: frozenset[str] = frozenset({"comment"})
NOISE_TYPES: frozenset[str] = frozenset({"empty_statement", "\n", ";"})


def node_text(node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8")


def display_text(node, source: bytes) -> str:
    """Source text of *node* collapsed onto one line."""
    return " ".join(node_text(node, source).split())


def node_line(node) -> int:
    return node.start_point[0] + 1


def node_column(node) -> int:
    return node.start_point[1] + 1


def end_line(node) -> int:
    return node.end_point[0] + 1


def is_noise(node) -> bool:
    return node.type in COMMENT_TYPES or node.type in NOISE_TYPES


def block_statements(node) -> list:
    """Statements of a ``block``, flattening the ``statement_list`` wrapper.

    Newer tree-sitter-go grammars nest the statements of a block inside a
    ``statement_list`` node; older ones place them directly in the block.
    """
    if node is None:
        return []
    statements = []
    for child in node.named_children:
        if child.type == "statement_list":
            statements.extend(c for c in child.named_children if not is_noise(c))
        elif not is_noise(child):
            statements.append(child)
    return statements


def expression_list(node) -> list:
    """Children of an ``expression_list`` (or the node itself when single)."""
    if node is None:
        return []
    if node.type == "expression_list":
        return [c for c in node.named_children if not is_noise(c)]
    return [node]


def unwrap_literal_element(node):
    """``literal_element`` wraps a single expression in newer grammars."""
    if node.type == "literal_element" and node.named_child_count == 1:
        return node.named_children[0]
    return node


def call_parts(node) -> tuple:
    """Return (function node, argument nodes) of a ``call_expression``."""
    func_node = node.child_by_field_name("function")
    args_node = node.child_by_field_name("arguments")
    args = (
        [c for c in args_node.named_children if not is_noise(c)] if args_node else []
    )
    return func_node, args


def selector_parts(node, source: bytes) -> tuple[str, str]:
    """Return (operand text, field text) of a ``selector_expression``."""
    operand = node.child_by_field_name("operand")
    field = node.child_by_field_name("field")
    if operand is None or field is None:
        return "", ""
    return node_text(operand, source), node_text(field, source)


def type_label(node, source: bytes) -> str:
    """Display label for a Go type node (``int``, ``[]string``, ``map[K]V``)."""
    if node is None:
        return constants.TYPE_AUTO
    ntype = node.type
    if ntype == "type_identifier" or ntype == "identifier":
        return node_text(node, source)
    if ntype == "slice_type":
        return slice_type(type_label(node.child_by_field_name("element"), source))
    if ntype == "array_type":
        length = node.child_by_field_name("length")
        element = type_label(node.child_by_field_name("element"), source)
        size = node_text(length, source) if length is not None else ""
        return f"[{size}]{element}"
    if ntype == "map_type":
        return map_type(
            type_label(node.child_by_field_name("key"), source),
            type_label(node.child_by_field_name("value"), source),
        )
    if ntype == "parenthesized_type" and node.named_child_count == 1:
        return type_label(node.named_children[0], source)
    return constants.TYPE_AUTO
