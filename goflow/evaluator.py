"""Expression evaluator: tree-sitter Go expression nodes → runtime values."""

from __future__ import annotations

import logging
from typing import Callable

from . import constants
from .builtins import Builtins, BuiltinFn
from .context import RunContext
from .formatting import format_call
from .operators import Operators, read_index
from .registry import FunctionDecl
from .syntax import (
    call_parts,
    is_noise,
    node_text,
    selector_parts,
    type_label,
    unwrap_literal_element,
)
from .values import (
    ABSENT,
    FALSE,
    TRUE,
    MapValue,
    SliceValue,
    StrValue,
    Value,
    coerce_untyped,
    matches_type,
    parse_float_literal,
    parse_int_literal,
    parse_rune_literal,
    parse_string_literal,
)

logger = logging.getLogger(__name__)

# Invoked for calls that resolve to a user function: (decl, argument nodes, call node).
Invoker = Callable[[FunctionDecl, list, object], Value]

_TYPE_NODE_TYPES: frozenset[str] = frozenset(
    {
        "map_type",
        "slice_type",
        "array_type",
        "channel_type",
        "pointer_type",
        "qualified_type",
        "type_identifier",
    }
)


class ExpressionEvaluator:
    """Evaluates expressions in the run's current environment.

    Unrecognised expression kinds evaluate to ABSENT rather than failing.
    """

    def __init__(self, ctx: RunContext, invoke: Invoker):
        self._ctx = ctx
        self._invoke = invoke
        self._EXPR_DISPATCH: dict[str, Callable[..., Value]] = {
            "int_literal": self._eval_int_literal,
            "float_literal": self._eval_float_literal,
            "interpreted_string_literal": self._eval_string_literal,
            "raw_string_literal": self._eval_string_literal,
            "rune_literal": self._eval_rune_literal,
            "true": lambda node: TRUE,
            "false": lambda node: FALSE,
            "nil": lambda node: ABSENT,
            "identifier": self._eval_identifier,
            "parenthesized_expression": self._eval_inner,
            "variadic_argument": self._eval_inner,
            "literal_element": self._eval_literal_element,
            "unary_expression": self._eval_unary,
            "binary_expression": self._eval_binary,
            "composite_literal": self._eval_composite_literal,
            "index_expression": self._eval_index,
            "call_expression": self._eval_call,
        }

    # ── entry points ─────────────────────────────────────────────

    def evaluate(self, node) -> Value:
        if node is None:
            return ABSENT
        handler = self._EXPR_DISPATCH.get(node.type)
        if handler is None:
            logger.debug("Unsupported expression %s evaluates to ABSENT", node.type)
            return ABSENT
        return handler(node)

    def evaluate_all(self, nodes: list) -> list[Value]:
        return [self.evaluate(n) for n in nodes]

    def _text(self, node) -> str:
        return node_text(node, self._ctx.source)

    # ── literals and names ───────────────────────────────────────

    def _eval_int_literal(self, node) -> Value:
        return parse_int_literal(self._text(node))

    def _eval_float_literal(self, node) -> Value:
        return parse_float_literal(self._text(node))

    def _eval_string_literal(self, node) -> Value:
        return parse_string_literal(self._text(node))

    def _eval_rune_literal(self, node) -> Value:
        return parse_rune_literal(self._text(node))

    def _eval_identifier(self, node) -> Value:
        return self._ctx.env.read(self._text(node))

    def _eval_inner(self, node) -> Value:
        inner = next((c for c in node.named_children if not is_noise(c)), None)
        return self.evaluate(inner)

    def _eval_literal_element(self, node) -> Value:
        inner = unwrap_literal_element(node)
        return ABSENT if inner is node else self.evaluate(inner)

    # ── operators ────────────────────────────────────────────────

    def _eval_unary(self, node) -> Value:
        op_node = node.child_by_field_name("operator")
        operand = self.evaluate(node.child_by_field_name("operand"))
        if op_node is None:
            return ABSENT
        return Operators.eval_unop(self._text(op_node), operand)

    def _eval_binary(self, node) -> Value:
        left = self.evaluate(node.child_by_field_name("left"))
        right = self.evaluate(node.child_by_field_name("right"))
        op_node = node.child_by_field_name("operator")
        if op_node is None:
            return ABSENT
        return Operators.eval_binop(self._text(op_node), left, right)

    # ── composite literals and indexing ──────────────────────────

    def _eval_composite_literal(self, node) -> Value:
        type_node = node.child_by_field_name("type")
        body = node.child_by_field_name("body")
        elements = (
            [c for c in body.named_children if not is_noise(c)] if body else []
        )
        if type_node is None:
            return ABSENT
        if type_node.type == "slice_type":
            return self._slice_literal(type_node, elements)
        if type_node.type == "map_type":
            return self._map_literal(type_node, elements)
        return ABSENT

    def _slice_literal(self, type_node, elements: list) -> Value:
        elem_type = type_label(type_node.child_by_field_name("element"), self._ctx.source)
        if elem_type not in constants.SLICE_ELEMENT_TYPES:
            return ABSENT
        values = (
            coerce_untyped(self.evaluate(unwrap_literal_element(e)), elem_type)
            for e in elements
        )
        return SliceValue(
            elem_type=elem_type,
            items=[v for v in values if matches_type(v, elem_type)],
        )

    def _map_literal(self, type_node, elements: list) -> Value:
        source = self._ctx.source
        result = MapValue(
            key_type=type_label(type_node.child_by_field_name("key"), source),
            value_type=type_label(type_node.child_by_field_name("value"), source),
        )
        for element in elements:
            if element.type != "keyed_element":
                continue
            parts = [
                unwrap_literal_element(c)
                for c in element.named_children
                if not is_noise(c)
            ]
            if len(parts) != 2:
                continue
            key = self.evaluate(parts[0])
            result.entries[key] = coerce_untyped(
                self.evaluate(parts[1]), result.value_type
            )
        return result

    def _eval_index(self, node) -> Value:
        target = self.evaluate(node.child_by_field_name("operand"))
        key = self.evaluate(node.child_by_field_name("index"))
        return read_index(target, key)

    # ── calls ────────────────────────────────────────────────────

    def _eval_call(self, node) -> Value:
        func_node, arg_nodes = call_parts(node)
        if func_node is None:
            return ABSENT
        if func_node.type == "identifier":
            name = self._text(func_node)
            decl = self._ctx.functions.lookup(name)
            if decl is not None:
                return self._invoke(decl, arg_nodes, node)
            builtin = Builtins.TABLE.get(name)
            if builtin is not None:
                return self.call_builtin(builtin, arg_nodes)
            return ABSENT
        if func_node.type == "selector_expression":
            package, member = selector_parts(func_node, self._ctx.source)
            if package == constants.FMT_PACKAGE and member in constants.SPRINT_FUNCTIONS:
                return StrValue(format_call(member, self.evaluate_all(arg_nodes)))
        return ABSENT

    def call_builtin(self, builtin: BuiltinFn, arg_nodes: list) -> Value:
        type_arg = ""
        if arg_nodes and arg_nodes[0].type in _TYPE_NODE_TYPES:
            type_arg = type_label(arg_nodes[0], self._ctx.source)
            arg_nodes = arg_nodes[1:]
        return builtin(self.evaluate_all(arg_nodes), type_arg)
