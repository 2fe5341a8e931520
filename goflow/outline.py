"""Static outline: function / loop / branch boxes for the visualizer.

The outline is derived from the syntax tree alone; nothing is executed.
Node ids are ``<prefix>_<n>`` with one counter shared by every node kind.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Callable

from .parser import ParsedProgram
from .syntax import (
    block_statements,
    call_parts,
    display_text,
    end_line,
    expression_list,
    is_noise,
    node_line,
    node_text,
    selector_parts,
)


class OutlineKind:
    FUNCTION = "function"
    FOR = "for"
    IF = "if"
    ELSE = "else"
    STATEMENT = "statement"


@dataclass
class OutlineNode:
    id: str
    type: str
    label: str
    start_line: int
    end_line: int
    children: list[OutlineNode] = field(default_factory=list)
    parent_id: str = ""

    def to_dict(self) -> dict:
        d: dict = {
            "id": self.id,
            "type": self.type,
            "label": self.label,
            "startLine": self.start_line,
            "endLine": self.end_line,
        }
        if self.children:
            d["children"] = [c.to_dict() for c in self.children]
        if self.parent_id:
            d["parentId"] = self.parent_id
        return d


# statement node type → id prefix for plain statement boxes
_STATEMENT_PREFIXES: dict[str, str] = {
    "short_var_declaration": "assign",
    "assignment_statement": "assign",
    "var_declaration": "decl",
    "const_declaration": "decl",
    "expression_statement": "expr",
    "return_statement": "return",
    "inc_statement": "incdec",
    "dec_statement": "incdec",
}


class OutlineBuilder:
    """Builds the outline of one parsed program."""

    def __init__(self, source: bytes):
        self._source = source
        self._counter = itertools.count(1)
        self._LABELERS: dict[str, Callable[..., str]] = {
            "short_var_declaration": self._assignment_label,
            "assignment_statement": self._assignment_label,
            "var_declaration": lambda node: "var declaration",
            "const_declaration": lambda node: "const declaration",
            "expression_statement": self._expression_label,
            "return_statement": lambda node: "return",
            "inc_statement": self._inc_dec_label,
            "dec_statement": self._inc_dec_label,
        }

    def _new_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter)}"

    def _text(self, node) -> str:
        return node_text(node, self._source)

    def build(self, root) -> list[OutlineNode]:
        nodes = []
        for child in root.named_children:
            if child.type != "function_declaration":
                continue
            name_node = child.child_by_field_name("name")
            name = self._text(name_node) if name_node is not None else ""
            func = OutlineNode(
                id=self._new_id("func"),
                type=OutlineKind.FUNCTION,
                label=f"func {name}()",
                start_line=node_line(child),
                end_line=end_line(child),
            )
            self._add_block(child.child_by_field_name("body"), func)
            nodes.append(func)
        return nodes

    def _add_block(self, block, parent: OutlineNode):
        for stmt in block_statements(block):
            node = self._statement(stmt, parent.id)
            if node is not None:
                parent.children.append(node)

    def _statement(self, stmt, parent_id: str) -> OutlineNode | None:
        if stmt.type == "for_statement":
            return self._for(stmt, parent_id)
        if stmt.type == "if_statement":
            return self._if(stmt, parent_id)
        prefix = _STATEMENT_PREFIXES.get(stmt.type)
        if prefix is None:
            return None
        return OutlineNode(
            id=self._new_id(prefix),
            type=OutlineKind.STATEMENT,
            label=self._LABELERS[stmt.type](stmt),
            start_line=node_line(stmt),
            end_line=end_line(stmt),
            parent_id=parent_id,
        )

    def _for(self, stmt, parent_id: str) -> OutlineNode:
        node = OutlineNode(
            id=self._new_id("for"),
            type=OutlineKind.FOR,
            label=self._for_label(stmt),
            start_line=node_line(stmt),
            end_line=end_line(stmt),
            parent_id=parent_id,
        )
        self._add_block(stmt.child_by_field_name("body"), node)
        return node

    def _for_label(self, stmt) -> str:
        clause = next(
            (c for c in stmt.named_children if c.type != "block" and not is_noise(c)),
            None,
        )
        if clause is None:
            return "for"
        if clause.type == "for_clause":
            initializer = clause.child_by_field_name("initializer")
            if initializer is None:
                return "for"
            return f"for {display_text(initializer, self._source)}"
        return f"for {display_text(clause, self._source)}"

    def _if(self, stmt, parent_id: str) -> OutlineNode:
        condition = stmt.child_by_field_name("condition")
        label = f"if {display_text(condition, self._source)}" if condition else "if"
        node = OutlineNode(
            id=self._new_id("if"),
            type=OutlineKind.IF,
            label=label,
            start_line=node_line(stmt),
            end_line=end_line(stmt),
            parent_id=parent_id,
        )
        self._add_block(stmt.child_by_field_name("consequence"), node)
        alternative = stmt.child_by_field_name("alternative")
        if alternative is not None:
            else_node = OutlineNode(
                id=self._new_id("else"),
                type=OutlineKind.ELSE,
                label="else",
                start_line=node_line(alternative),
                end_line=end_line(alternative),
                parent_id=node.id,
            )
            if alternative.type == "if_statement":
                else_node.children.append(self._if(alternative, else_node.id))
            else:
                self._add_block(alternative, else_node)
            node.children.append(else_node)
        return node

    # ── statement labels ─────────────────────────────────────────

    def _assignment_label(self, stmt) -> str:
        targets = expression_list(stmt.child_by_field_name("left"))
        if targets and targets[0].type == "identifier":
            return f"{self._text(targets[0])} = ..."
        return "assignment"

    def _expression_label(self, stmt) -> str:
        expr = next((c for c in stmt.named_children if not is_noise(c)), None)
        if expr is None or expr.type != "call_expression":
            return "expression"
        func_node, _ = call_parts(expr)
        if func_node is not None and func_node.type == "selector_expression":
            package, member = selector_parts(func_node, self._source)
            return f"{package}.{member}(...)"
        if func_node is not None and func_node.type == "identifier":
            return f"{self._text(func_node)}(...)"
        return "expression"

    def _inc_dec_label(self, stmt) -> str:
        target = next((c for c in stmt.named_children if not is_noise(c)), None)
        suffix = "++" if stmt.type == "inc_statement" else "--"
        if target is not None and target.type == "identifier":
            return f"{self._text(target)}{suffix}"
        return "inc/dec"


def extract_outline(program: ParsedProgram) -> list[OutlineNode]:
    """Outline nodes for every top-level function of *program*."""
    return OutlineBuilder(program.source).build(program.root)
