"""Function table: pre-scan of top-level Go function declarations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from . import constants
from .syntax import node_line, node_text, type_label
from .values import slice_type

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Parameter:
    name: str
    type_label: str
    variadic: bool = False


@dataclass(frozen=True)
class FunctionDecl:
    name: str
    parameters: tuple[Parameter, ...] = ()
    result_type: str = ""
    body: object = None  # tree-sitter ``block`` node
    line: int = 0


@dataclass
class FunctionTable:
    # name → declaration, excluding the entry function
    functions: dict[str, FunctionDecl] = field(default_factory=dict)
    entry: FunctionDecl | None = None

    def lookup(self, name: str) -> FunctionDecl | None:
        return self.functions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.functions


def _scan_parameters(params_node, source: bytes) -> tuple[Parameter, ...]:
    """Flatten ``(a, b int, s ...string)`` into positional parameters."""
    if params_node is None:
        return ()
    params: list[Parameter] = []
    for child in params_node.named_children:
        if child.type not in (
            "parameter_declaration",
            "variadic_parameter_declaration",
        ):
            continue
        label = type_label(child.child_by_field_name("type"), source)
        if child.type == "variadic_parameter_declaration":
            label = slice_type(label)
        params.extend(
            Parameter(
                name=node_text(name_node, source),
                type_label=label,
                variadic=child.type == "variadic_parameter_declaration",
            )
            for name_node in child.children_by_field_name("name")
            if name_node.is_named
        )
    return tuple(params)


def _scan_function(node, source: bytes) -> FunctionDecl:
    name_node = node.child_by_field_name("name")
    result_node = node.child_by_field_name("result")
    return FunctionDecl(
        name=node_text(name_node, source) if name_node else "",
        parameters=_scan_parameters(node.child_by_field_name("parameters"), source),
        result_type=type_label(result_node, source) if result_node else "",
        body=node.child_by_field_name("body"),
        line=node_line(node),
    )


def build_function_table(
    root, source: bytes, entry_name: str = constants.MAIN_FUNCTION_NAME
) -> FunctionTable:
    """Scan the top-level declarations of a ``source_file`` node."""
    table = FunctionTable()
    for child in root.named_children:
        if child.type != "function_declaration":
            continue
        decl = _scan_function(child, source)
        if decl.name == entry_name:
            table.entry = decl
        elif decl.name:
            table.functions[decl.name] = decl
    logger.info(
        "Function table: %d functions, entry %s",
        len(table.functions),
        "found" if table.entry else "missing",
    )
    return table
