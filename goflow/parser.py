"""Tree-Sitter Parsing Layer."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from . import constants
from .syntax import node_column, node_line

logger = logging.getLogger(__name__)


class ParseError(ValueError):
    """Raised when the Go source cannot be parsed."""

    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(message)
        self.line = line
        self.column = column


@dataclass(frozen=True)
class ParsedProgram:
    """A parsed Go source file: the tree-sitter tree plus the bytes it covers."""

    tree: Any
    source: bytes

    @property
    def root(self):
        return self.tree.root_node


class ParserFactory(ABC):
    """Abstract factory for obtaining a language parser."""

    @abstractmethod
    def get_parser(self, language: str): ...


class TreeSitterParserFactory(ParserFactory):
    """Concrete factory that delegates to tree-sitter-language-pack."""

    def get_parser(self, language: str):
        import tree_sitter_language_pack as tslp

        return tslp.get_parser(language)


def _first_error_node(node):
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    return next(
        (
            found
            for child in node.children
            if (found := _first_error_node(child)) is not None
        ),
        None,
    )


class Parser:
    """Thin wrapper around a parser factory that rejects malformed source."""

    def __init__(self, parser_factory: ParserFactory):
        self._factory = parser_factory

    def parse(self, source: str, language: str = constants.GO_LANGUAGE) -> ParsedProgram:
        parser = self._factory.get_parser(language)
        source_bytes = source.encode("utf-8")
        tree = parser.parse(source_bytes)
        error = _first_error_node(tree.root_node)
        if error is not None:
            line, column = node_line(error), node_column(error)
            what = f"missing {error.type}" if error.is_missing else "unexpected input"
            logger.info("Rejected source: %s at %d:%d", what, line, column)
            raise ParseError(f"line {line}:{column}: {what}", line, column)
        return ParsedProgram(tree=tree, source=source_bytes)
