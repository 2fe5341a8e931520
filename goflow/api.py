"""Composable API functions for tracing Go source.

Each function corresponds to a CLI workflow (--json, --outline) or to the
HTTP trace endpoint, but is callable programmatically without argparse.
"""

from __future__ import annotations

import logging
from typing import Any

from . import outline
from .parser import ParsedProgram, ParseError, Parser, TreeSitterParserFactory
from .run import trace
from .run_types import TraceConfig
from .trace_types import ExecutionTrace

logger = logging.getLogger(__name__)

EMPTY_CODE_ERROR = "Code cannot be empty"


def parse_source(source: str) -> ParsedProgram:
    """Parse Go source, raising ParseError on malformed input."""
    return Parser(TreeSitterParserFactory()).parse(source)


def trace_source(source: str, config: TraceConfig = TraceConfig()) -> ExecutionTrace:
    """Parse and trace source code.

    Args:
        source: Go source text of a ``package main`` file.
        config: Safety limits and entry function name.

    Returns:
        The ExecutionTrace of the entry function.
    """
    logger.info("Tracing source (%d bytes)", len(source))
    return trace(parse_source(source), config)


def extract_outline(source: str) -> dict[str, Any]:
    """Static outline of source code as ``{"nodes": [...]}``."""
    program = parse_source(source)
    return {"nodes": [n.to_dict() for n in outline.extract_outline(program)]}


def error_response(message: str) -> dict[str, Any]:
    return {
        "success": False,
        "error": message,
        "sourceCode": "",
        "totalSteps": 0,
        "ast": None,
        "trace": [],
        "finalOutput": "",
    }


def build_trace_response(
    source: str, config: TraceConfig = TraceConfig()
) -> dict[str, Any]:
    """Outline plus trace of *source*, in the visualizer's response shape.

    Input problems are reported in the response (``success`` false) rather
    than raised.
    """
    if not source.strip():
        return error_response(EMPTY_CODE_ERROR)
    try:
        program = parse_source(source)
    except ParseError as e:
        return error_response(f"Parse error: {e}")

    nodes = outline.extract_outline(program)
    result = trace(program, config)
    return {
        "success": True,
        "sourceCode": source,
        "totalSteps": len(result.steps),
        "ast": {"nodes": [n.to_dict() for n in nodes]},
        "trace": [s.to_dict() for s in result.steps],
        "finalOutput": result.final_output,
    }
