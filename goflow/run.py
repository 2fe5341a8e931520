"""Orchestrator: trace() core entry point and the run() pipeline."""

from __future__ import annotations

import logging
import sys
import time

from . import constants
from .context import RunContext
from .executor import Interpreter
from .parser import ParsedProgram, Parser, TreeSitterParserFactory
from .registry import FunctionTable, build_function_table
from .run_types import PipelineStats, TraceConfig
from .trace_types import ExecutionTrace

logger = logging.getLogger(__name__)


def execute_program(
    program: ParsedProgram,
    functions: FunctionTable,
    config: TraceConfig = TraceConfig(),
) -> ExecutionTrace:
    """Run the entry function of an already-scanned program."""
    ctx = RunContext(functions=functions, source=program.source, config=config)
    previous_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(
        previous_limit + config.max_call_depth * constants.PYTHON_FRAMES_PER_CALL
    )
    try:
        trace = Interpreter(ctx).run()
    finally:
        sys.setrecursionlimit(previous_limit)
    logger.info(
        "Traced %d steps, %d calls, output %d bytes",
        trace.stats.steps,
        trace.stats.function_calls,
        trace.stats.output_bytes,
    )
    return trace


def trace(program: ParsedProgram, config: TraceConfig = TraceConfig()) -> ExecutionTrace:
    """Execute *program* and return its ordered steps and final output.

    Never raises for unsupported constructs: unknown statements are skipped
    and unknown expressions evaluate to ABSENT.
    """
    functions = build_function_table(program.root, program.source, config.entry_function)
    return execute_program(program, functions, config)


def run(
    source: str,
    config: TraceConfig = TraceConfig(),
    verbose: bool = False,
) -> tuple[ExecutionTrace, PipelineStats]:
    """End-to-end: parse → function table → trace.

    Args:
        source: Go source text of a single ``package main`` file.
        config: Safety limits and entry function name.
        verbose: Print every step and the pipeline statistics.

    Raises:
        ParseError: the source does not parse.
    """
    pipeline_start = time.perf_counter()
    stats = PipelineStats(
        source_bytes=len(source.encode("utf-8")),
        source_lines=source.count("\n")
        + (1 if source and not source.endswith("\n") else 0),
    )

    # 1. Parse
    t0 = time.perf_counter()
    program = Parser(TreeSitterParserFactory()).parse(source)
    stats.parse_time = time.perf_counter() - t0
    logger.info("Parsed %d lines in %.1fms", stats.source_lines, stats.parse_time * 1000)

    # 2. Function table
    t0 = time.perf_counter()
    functions = build_function_table(program.root, program.source, config.entry_function)
    stats.registry_time = time.perf_counter() - t0
    stats.registry_functions = len(functions.functions)

    # 3. Trace
    t0 = time.perf_counter()
    result = execute_program(program, functions, config)
    stats.execution_time = time.perf_counter() - t0

    stats.execution_steps = result.stats.steps
    stats.function_calls = result.stats.function_calls
    stats.max_depth = result.stats.max_depth
    stats.loop_cutoffs = result.stats.loop_cutoffs
    stats.depth_cutoffs = result.stats.depth_cutoffs
    stats.output_bytes = result.stats.output_bytes
    stats.total_time = time.perf_counter() - pipeline_start

    if verbose:
        print("═══ Trace ═══")
        for step in result.steps:
            print(f"  {format_step(step)}")
        print()
        print("═══ Output ═══")
        print(result.final_output, end="" if result.final_output.endswith("\n") else "\n")
        print()
        print(stats.report())

    return result, stats


def format_step(step) -> str:
    """One-line rendering of a TraceStep for terminal display."""
    loop = ""
    if step.loop_iteration is not None:
        loop = f" [{step.loop_iteration.loop_id}#{step.loop_iteration.iteration}]"
    bindings = ", ".join(f"{v.name}={v.value!r}" for v in step.variables)
    return (
        f"[{step.step_index}] L{step.line} {step.statement_type.value:<11} "
        f"{step.statement}{loop}  {{{bindings}}}"
    )
