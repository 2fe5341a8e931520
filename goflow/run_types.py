"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass

from . import constants


@dataclass(frozen=True)
class TraceConfig:
    """Groups interpreter configuration: safety limits and the entry point."""

    max_call_depth: int = constants.MAX_CALL_DEPTH
    max_loop_iterations: int = constants.MAX_LOOP_ITERATIONS
    entry_function: str = constants.MAIN_FUNCTION_NAME

    def __post_init__(self):
        if self.max_call_depth < 1:
            raise ValueError(f"max_call_depth must be positive: {self.max_call_depth}")
        if self.max_loop_iterations < 1:
            raise ValueError(
                f"max_loop_iterations must be positive: {self.max_loop_iterations}"
            )
        if not self.entry_function:
            raise ValueError("entry_function must not be empty")


@dataclass
class ExecutionStats:
    """Returned execution metrics from one traced run."""

    steps: int = 0
    function_calls: int = 0
    max_depth: int = 1
    loops_executed: int = 0
    loop_cutoffs: int = 0
    depth_cutoffs: int = 0
    output_bytes: int = 0


@dataclass
class PipelineStats:
    """Timing and size statistics for each pipeline stage."""

    source_bytes: int = 0
    source_lines: int = 0

    # Stage timings (seconds)
    parse_time: float = 0.0
    registry_time: float = 0.0
    execution_time: float = 0.0
    total_time: float = 0.0

    # Output sizes
    registry_functions: int = 0
    execution_steps: int = 0
    function_calls: int = 0
    max_depth: int = 0
    loop_cutoffs: int = 0
    depth_cutoffs: int = 0
    output_bytes: int = 0

    def report(self) -> str:
        lines = [
            "═══ Pipeline Statistics ═══",
            f"  Source: {self.source_lines} lines, {self.source_bytes} bytes",
            "",
            f"  {'Stage':<20} {'Time':>10}  {'Output':>30}",
            f"  {'─' * 20} {'─' * 10}  {'─' * 30}",
        ]

        stages = [
            ("Parse", self.parse_time, ""),
            (
                "Function table",
                self.registry_time,
                f"{self.registry_functions} functions",
            ),
            (
                "Trace",
                self.execution_time,
                f"{self.execution_steps} steps, {self.function_calls} calls",
            ),
        ]
        for name, t, output in stages:
            time_str = f"{t * 1000:>8.1f}ms"
            lines.append(f"  {name:<20} {time_str:>10}  {output:>30}")

        lines.append(f"  {'─' * 20} {'─' * 10}  {'─' * 30}")
        lines.append(f"  {'Total':<20} {self.total_time * 1000:>8.1f}ms")
        lines.append("")
        lines.append(
            f"  Deepest call stack: {self.max_depth},"
            f" loop cutoffs: {self.loop_cutoffs},"
            f" depth cutoffs: {self.depth_cutoffs},"
            f" output: {self.output_bytes} bytes"
        )
        return "\n".join(lines)
