"""Run context: every piece of mutable state owned by one traced run."""

from __future__ import annotations

from dataclasses import dataclass, field

from . import constants
from .environment import CallFrame, Environment
from .recorder import StepRecorder
from .registry import FunctionTable
from .run_types import ExecutionStats, TraceConfig
from .trace_types import LoopIteration, StatementKind, TraceStep
from .values import ABSENT, Value


@dataclass
class RunContext:
    """State of one run, created per trace request and dropped afterwards."""

    functions: FunctionTable
    source: bytes
    config: TraceConfig = field(default_factory=TraceConfig)
    env: Environment = field(default_factory=Environment)
    call_stack: list[CallFrame] = field(default_factory=list)
    recorder: StepRecorder = field(default_factory=StepRecorder)
    loop_counters: dict[str, int] = field(default_factory=dict)
    output: list[str] = field(default_factory=list)
    stats: ExecutionStats = field(default_factory=ExecutionStats)
    has_returned: bool = False
    return_value: Value = ABSENT
    loop_signal: str = ""

    @property
    def depth(self) -> int:
        return len(self.call_stack)

    @property
    def interrupted(self) -> bool:
        """True while a return or break/continue is unwinding blocks."""
        return self.has_returned or bool(self.loop_signal)

    def record(
        self,
        node,
        kind: StatementKind,
        statement: str,
        output: str = "",
        loop: LoopIteration | None = None,
    ) -> TraceStep:
        return self.recorder.record(
            node, kind, statement, self.env, self.call_stack, output, loop
        )

    def write_output(self, text: str):
        self.output.append(text)

    def next_loop_id(self) -> str:
        """Fresh id for one execution of a loop statement, counter at 0."""
        self.stats.loops_executed += 1
        loop_id = f"{constants.LOOP_ID_PREFIX}{self.stats.loops_executed}"
        self.loop_counters[loop_id] = 0
        return loop_id

    def loop_capped(self, loop_id: str) -> bool:
        return self.loop_counters[loop_id] >= self.config.max_loop_iterations
