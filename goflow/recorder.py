"""Step recorder: builds immutable TraceSteps in execution order."""

from __future__ import annotations

import logging

from .environment import CallFrame, Environment
from .syntax import node_column, node_line
from .trace_types import LoopIteration, StatementKind, TraceStep

logger = logging.getLogger(__name__)


class StepRecorder:
    """Appends one TraceStep per observable event.

    The recorder only reads the environment and call stack it is handed;
    every step carries its own copies of them.
    """

    def __init__(self):
        self._steps: list[TraceStep] = []

    @property
    def steps(self) -> tuple[TraceStep, ...]:
        return tuple(self._steps)

    def __len__(self) -> int:
        return len(self._steps)

    def record(
        self,
        node,
        kind: StatementKind,
        statement: str,
        env: Environment,
        call_stack: list[CallFrame],
        output: str = "",
        loop: LoopIteration | None = None,
    ) -> TraceStep:
        step = TraceStep(
            step_index=len(self._steps),
            line=node_line(node) if node is not None else 0,
            column=node_column(node) if node is not None else 0,
            statement=statement,
            statement_type=kind,
            variables=env.snapshot(),
            scope_stack=tuple(env.scope_stack),
            output=output,
            loop_iteration=loop,
            call_stack=tuple(frame.function_name for frame in call_stack),
            function_name=call_stack[-1].function_name if call_stack else "",
        )
        self._steps.append(step)
        logger.debug("[step %d] %s: %s", step.step_index, kind.value, statement)
        return step
