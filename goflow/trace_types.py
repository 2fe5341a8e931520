"""Trace data types for step-by-step execution replay."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .run_types import ExecutionStats


class StatementKind(str, Enum):
    ASSIGN = "assign"
    DECLARE = "declare"
    IF_COND = "if_cond"
    FOR_INIT = "for_init"
    FOR_COND = "for_cond"
    CALL = "call"
    FUNC_CALL = "func_call"
    FUNC_ENTER = "func_enter"
    FUNC_RETURN = "func_return"
    BREAK = "break"
    CONTINUE = "continue"


@dataclass(frozen=True)
class VariableSnapshot:
    """One visible binding at the instant a step was recorded."""

    name: str
    type: str
    value: Any  # JSON-ready deep copy, see values.to_plain
    scope: str

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "value": self.value,
            "scope": self.scope,
        }


@dataclass(frozen=True)
class LoopIteration:
    loop_id: str
    iteration: int

    def to_dict(self) -> dict:
        return {"loopId": self.loop_id, "iteration": self.iteration}


@dataclass(frozen=True)
class TraceStep:
    """A single step in the execution trace.

    Captures the statement that produced the event together with a copy of
    every binding visible in the executing function at that instant.
    """

    step_index: int
    line: int
    column: int
    statement: str
    statement_type: StatementKind
    variables: tuple[VariableSnapshot, ...] = ()
    scope_stack: tuple[str, ...] = ()
    output: str = ""
    loop_iteration: LoopIteration | None = None
    call_stack: tuple[str, ...] = ()
    function_name: str = ""

    def variable(self, name: str) -> VariableSnapshot | None:
        return next((v for v in self.variables if v.name == name), None)

    def to_dict(self) -> dict:
        d: dict[str, Any] = {
            "stepIndex": self.step_index,
            "line": self.line,
            "column": self.column,
            "statement": self.statement,
            "statementType": self.statement_type.value,
            "variables": [v.to_dict() for v in self.variables],
            "scopeStack": list(self.scope_stack),
            "callStack": list(self.call_stack),
            "functionName": self.function_name,
        }
        if self.output:
            d["output"] = self.output
        if self.loop_iteration is not None:
            d["loopIteration"] = self.loop_iteration.to_dict()
        return d


@dataclass(frozen=True)
class ExecutionTrace:
    """Complete trace of one run: ordered steps plus the accumulated output."""

    steps: tuple[TraceStep, ...] = ()
    final_output: str = ""
    stats: ExecutionStats = field(default_factory=ExecutionStats)

    def to_dict(self) -> dict:
        return {
            "steps": [s.to_dict() for s in self.steps],
            "finalOutput": self.final_output,
        }
