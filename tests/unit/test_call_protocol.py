"""Tests for user-function invocation: frames, restore, recursion and depth cap."""

from __future__ import annotations

import logging

from goflow.api import trace_source
from goflow.run_types import TraceConfig
from goflow.trace_types import ExecutionTrace, StatementKind

FIB = """\
func fib(n int) int {
	if n < 2 {
		return n
	}
	return fib(n-1) + fib(n-2)
}
"""

RUNAWAY = """\
func f(n int) int {
	return f(n + 1)
}
"""

NESTED_DFS = """\
func dfs(n int) int {
	count := 0
	for i := 0; i < 3; i++ {
		if i == 0 {
			for j := 0; j < 1; j++ {
				count = count + dfs(n+1)
			}
		}
	}
	return count
}
"""


def _program(body: str, functions: str = "") -> str:
    return f'package main\n\nimport "fmt"\n\n{functions}\nfunc main() {{\n{body}\n}}\n'


def _trace(body: str, functions: str = "", **config) -> ExecutionTrace:
    return trace_source(_program(body, functions), TraceConfig(**config))


def _of_kind(trace: ExecutionTrace, kind: StatementKind) -> list:
    return [s for s in trace.steps if s.statement_type == kind]


def _final(trace: ExecutionTrace, name: str):
    return trace.steps[-1].variable(name).value


class TestRecursion:
    def test_fib(self):
        trace = _trace("r := fib(5)\nfmt.Println(r)", FIB)
        assert trace.final_output == "5\n"
        assert _final(trace, "r") == 5

    def test_deepest_call_stack(self):
        trace = _trace("r := fib(5)", FIB)
        assert max(len(s.call_stack) for s in trace.steps) == 6
        assert trace.stats.max_depth == 6
        assert trace.stats.function_calls == 15

    def test_calls_and_entries_balance(self):
        trace = _trace("r := fib(5)", FIB)
        calls = _of_kind(trace, StatementKind.FUNC_CALL)
        entries = _of_kind(trace, StatementKind.FUNC_ENTER)
        assert len(calls) == len(entries) == 15

    def test_runaway_recursion_stops_at_depth_limit(self):
        trace = _trace("f(0)", RUNAWAY)
        marked = [s for s in trace.steps if "max call depth reached" in s.statement]
        assert len(marked) == 1
        assert marked[0].statement_type == StatementKind.FUNC_CALL
        assert max(len(s.call_stack) for s in trace.steps) == 50
        assert trace.stats.depth_cutoffs == 1

    def test_recursion_nested_in_loops_reaches_depth_limit(self):
        trace = _trace("r := dfs(0)", NESTED_DFS)
        marked = [s for s in trace.steps if "max call depth reached" in s.statement]
        assert len(marked) == 1
        assert max(len(s.call_stack) for s in trace.steps) == 50
        assert trace.steps[-1].call_stack == ("main",)

    def test_python_stack_exhaustion_becomes_depth_cutoff(self, monkeypatch):
        monkeypatch.setattr("goflow.constants.PYTHON_FRAMES_PER_CALL", 0)
        trace = _trace("r := dfs(0)\nfmt.Println(\"done\")", NESTED_DFS, max_call_depth=5000)
        assert trace.stats.depth_cutoffs >= 1
        assert max(len(s.call_stack) for s in trace.steps) < 5000
        assert trace.steps[-1].call_stack == ("main",)
        assert trace.final_output == "done\n"

    def test_depth_limit_is_configurable(self):
        trace = _trace("f(0)", RUNAWAY, max_call_depth=3)
        assert max(len(s.call_stack) for s in trace.steps) == 3
        assert len(_of_kind(trace, StatementKind.FUNC_ENTER)) == 2


class TestCallSteps:
    def test_func_call_recorded_in_caller_context(self):
        trace = _trace("r := fib(1)", FIB)
        call = _of_kind(trace, StatementKind.FUNC_CALL)[0]
        assert call.statement == "fib(1)"
        assert call.call_stack == ("main",)
        assert call.function_name == "main"

    def test_func_enter_recorded_in_callee_context(self):
        trace = _trace("r := fib(1)", FIB)
        enter = _of_kind(trace, StatementKind.FUNC_ENTER)[0]
        assert enter.statement == "enter fib"
        assert enter.call_stack == ("main", "fib")
        assert enter.function_name == "fib"
        assert enter.scope_stack == ("fib",)
        assert [(v.name, v.type, v.value) for v in enter.variables] == [
            ("n", "int", 1)
        ]
        assert enter.line == 5

    def test_return_step(self):
        trace = _trace("r := fib(1)", FIB)
        ret = _of_kind(trace, StatementKind.FUNC_RETURN)[0]
        assert ret.statement == "return n"
        assert ret.function_name == "fib"

    def test_user_call_statement_records_no_call_step(self):
        functions = "func fill(m map[string]int) {\n\tm[\"k\"] = 7\n}\n"
        trace = _trace("m := make(map[string]int)\nfill(m)", functions)
        assert [s.statement_type for s in trace.steps] == [
            StatementKind.DECLARE,
            StatementKind.FUNC_CALL,
            StatementKind.FUNC_ENTER,
            StatementKind.ASSIGN,
        ]


class TestFrameRestore:
    BUMP = (
        "func bump(x int) int {\n"
        "\tx = x + 1\n"
        "\ty := 100\n"
        "\treturn x\n"
        "}\n"
    )

    def test_caller_bindings_restored(self):
        trace = _trace("x := 1\nr := bump(x)", self.BUMP)
        last = trace.steps[-1]
        assert [(v.name, v.value) for v in last.variables] == [("x", 1), ("r", 2)]
        assert last.scope_stack == ("main",)
        assert last.call_stack == ("main",)

    def test_callee_starts_with_fresh_environment(self):
        trace = _trace("secret := 1\nr := bump(2)", self.BUMP)
        enter = _of_kind(trace, StatementKind.FUNC_ENTER)[0]
        assert enter.variable("secret") is None

    def test_aliased_container_mutation_survives(self):
        functions = "func fill(m map[string]int) {\n\tm[\"k\"] = 7\n}\n"
        trace = _trace("m := make(map[string]int)\nfill(m)\nn := len(m)", functions)
        assert _final(trace, "m") == {"k": 7}
        assert _final(trace, "n") == 1

    def test_function_without_return_value_is_absent(self):
        trace = _trace("v := noop()", "func noop() {\n}\n")
        assert _final(trace, "v") is None

    def test_return_in_main_stops_main(self):
        trace = _trace('fmt.Println("a")\nreturn\nfmt.Println("b")')
        assert trace.final_output == "a\n"


class TestVariadic:
    TOTAL = (
        "func total(nums ...int) int {\n"
        "\ts := 0\n"
        "\tfor _, n := range nums {\n"
        "\t\ts = s + n\n"
        "\t}\n"
        "\treturn s\n"
        "}\n"
    )

    def test_variadic_arguments_packed_into_slice(self):
        trace = _trace("t := total(1, 2, 3)", self.TOTAL)
        enter = _of_kind(trace, StatementKind.FUNC_ENTER)[0]
        assert enter.variable("nums").type == "[]int"
        assert enter.variable("nums").value == [1, 2, 3]
        assert _final(trace, "t") == 6

    def test_spread_slice_passed_through(self):
        trace = _trace("xs := []int{4, 5}\nu := total(xs...)", self.TOTAL)
        assert _final(trace, "u") == 9


class TestEntryFunction:
    def test_missing_entry_yields_empty_trace(self, caplog):
        with caplog.at_level(logging.WARNING):
            trace = trace_source("package main\n\nfunc helper() {}\n")
        assert trace.steps == ()
        assert trace.final_output == ""
        assert "No main function found" in caplog.text

    def test_custom_entry_function(self):
        source = _program("x := 1", "func start() {\n\ty := 2\n}\n")
        trace = trace_source(source, TraceConfig(entry_function="start"))
        assert trace.steps[0].function_name == "start"
        assert _final(trace, "y") == 2
