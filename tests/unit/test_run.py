"""Tests for the run() pipeline, its statistics and configuration checks."""

from __future__ import annotations

import pytest

from goflow.constants import DEMO_SOURCE
from goflow.parser import ParseError
from goflow.run import format_step, run
from goflow.run_types import TraceConfig


class TestRunPipeline:
    def test_demo_program(self):
        result, stats = run(DEMO_SOURCE)
        assert result.final_output == "total: 6 fib: 5 map[go:1]\n"
        assert stats.registry_functions == 1
        assert stats.execution_steps == len(result.steps)
        assert stats.function_calls == 15
        assert stats.max_depth == 6
        assert stats.source_lines == DEMO_SOURCE.count("\n")
        assert stats.total_time >= stats.parse_time

    def test_verbose_prints_sections(self, capsys):
        run(DEMO_SOURCE, verbose=True)
        out = capsys.readouterr().out
        assert "═══ Trace ═══" in out
        assert "═══ Output ═══" in out
        assert "═══ Pipeline Statistics ═══" in out
        assert "Deepest call stack: 6" in out

    def test_quiet_by_default(self, capsys):
        run(DEMO_SOURCE)
        assert capsys.readouterr().out == ""

    def test_parse_error_propagates(self):
        with pytest.raises(ParseError):
            run("package main\n\nfunc main() {\n")

    def test_format_step(self):
        result, _ = run(DEMO_SOURCE)
        cond = next(s for s in result.steps if s.loop_iteration is not None)
        line = format_step(cond)
        assert line.startswith(f"[{cond.step_index}] L{cond.line} for_cond")
        assert "[for_1#1]" in line


class TestTraceConfig:
    def test_defaults(self):
        config = TraceConfig()
        assert config.max_call_depth == 50
        assert config.max_loop_iterations == 100
        assert config.entry_function == "main"

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"max_call_depth": 0},
            {"max_loop_iterations": -1},
            {"entry_function": ""},
        ],
    )
    def test_invalid_values_rejected(self, kwargs):
        with pytest.raises(ValueError):
            TraceConfig(**kwargs)
