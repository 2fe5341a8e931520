"""Tests for the goflow command line."""

from __future__ import annotations

import json

import pytest

from goflow.cli import main

SOURCE = 'package main\n\nimport "fmt"\n\nfunc main() {\n\tx := 2\n\tfmt.Println(x * 21)\n}\n'


@pytest.fixture
def go_file(tmp_path):
    path = tmp_path / "prog.go"
    path.write_text(SOURCE)
    return path


class TestCli:
    def test_traces_file(self, go_file, capsys):
        assert main([str(go_file)]) == 0
        out = capsys.readouterr().out
        assert "═══ Trace ═══" in out
        assert "x := 2" in out
        assert out.endswith("═══ Output ═══\n42\n")

    def test_json_output(self, go_file, capsys):
        assert main([str(go_file), "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["finalOutput"] == "42\n"
        assert [s["statementType"] for s in data["steps"]] == ["declare", "call"]

    def test_outline_output(self, go_file, capsys):
        assert main([str(go_file), "--outline"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["nodes"][0]["label"] == "func main()"

    def test_parse_error_exit_code(self, tmp_path, capsys):
        path = tmp_path / "bad.go"
        path.write_text("package main\n\nfunc main( {\n")
        assert main([str(path)]) == 1
        assert capsys.readouterr().err.startswith("Parse error: line ")

    def test_demo_without_file(self, capsys):
        assert main([]) == 0
        out = capsys.readouterr().out
        assert out.startswith("No file provided. Using built-in demo:")
        assert out.endswith("total: 6 fib: 5 map[go:1]\n")

    def test_loop_limit_option(self, tmp_path, capsys):
        path = tmp_path / "spin.go"
        path.write_text("package main\n\nfunc main() {\n\tfor {\n\t}\n}\n")
        assert main([str(path), "--json", "--max-loop-iterations", "4"]) == 0
        steps = json.loads(capsys.readouterr().out)["steps"]
        assert [s["statementType"] for s in steps].count("for_cond") == 4

    def test_invalid_limit_is_rejected(self, go_file):
        with pytest.raises(SystemExit):
            main([str(go_file), "--max-call-depth", "0"])
