"""Tests for the static outline of functions, loops and branches."""

from __future__ import annotations

from goflow.api import parse_source
from goflow.outline import OutlineKind, OutlineNode, extract_outline

SAMPLE = """\
package main

import "fmt"

func main() {
	x := 0
	for i := 0; i < 3; i++ {
		x++
	}
	if x > 2 {
		fmt.Println(x)
	} else {
		helper()
	}
}

func helper() {
	return
}
"""


def _outline(source: str) -> list[OutlineNode]:
    return extract_outline(parse_source(source))


def _main_children(body: str) -> list[OutlineNode]:
    source = f"package main\n\nfunc main() {{\n{body}\n}}\n"
    return _outline(source)[0].children


class TestOutlineTree:
    def test_top_level_functions(self):
        nodes = _outline(SAMPLE)
        assert [(n.id, n.label) for n in nodes] == [
            ("func_1", "func main()"),
            ("func_9", "func helper()"),
        ]
        assert nodes[0].type == OutlineKind.FUNCTION
        assert (nodes[0].start_line, nodes[0].end_line) == (5, 15)
        assert (nodes[1].start_line, nodes[1].end_line) == (17, 19)

    def test_main_children(self):
        main = _outline(SAMPLE)[0]
        assert [(c.id, c.type, c.label) for c in main.children] == [
            ("assign_2", "statement", "x = ..."),
            ("for_3", "for", "for i := 0"),
            ("if_5", "if", "if x > 2"),
        ]
        assert all(c.parent_id == "func_1" for c in main.children)

    def test_loop_body_nested_under_loop(self):
        loop = _outline(SAMPLE)[0].children[1]
        assert (loop.start_line, loop.end_line) == (7, 9)
        assert [(c.id, c.label, c.parent_id) for c in loop.children] == [
            ("incdec_4", "x++", "for_3")
        ]

    def test_else_nested_under_if(self):
        branch = _outline(SAMPLE)[0].children[2]
        assert [c.id for c in branch.children] == ["expr_6", "else_7"]
        assert branch.children[0].label == "fmt.Println(...)"

        else_node = branch.children[1]
        assert else_node.type == OutlineKind.ELSE
        assert else_node.parent_id == "if_5"
        assert (else_node.start_line, else_node.end_line) == (12, 14)
        assert [(c.id, c.label) for c in else_node.children] == [
            ("expr_8", "helper(...)")
        ]

    def test_ids_continue_across_functions(self):
        helper = _outline(SAMPLE)[1]
        assert [(c.id, c.label) for c in helper.children] == [("return_10", "return")]

    def test_else_if_nests_inside_else(self):
        children = _main_children("\tif x > 3 {\n\t} else if x > 0 {\n\t}")
        first = children[0]
        else_node = first.children[0]
        inner = else_node.children[0]
        assert else_node.label == "else"
        assert inner.type == OutlineKind.IF
        assert inner.label == "if x > 0"
        assert inner.parent_id == else_node.id


class TestOutlineLabels:
    def test_range_loop_label(self):
        children = _main_children("\tfor i, v := range s {\n\t}")
        assert children[0].label == "for i, v := range s"

    def test_bare_and_condition_loops(self):
        children = _main_children("\tfor {\n\t}\n\tfor n < 3 {\n\t}")
        assert [c.label for c in children] == ["for", "for n < 3"]

    def test_declaration_labels(self):
        children = _main_children("\tvar a int\n\tconst b = 1\n\ts[0] = 2")
        assert [(c.id.split("_")[0], c.label) for c in children] == [
            ("decl", "var declaration"),
            ("decl", "const declaration"),
            ("assign", "assignment"),
        ]

    def test_unlisted_statements_are_skipped(self):
        children = _main_children("\tgo f()\n\tx := 1")
        assert [c.label for c in children] == ["x = ..."]


class TestOutlineDict:
    def test_camel_case_keys(self):
        d = _outline(SAMPLE)[0].to_dict()
        assert d["id"] == "func_1"
        assert d["startLine"] == 5
        assert d["endLine"] == 15
        assert "parentId" not in d
        assert d["children"][0]["parentId"] == "func_1"

    def test_empty_children_omitted(self):
        d = _outline(SAMPLE)[0].children[0].to_dict()
        assert "children" not in d
