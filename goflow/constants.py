"""Named constants: eliminates magic strings across the codebase."""

from __future__ import annotations

GO_LANGUAGE = "go"

MAIN_FUNCTION_NAME = "main"
DISCARD_NAME = "_"

MAX_CALL_DEPTH = 50
MAX_LOOP_ITERATIONS = 100

# Python frames reserved per Go call level when sizing the recursion limit
PYTHON_FRAMES_PER_CALL = 120

LOOP_ID_PREFIX = "for_"
SCOPE_SEPARATOR = "."

MAX_DEPTH_MARKER = "max call depth reached"
CONDITION_CHECK_TEXT = "condition check"

# Type labels
TYPE_INT = "int"
TYPE_FLOAT = "float64"
TYPE_STRING = "string"
TYPE_BOOL = "bool"
TYPE_AUTO = "auto"
SLICE_TYPE_PREFIX = "[]"
MAP_TYPE_PREFIX = "map["

FLOAT_TYPES: frozenset[str] = frozenset({"float64", "float32"})
SLICE_ELEMENT_TYPES: frozenset[str] = frozenset({TYPE_INT, TYPE_STRING, TYPE_FLOAT})

# Builtins recognised by name
BUILTIN_LEN = "len"
BUILTIN_MAKE = "make"
BUILTIN_APPEND = "append"
BUILTIN_DELETE = "delete"

FMT_PACKAGE = "fmt"
PRINT_FUNCTIONS: frozenset[str] = frozenset({"Print", "Println", "Printf"})
SPRINT_FUNCTIONS: frozenset[str] = frozenset({"Sprint", "Sprintln", "Sprintf"})

ABSENT_TEXT = "<nil>"

DEMO_SOURCE = """\
package main

import "fmt"

func fib(n int) int {
    if n <= 1 {
        return n
    }
    return fib(n-1) + fib(n-2)
}

func main() {
    total := 0
    for i := 0; i < 4; i++ {
        total = total + i
    }
    counts := make(map[string]int)
    counts["go"]++
    fmt.Println("total:", total, "fib:", fib(5), counts)
}
"""
