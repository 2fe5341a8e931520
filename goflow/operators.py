"""Binary and unary operator evaluation over tagged values."""

from __future__ import annotations

from typing import Callable

from .values import (
    ABSENT,
    ZERO,
    BoolValue,
    FloatValue,
    IntValue,
    MapValue,
    SliceValue,
    Value,
    coerce_untyped,
    matches_type,
    wrap_int64,
)


def _truncated_div(a: int, b: int) -> int:
    """Integer division rounding toward zero, as Go does."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def _truncated_mod(a: int, b: int) -> int:
    return a - b * _truncated_div(a, b)


class Operators:
    """Operator tables.  Operands must already share one kind; anything else is ABSENT."""

    INT_BINOPS: dict[str, Callable[[int, int], Value]] = {
        "+": lambda a, b: IntValue(wrap_int64(a + b)),
        "-": lambda a, b: IntValue(wrap_int64(a - b)),
        "*": lambda a, b: IntValue(wrap_int64(a * b)),
        "/": lambda a, b: IntValue(wrap_int64(_truncated_div(a, b))) if b else ZERO,
        "%": lambda a, b: IntValue(_truncated_mod(a, b)) if b else ZERO,
        "==": lambda a, b: BoolValue(a == b),
        "!=": lambda a, b: BoolValue(a != b),
        "<": lambda a, b: BoolValue(a < b),
        "<=": lambda a, b: BoolValue(a <= b),
        ">": lambda a, b: BoolValue(a > b),
        ">=": lambda a, b: BoolValue(a >= b),
    }

    BOOL_BINOPS: dict[str, Callable[[bool, bool], Value]] = {
        "&&": lambda a, b: BoolValue(a and b),
        "||": lambda a, b: BoolValue(a or b),
    }

    @classmethod
    def eval_binop(cls, op: str, lhs: Value, rhs: Value) -> Value:
        if isinstance(lhs, BoolValue) and isinstance(rhs, BoolValue):
            fn = cls.BOOL_BINOPS.get(op)
            return fn(lhs.value, rhs.value) if fn else ABSENT
        if isinstance(lhs, IntValue) and isinstance(rhs, IntValue):
            fn = cls.INT_BINOPS.get(op)
            return fn(lhs.value, rhs.value) if fn else ABSENT
        return ABSENT

    @classmethod
    def eval_unop(cls, op: str, operand: Value) -> Value:
        if isinstance(operand, IntValue):
            if op == "-":
                return IntValue(wrap_int64(-operand.value))
            if op == "+":
                return operand
            if op == "^":
                return IntValue(~operand.value)
        if isinstance(operand, FloatValue):
            if op == "-":
                return FloatValue(-operand.value)
            if op == "+":
                return operand
        if isinstance(operand, BoolValue) and op == "!":
            return BoolValue(not operand.value)
        return ABSENT


def read_index(target: Value, key: Value) -> Value:
    """``target[key]``: a missing map key reads as Int(0) and is not inserted."""
    if isinstance(target, MapValue):
        return target.entries.get(key, ZERO)
    if isinstance(target, SliceValue):
        if isinstance(key, IntValue) and 0 <= key.value < len(target.items):
            return target.items[key.value]
    return ABSENT


def write_index(target: Value, key: Value, value: Value):
    """``target[key] = value`` in place.

    Maps insert or overwrite.  Slices only accept an in-range Int index and
    a value of the element kind; anything else is a no-op.
    """
    if isinstance(target, MapValue):
        target.entries[key] = coerce_untyped(value, target.value_type)
    elif isinstance(target, SliceValue):
        value = coerce_untyped(value, target.elem_type)
        if (
            isinstance(key, IntValue)
            and 0 <= key.value < len(target.items)
            and matches_type(value, target.elem_type)
        ):
            target.items[key.value] = value
