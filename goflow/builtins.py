"""Built-in function implementations (len, make, append, delete)."""

from __future__ import annotations

from typing import Callable

from . import constants
from .values import (
    ABSENT,
    IntValue,
    MapValue,
    SliceValue,
    StrValue,
    Value,
    matches_type,
    type_label_of,
)

# A builtin receives its evaluated value arguments plus the type label of a
# leading type argument (``make(map[string]int)``), or "" when there is none.
BuiltinFn = Callable[[list[Value], str], Value]


def _builtin_len(args: list[Value], type_arg: str) -> Value:
    if not args:
        return ABSENT
    val = args[0]
    if isinstance(val, SliceValue):
        return IntValue(len(val.items))
    if isinstance(val, MapValue):
        return IntValue(len(val.entries))
    if isinstance(val, StrValue):
        return IntValue(len(val.value.encode("utf-8")))
    if val is ABSENT:
        return IntValue(0)
    return ABSENT


def _split_map_type(label: str) -> tuple[str, str] | None:
    """``map[K]V`` → (K, V), honouring brackets nested inside K."""
    if not label.startswith(constants.MAP_TYPE_PREFIX):
        return None
    depth = 0
    for i in range(len(constants.MAP_TYPE_PREFIX) - 1, len(label)):
        if label[i] == "[":
            depth += 1
        elif label[i] == "]":
            depth -= 1
            if depth == 0:
                return label[len(constants.MAP_TYPE_PREFIX) : i], label[i + 1 :]
    return None


def _builtin_make(args: list[Value], type_arg: str) -> Value:
    """Only the map form is supported; ``make([]T, n)`` yields ABSENT."""
    parts = _split_map_type(type_arg)
    if parts is None:
        return ABSENT
    key_type, value_type = parts
    return MapValue(key_type=key_type, value_type=value_type)


def _builtin_append(args: list[Value], type_arg: str) -> Value:
    """Copy-on-append: the input slice's backing list is never touched."""
    if not args:
        return ABSENT
    target, extra = args[0], args[1:]
    if isinstance(target, SliceValue):
        elem_type = target.elem_type
        items = list(target.items)
    elif target is ABSENT and extra:
        elem_type = type_label_of(extra[0])
        items = []
    else:
        return ABSENT
    items.extend(v for v in extra if matches_type(v, elem_type))
    return SliceValue(elem_type=elem_type, items=items)


def _builtin_delete(args: list[Value], type_arg: str) -> Value:
    if len(args) >= 2 and isinstance(args[0], MapValue):
        args[0].entries.pop(args[1], None)
    return ABSENT


class Builtins:
    """Table of built-in function implementations."""

    TABLE: dict[str, BuiltinFn] = {
        constants.BUILTIN_LEN: _builtin_len,
        constants.BUILTIN_MAKE: _builtin_make,
        constants.BUILTIN_APPEND: _builtin_append,
        constants.BUILTIN_DELETE: _builtin_delete,
    }
