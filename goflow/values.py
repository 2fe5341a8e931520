"""Runtime value model: tagged values, type labels and zero values."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

from . import constants

_INT64_MIN = -(2**63)
_INT64_SPAN = 2**64


def wrap_int64(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    return (n - _INT64_MIN) % _INT64_SPAN + _INT64_MIN


# ── Value variant ────────────────────────────────────────────────


class Value:
    """Base of the closed set of runtime values.

    Scalars (IntValue, FloatValue, StrValue, BoolValue) are immutable and
    compare by value.  SliceValue and MapValue compare by identity: binding
    one to a second name aliases the same backing storage.
    """

    __slots__ = ()


@dataclass(frozen=True)
class IntValue(Value):
    value: int


@dataclass(frozen=True)
class FloatValue(Value):
    value: float


@dataclass(frozen=True)
class StrValue(Value):
    value: str


@dataclass(frozen=True)
class BoolValue(Value):
    value: bool


@dataclass(eq=False)
class SliceValue(Value):
    elem_type: str
    items: list[Value] = field(default_factory=list)


@dataclass(eq=False)
class MapValue(Value):
    key_type: str
    value_type: str
    entries: dict[Value, Value] = field(default_factory=dict)


class AbsentValue(Value):
    """Uninitialised or missing value (Go's nil, or an unsupported result)."""

    _instance: AbsentValue | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = AbsentValue()

TRUE = BoolValue(True)
FALSE = BoolValue(False)
ZERO = IntValue(0)


# ── Type labels ──────────────────────────────────────────────────


def slice_type(elem_type: str) -> str:
    return f"{constants.SLICE_TYPE_PREFIX}{elem_type}"


def map_type(key_type: str, value_type: str) -> str:
    return f"{constants.MAP_TYPE_PREFIX}{key_type}]{value_type}"


def type_label_of(value: Value) -> str:
    """Runtime type label of *value*, used only for display."""
    if isinstance(value, BoolValue):
        return constants.TYPE_BOOL
    if isinstance(value, IntValue):
        return constants.TYPE_INT
    if isinstance(value, FloatValue):
        return constants.TYPE_FLOAT
    if isinstance(value, StrValue):
        return constants.TYPE_STRING
    if isinstance(value, SliceValue):
        return slice_type(value.elem_type)
    if isinstance(value, MapValue):
        return map_type(value.key_type, value.value_type)
    return constants.TYPE_AUTO


def zero_value(type_label: str) -> Value:
    """Zero value for a declared binding with no initializer."""
    if type_label == constants.TYPE_STRING:
        return StrValue("")
    if type_label == constants.TYPE_BOOL:
        return FALSE
    if type_label in constants.FLOAT_TYPES:
        return FloatValue(0.0)
    if type_label.startswith(constants.SLICE_TYPE_PREFIX) or type_label.startswith(
        constants.MAP_TYPE_PREFIX
    ):
        return ABSENT
    return ZERO


def matches_type(value: Value, type_label: str) -> bool:
    """True when *value*'s runtime kind is the element kind *type_label*."""
    return type_label_of(value) == type_label or (
        isinstance(value, FloatValue) and type_label in constants.FLOAT_TYPES
    )


def coerce_untyped(value: Value, type_label: str) -> Value:
    """Give an integer constant the float type it is being stored as."""
    if isinstance(value, IntValue) and type_label in constants.FLOAT_TYPES:
        return FloatValue(float(value.value))
    return value


# ── Literal decoding ─────────────────────────────────────────────

_ESCAPE_RE = re.compile(
    r"\\(?:([abfnrtv\\'\"])|x([0-9a-fA-F]{2})|u([0-9a-fA-F]{4})"
    r"|U([0-9a-fA-F]{8})|([0-7]{3}))"
)

_SIMPLE_ESCAPES: dict[str, str] = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    "\\": "\\",
    "'": "'",
    '"': '"',
}


def _decode_escape(match: re.Match) -> str:
    simple, hex2, hex4, hex8, octal = match.groups()
    if simple:
        return _SIMPLE_ESCAPES[simple]
    if octal:
        return chr(int(octal, 8))
    return chr(int(hex2 or hex4 or hex8, 16))


def decode_escapes(body: str) -> str:
    return _ESCAPE_RE.sub(_decode_escape, body)


def parse_int_literal(text: str) -> Value:
    digits = text.replace("_", "")
    try:
        if len(digits) > 1 and digits[0] == "0" and digits.isdigit():
            return IntValue(wrap_int64(int(digits, 8)))
        return IntValue(wrap_int64(int(digits, 0)))
    except ValueError:
        return ABSENT


def parse_float_literal(text: str) -> Value:
    digits = text.replace("_", "")
    try:
        if digits.lower().startswith("0x"):
            return FloatValue(float.fromhex(digits))
        return FloatValue(float(digits))
    except ValueError:
        return ABSENT


def parse_string_literal(text: str) -> Value:
    """Strip quotes from an interpreted ("...") or raw (`...`) string."""
    if len(text) >= 2 and text[0] == "`" and text[-1] == "`":
        return StrValue(text[1:-1].replace("\r", ""))
    if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
        return StrValue(decode_escapes(text[1:-1]))
    return StrValue(text)


def parse_rune_literal(text: str) -> Value:
    body = decode_escapes(text[1:-1]) if len(text) >= 2 else ""
    if len(body) != 1:
        return ABSENT
    return IntValue(ord(body))


# ── Snapshots ────────────────────────────────────────────────────


def to_plain(value: Value) -> Any:
    """Deep, JSON-ready copy of *value* for trace snapshots.

    Map keys are rendered with Go's %v formatting so every key is a string.
    """
    if isinstance(value, (IntValue, FloatValue, StrValue, BoolValue)):
        return value.value
    if isinstance(value, SliceValue):
        return [to_plain(item) for item in value.items]
    if isinstance(value, MapValue):
        from .formatting import format_value

        return {format_value(k): to_plain(v) for k, v in value.entries.items()}
    return None
