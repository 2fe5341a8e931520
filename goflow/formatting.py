"""Go ``fmt`` rendering of runtime values (Print, Println, Printf)."""

from __future__ import annotations

import math
import re
from decimal import Decimal

from . import constants
from .values import (
    AbsentValue,
    BoolValue,
    FloatValue,
    IntValue,
    MapValue,
    SliceValue,
    StrValue,
    Value,
    type_label_of,
)

_VERB_RE = re.compile(r"%([-+# 0]*)(\d+)?(?:\.(\d*))?([a-zA-Z%])")


def _format_float(f: float) -> str:
    """Go's %v for float64: shortest digits, exponent outside [1e-4, 1e21)."""
    if math.isnan(f):
        return "NaN"
    if math.isinf(f):
        return "+Inf" if f > 0 else "-Inf"
    if f == 0:
        return "-0" if math.copysign(1.0, f) < 0 else "0"
    digits = Decimal(repr(f))
    exp = digits.adjusted()
    if -4 <= exp < 21:
        return _strip_fraction(format(digits, "f"))
    mantissa = _strip_fraction(format(digits.scaleb(-exp), "f"))
    sign = "+" if exp >= 0 else "-"
    return f"{mantissa}e{sign}{abs(exp):02d}"


def _strip_fraction(text: str) -> str:
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _sort_key(value: Value):
    if isinstance(value, (IntValue, FloatValue)):
        return (0, value.value, "")
    if isinstance(value, BoolValue):
        return (1, int(value.value), "")
    return (2, 0, format_value(value))


def format_value(value: Value) -> str:
    """Render *value* the way Go's %v verb does."""
    if isinstance(value, BoolValue):
        return "true" if value.value else "false"
    if isinstance(value, IntValue):
        return str(value.value)
    if isinstance(value, FloatValue):
        return _format_float(value.value)
    if isinstance(value, StrValue):
        return value.value
    if isinstance(value, SliceValue):
        return "[" + " ".join(format_value(v) for v in value.items) + "]"
    if isinstance(value, MapValue):
        pairs = sorted(value.entries.items(), key=lambda kv: _sort_key(kv[0]))
        body = " ".join(f"{format_value(k)}:{format_value(v)}" for k, v in pairs)
        return f"map[{body}]"
    return constants.ABSENT_TEXT


def sprint(args: list[Value]) -> str:
    """fmt.Sprint: a space between operands when neither is a string."""
    parts: list[str] = []
    for i, arg in enumerate(args):
        if (
            i > 0
            and not isinstance(arg, StrValue)
            and not isinstance(args[i - 1], StrValue)
        ):
            parts.append(" ")
        parts.append(format_value(arg))
    return "".join(parts)


def sprintln(args: list[Value]) -> str:
    return " ".join(format_value(arg) for arg in args) + "\n"


def _bad_verb(verb: str, arg: Value) -> str:
    if isinstance(arg, AbsentValue):
        return f"%!{verb}(<nil>)"
    return f"%!{verb}({type_label_of(arg)}={format_value(arg)})"


_QUOTE_ESCAPES: dict[str, str] = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}


def _quote(text: str) -> str:
    """Double-quoted Go string literal, escaped like strconv.Quote."""
    parts = []
    for ch in text:
        code = ord(ch)
        if ch in _QUOTE_ESCAPES:
            parts.append(_QUOTE_ESCAPES[ch])
        elif ch.isprintable():
            parts.append(ch)
        elif code < 0x80:
            parts.append(f"\\x{code:02x}")
        elif code < 0x10000:
            parts.append(f"\\u{code:04x}")
        else:
            parts.append(f"\\U{code:08x}")
    return '"' + "".join(parts) + '"'


def _pad(text: str, flags: str, width: str | None, numeric: bool) -> str:
    if not width:
        return text
    size = int(width)
    if len(text) >= size:
        return text
    if "-" in flags:
        return text.ljust(size)
    if "0" in flags:
        sign = text[0] if numeric and text[:1] in ("-", "+") else ""
        return sign + text[len(sign) :].rjust(size - len(sign), "0")
    return text.rjust(size)


def _with_sign(text: str, number: float, flags: str) -> str:
    if "+" in flags and number >= 0:
        return "+" + text
    if " " in flags and number >= 0:
        return " " + text
    return text


def _format_int_verb(verb: str, n: int, flags: str) -> str:
    if verb == "d":
        return _with_sign(str(n), n, flags)
    if verb == "c":
        return chr(n) if 0 <= n <= 0x10FFFF else "\ufffd"
    if verb == "q":
        return "'" + (chr(n) if 0 <= n <= 0x10FFFF else "\ufffd") + "'"
    body = format(abs(n), verb)
    if "#" in flags and verb in ("x", "X"):
        body = "0" + verb + body
    elif "#" in flags and verb == "o":
        body = "0" + body
    return ("-" if n < 0 else "") + body


def _format_float_verb(verb: str, f: float, flags: str, precision: str | None) -> str:
    prec = None if precision is None else int(precision or 0)
    if verb in ("f", "F"):
        text = f"{f:.{6 if prec is None else prec}f}"
    elif verb == "e":
        text = f"{f:.{6 if prec is None else prec}e}"
    else:  # g
        text = _format_float(f) if prec is None else f"{f:.{prec}g}"
    return _with_sign(text, f, flags)


def _format_verb(verb: str, arg: Value, flags: str, precision: str | None) -> str | None:
    """Format one argument; None when the verb does not apply to its kind."""
    if verb == "T":
        return type_label_of(arg) if not isinstance(arg, AbsentValue) else "<nil>"
    if verb == "v":
        if isinstance(arg, IntValue):
            return _with_sign(str(arg.value), arg.value, flags)
        return format_value(arg)
    if isinstance(arg, BoolValue):
        if verb == "t":
            return format_value(arg)
        return None
    if isinstance(arg, IntValue):
        if verb in ("d", "c", "q", "x", "X", "b", "o"):
            return _format_int_verb(verb, arg.value, flags)
        return None
    if isinstance(arg, FloatValue):
        if verb in ("f", "F", "e", "g"):
            return _format_float_verb(verb, arg.value, flags, precision)
        return None
    if isinstance(arg, StrValue):
        text = arg.value
        if verb == "s":
            return text[: int(precision or 0)] if precision is not None else text
        if verb == "q":
            return _quote(text)
        if verb in ("x", "X"):
            hexed = text.encode("utf-8").hex()
            return hexed.upper() if verb == "X" else hexed
        return None
    if isinstance(arg, (SliceValue, MapValue)) and verb in ("s", "d"):
        return format_value(arg)
    return None


def sprintf(fmt_text: str, args: list[Value]) -> str:
    """fmt.Sprintf over the verbs this interpreter supports."""
    out: list[str] = []
    arg_index = 0
    pos = 0
    for match in _VERB_RE.finditer(fmt_text):
        out.append(fmt_text[pos : match.start()])
        pos = match.end()
        flags, width, precision, verb = match.groups()
        if verb == "%":
            out.append("%")
            continue
        if arg_index >= len(args):
            out.append(f"%!{verb}(MISSING)")
            continue
        arg = args[arg_index]
        arg_index += 1
        text = _format_verb(verb, arg, flags, precision)
        if text is None:
            out.append(_bad_verb(verb, arg))
            continue
        numeric = isinstance(arg, (IntValue, FloatValue))
        out.append(_pad(text, flags, width, numeric))
    out.append(fmt_text[pos:])
    if arg_index < len(args):
        extra = ", ".join(
            f"{type_label_of(a)}={format_value(a)}" for a in args[arg_index:]
        )
        out.append(f"%!(EXTRA {extra})")
    return "".join(out)


def format_call(function: str, args: list[Value]) -> str:
    """Render the output of ``fmt.<function>(args...)``."""
    if function in ("Println", "Sprintln"):
        return sprintln(args)
    if function in ("Printf", "Sprintf"):
        if not args or not isinstance(args[0], StrValue):
            return ""
        return sprintf(args[0].value, args[1:])
    return sprint(args)
