"""Compact one-line formatting for script and reflective values."""

from __future__ import annotations

import math
import re

from .reflect import PrimitiveType, Reflect, ReflectKind, RField
from .script import Context, JsObject, JsSymbol, PropertyKey, ScriptValue, ValueTag

_IDENT_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


# ---------------------------------------------------------------------------
# Script values
# ---------------------------------------------------------------------------

def format_script(value: ScriptValue) -> str:
    """Format *value* the way a script console shows it.

    ``{ x: 5, __variant: "Foo" }``, ``[1, 2]``, ``Map(1) { "a" => 1 }``,
    ``Set(1) { 1 }``, ``123n``.
    """
    return _fmt_script(value, set())


def _fmt_number(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x == int(x) and abs(x) < 1e21:
        return str(int(x)) if x != 0 or math.copysign(1, x) > 0 else "-0"
    return repr(x)


def _fmt_string(s: str) -> str:
    return '"' + s.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _fmt_key(key: PropertyKey) -> str:
    if isinstance(key, JsSymbol):
        return f"[{key.descriptive_string()}]"
    if isinstance(key, int) or _IDENT_RE.match(key):
        return str(key)
    return _fmt_string(key)


def _fmt_script(value: ScriptValue, seen: set[int]) -> str:
    tag = value.tag
    if tag == ValueTag.NULL:
        return "null"
    if tag == ValueTag.UNDEFINED:
        return "undefined"
    if tag == ValueTag.BOOLEAN:
        return "true" if value.value else "false"
    if tag == ValueTag.INTEGER:
        return str(value.value)
    if tag == ValueTag.RATIONAL:
        return _fmt_number(value.value)
    if tag == ValueTag.STRING:
        return _fmt_string(value.value)
    if tag == ValueTag.BIGINT:
        return f"{value.value}n"
    if tag == ValueTag.SYMBOL:
        return value.descriptive_string()
    return _fmt_object(value, seen)


def _fmt_object(obj: JsObject, seen: set[int]) -> str:
    if obj.id in seen:
        return "[Circular]"
    seen = seen | {obj.id}
    ctx = Context()

    if obj.is_array():
        items = [_fmt_script(obj.get(i, ctx), seen) for i in range(obj.length(ctx))]
        return "[" + ", ".join(items) + "]"

    if obj.is_map():
        parts = []
        entries = obj.entries(ctx)
        while True:
            step = entries.next(ctx)
            if step.done:
                break
            k, v = step.value.get(0, ctx), step.value.get(1, ctx)
            parts.append(f"{_fmt_script(k, seen)} => {_fmt_script(v, seen)}")
        body = " { " + ", ".join(parts) + " }" if parts else " {}"
        return f"Map({obj.size()}){body}"

    if obj.is_set():
        parts = []
        values = obj.values(ctx)
        while True:
            step = values.next(ctx)
            if step.done:
                break
            parts.append(_fmt_script(step.value, seen))
        body = " { " + ", ".join(parts) + " }" if parts else " {}"
        return f"Set({obj.size()}){body}"

    parts = []
    for key in obj.own_property_keys(ctx):
        stored = obj.peek(key)
        shown = "[Getter]" if stored is None else _fmt_script(stored, seen)
        parts.append(f"{_fmt_key(key)}: {shown}")
    if not parts:
        return "{}"
    return "{ " + ", ".join(parts) + " }"


# ---------------------------------------------------------------------------
# Reflective values
# ---------------------------------------------------------------------------

def format_reflect(value: Reflect) -> str:
    """Format *value* in host notation.

    ``Point { x: 1i32 }``, ``Pair(1i32, 2i32)``, ``[1i32, 2i32]``,
    ``{ "a": 1i64 }``, ``Shape::Circle { r: 1.0f64 }``.
    """
    kind = value.kind
    if kind == ReflectKind.STRUCT:
        return _fmt_named_fields(value.type_name or "", value.fields)
    if kind == ReflectKind.TUPLE_STRUCT:
        return f"{value.type_name or ''}({', '.join(format_reflect(v) for v in value.fields)})"
    if kind == ReflectKind.TUPLE:
        inner = ", ".join(format_reflect(v) for v in value.fields)
        return f"({inner},)" if len(value.fields) == 1 else f"({inner})"
    if kind in (ReflectKind.LIST, ReflectKind.ARRAY):
        return "[" + ", ".join(format_reflect(v) for v in value.items) + "]"
    if kind == ReflectKind.MAP:
        if not value.entries:
            return "{}"
        parts = [f"{format_reflect(k)}: {format_reflect(v)}" for k, v in value.entries]
        return "{ " + ", ".join(parts) + " }"
    if kind == ReflectKind.ENUM:
        head = f"{value.type_name}::{value.variant}" if value.type_name else value.variant
        if not value.fields:
            return head
        if all(f.name is None for f in value.fields):
            return f"{head}({', '.join(format_reflect(f.value) for f in value.fields)})"
        return _fmt_named_fields(head, value.fields)
    return _fmt_primitive(value.type, value.value)


def _fmt_named_fields(head: str, fields: list[RField]) -> str:
    prefix = f"{head} " if head else ""
    if not fields:
        return prefix + "{}"
    parts = [f"{f.name if f.name is not None else '<unnamed>'}: {format_reflect(f.value)}" for f in fields]
    return prefix + "{ " + ", ".join(parts) + " }"


def _fmt_primitive(t: PrimitiveType, v: object) -> str:
    if t == PrimitiveType.UNIT:
        return "()"
    if t == PrimitiveType.BOOL:
        return "true" if v else "false"
    if t in (PrimitiveType.STRING, PrimitiveType.STR):
        return _fmt_string(v)
    if t == PrimitiveType.CHAR:
        return repr(v)
    if t == PrimitiveType.OPAQUE:
        return f"<opaque {type(v).__name__}>"
    # numeric: value followed by its type suffix
    return f"{v!r}{t.value}"
