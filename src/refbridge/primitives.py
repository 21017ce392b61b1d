"""Primitive coercion table between host primitives and script primitives.

Outbound, each host primitive type maps to one script tag:

- bool → Boolean
- i8 / i16 / i32 / u8 / u16 → Integer (32-bit)
- i64 / isize / u32 / u64 / usize → BigInt
- f32 / f64 → Rational
- String / &str → String
- anything else → Null

Inbound, every numeric tag collapses to f32 and bigints become their
decimal text; host integer widths are not reconstructed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from .config import UnknownPrimitivePolicy, get_unknown_primitive_policy
from .errors import UnsupportedValueKind
from .reflect import PrimitiveType, RPrimitive, unit
from .script import (
    Context,
    JsBigInt,
    JsBoolean,
    JsInteger,
    JsRational,
    JsString,
    Null,
    ScriptValue,
    ValueTag,
)

logger = logging.getLogger(__name__)


def _wrap_i64(n: int) -> int:
    return (n + 2 ** 63) % 2 ** 64 - 2 ** 63


# Tried in order; no type appears in two rules.
_OUTBOUND_RULES: tuple[tuple[frozenset[PrimitiveType], Callable[[Any], ScriptValue]], ...] = (
    (frozenset({PrimitiveType.BOOL}), JsBoolean),
    (frozenset({PrimitiveType.I8, PrimitiveType.I16, PrimitiveType.I32}), JsInteger),
    (frozenset({PrimitiveType.I64}), JsBigInt),
    (frozenset({PrimitiveType.ISIZE}), lambda v: JsBigInt(_wrap_i64(v))),
    (frozenset({PrimitiveType.U8, PrimitiveType.U16}), JsInteger),
    (frozenset({PrimitiveType.U32, PrimitiveType.U64, PrimitiveType.USIZE}), JsBigInt),
    (frozenset({PrimitiveType.F32, PrimitiveType.F64}), lambda v: JsRational(float(v))),
    (frozenset({PrimitiveType.STRING, PrimitiveType.STR}), JsString),
)


def primitive_to_script(value: RPrimitive, ctx: Context) -> ScriptValue:
    """Convert a host primitive to its script representation.

    Types missing from the table become ``Null`` unless
    ``REFBRIDGE_UNKNOWN_PRIMITIVES=error`` is set.
    """
    for types, build in _OUTBOUND_RULES:
        if value.type in types:
            return build(value.value)

    if get_unknown_primitive_policy() is UnknownPrimitivePolicy.ERROR:
        raise UnsupportedValueKind(
            f"{value.type.value} primitive has no script representation"
        )
    logger.debug("no script representation for %s primitive, using null", value.type.value)
    return Null


def script_primitive_to_reflect(value: ScriptValue, ctx: Context) -> RPrimitive:
    """Convert a non-object script value to a host primitive."""
    tag = value.tag
    if tag in (ValueTag.NULL, ValueTag.UNDEFINED):
        return unit()
    if tag == ValueTag.BOOLEAN:
        return RPrimitive(PrimitiveType.BOOL, value.value)
    if tag in (ValueTag.INTEGER, ValueTag.RATIONAL):
        # RPrimitive narrows f32 values on construction
        return RPrimitive(PrimitiveType.F32, float(value.value))
    if tag in (ValueTag.STRING, ValueTag.BIGINT):
        return RPrimitive(PrimitiveType.STRING, value.to_std_string())
    if tag == ValueTag.SYMBOL:
        raise UnsupportedValueKind("Symbol conversion not supported")
    raise TypeError(f"{value!r} is not a primitive script value")
