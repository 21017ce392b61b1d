"""Reflective object model: the host-side value tree.

Every reflective value is exactly one member of a closed set of shapes
(struct, tuple struct, tuple, list, array, map, enum, primitive).  The
``kind`` property reports which one, so converters can dispatch exhaustively
instead of probing types one by one.

Dynamic values (``DynamicStruct``, ``DynamicList``, ``DynamicMap``) are the
untyped stand-ins built by inbound conversion.  They are ordinary members of
the corresponding shape, with no type name.
"""

from __future__ import annotations

import dataclasses
import math
import struct
import sys
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Iterator, Union

from .bridge import FromScriptValue, IntoScriptValue


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------

class ReflectKind(Enum):
    STRUCT = auto()
    TUPLE_STRUCT = auto()
    TUPLE = auto()
    LIST = auto()
    ARRAY = auto()
    MAP = auto()
    ENUM = auto()
    VALUE = auto()


class PrimitiveType(Enum):
    BOOL = "bool"
    I8 = "i8"
    I16 = "i16"
    I32 = "i32"
    I64 = "i64"
    ISIZE = "isize"
    U8 = "u8"
    U16 = "u16"
    U32 = "u32"
    U64 = "u64"
    USIZE = "usize"
    F32 = "f32"
    F64 = "f64"
    STRING = "String"
    STR = "&str"
    # Host types without a script representation
    UNIT = "()"
    CHAR = "char"
    I128 = "i128"
    U128 = "u128"
    OPAQUE = "opaque"


_INT_RANGES: dict[PrimitiveType, tuple[int, int]] = {
    PrimitiveType.I8: (-(2 ** 7), 2 ** 7 - 1),
    PrimitiveType.I16: (-(2 ** 15), 2 ** 15 - 1),
    PrimitiveType.I32: (-(2 ** 31), 2 ** 31 - 1),
    PrimitiveType.I64: (-(2 ** 63), 2 ** 63 - 1),
    PrimitiveType.ISIZE: (-sys.maxsize - 1, sys.maxsize),
    PrimitiveType.I128: (-(2 ** 127), 2 ** 127 - 1),
    PrimitiveType.U8: (0, 2 ** 8 - 1),
    PrimitiveType.U16: (0, 2 ** 16 - 1),
    PrimitiveType.U32: (0, 2 ** 32 - 1),
    PrimitiveType.U64: (0, 2 ** 64 - 1),
    PrimitiveType.USIZE: (0, 2 * sys.maxsize + 1),
    PrimitiveType.U128: (0, 2 ** 128 - 1),
}


def to_f32(x: float) -> float:
    """Round *x* to the nearest single-precision value.

    Magnitudes beyond the f32 range saturate to infinity; NaN is kept.
    """
    x = float(x)
    if math.isnan(x) or math.isinf(x):
        return x
    try:
        return struct.unpack("<f", struct.pack("<f", x))[0]
    except OverflowError:
        return math.copysign(math.inf, x)


# ---------------------------------------------------------------------------
# Base
# ---------------------------------------------------------------------------

class Reflect(IntoScriptValue, FromScriptValue):
    """Common base of every reflective value.

    Each shape defines ``kind`` as a property.
    """

    __slots__ = ()

    kind: ReflectKind

    def __str__(self) -> str:
        from .display import format_reflect
        return format_reflect(self)


@dataclass(slots=True)
class RField:
    name: str | None  # None = unnamed (tuple-like field)
    value: Reflect


# ---------------------------------------------------------------------------
# Composite shapes
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class RStruct(Reflect):
    type_name: str | None = None
    fields: list[RField] = field(default_factory=list)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.STRUCT

    def field_len(self) -> int:
        return len(self.fields)

    def name_at(self, index: int) -> str | None:
        if 0 <= index < len(self.fields):
            return self.fields[index].name
        return None

    def iter_fields(self) -> Iterator[Reflect]:
        return (f.value for f in self.fields)

    def get_field(self, name: str) -> Reflect | None:
        for f in self.fields:
            if f.name == name:
                return f.value
        return None


@dataclass(slots=True)
class RTupleStruct(Reflect):
    type_name: str | None = None
    fields: list[Reflect] = field(default_factory=list)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.TUPLE_STRUCT

    def iter_fields(self) -> Iterator[Reflect]:
        return iter(self.fields)


@dataclass(slots=True)
class RTuple(Reflect):
    fields: list[Reflect] = field(default_factory=list)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.TUPLE

    def iter_fields(self) -> Iterator[Reflect]:
        return iter(self.fields)


@dataclass(slots=True)
class RList(Reflect):
    items: list[Reflect] = field(default_factory=list)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.LIST

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Reflect]:
        return iter(self.items)

    def push(self, value: Reflect) -> None:
        self.items.append(value)


@dataclass(slots=True)
class RArray(Reflect):
    """Fixed-length array; the length of ``items`` is the declared length."""

    items: tuple[Reflect, ...] = ()

    def __post_init__(self) -> None:
        self.items = tuple(self.items)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.ARRAY

    def __len__(self) -> int:
        return len(self.items)

    def get(self, index: int) -> Reflect:
        if not 0 <= index < len(self.items):
            raise IndexError(f"array index {index} out of range for length {len(self.items)}")
        return self.items[index]


@dataclass(slots=True)
class RMap(Reflect):
    entries: list[tuple[Reflect, Reflect]] = field(default_factory=list)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.MAP

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[tuple[Reflect, Reflect]]:
        return iter(self.entries)

    def get(self, key: Reflect) -> Reflect | None:
        for k, v in self.entries:
            if k == key:
                return v
        return None

    def insert(self, key: Reflect, value: Reflect) -> None:
        """Insert *key*; an equal existing key keeps its position."""
        for i, (k, _) in enumerate(self.entries):
            if k == key:
                self.entries[i] = (k, value)
                return
        self.entries.append((key, value))


@dataclass(slots=True)
class REnum(Reflect):
    type_name: str | None = None
    variant: str = ""
    fields: list[RField] = field(default_factory=list)

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.ENUM

    def variant_name(self) -> str:
        return self.variant

    def iter_fields(self) -> Iterator[RField]:
        return iter(self.fields)


# ---------------------------------------------------------------------------
# Primitive
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class RPrimitive(Reflect):
    type: PrimitiveType
    value: Any = None

    def __post_init__(self) -> None:
        t = self.type
        v = self.value
        if t == PrimitiveType.BOOL:
            if not isinstance(v, bool):
                raise TypeError(f"bool primitive requires a bool, got {type(v).__name__}")
        elif t in _INT_RANGES:
            if isinstance(v, bool) or not isinstance(v, int):
                raise TypeError(f"{t.value} primitive requires an int, got {type(v).__name__}")
            lo, hi = _INT_RANGES[t]
            if not lo <= v <= hi:
                raise ValueError(f"{v} out of range for {t.value}")
        elif t in (PrimitiveType.F32, PrimitiveType.F64):
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise TypeError(f"{t.value} primitive requires a number, got {type(v).__name__}")
            self.value = to_f32(v) if t == PrimitiveType.F32 else float(v)
        elif t in (PrimitiveType.STRING, PrimitiveType.STR):
            if not isinstance(v, str):
                raise TypeError(f"{t.value} primitive requires a str, got {type(v).__name__}")
        elif t == PrimitiveType.CHAR:
            if not isinstance(v, str) or len(v) != 1:
                raise ValueError(f"char primitive requires a single character, got {v!r}")
        elif t == PrimitiveType.UNIT:
            if v is not None:
                raise ValueError("unit primitive carries no value")

    @property
    def kind(self) -> ReflectKind:
        return ReflectKind.VALUE

    def is_unit(self) -> bool:
        return self.type == PrimitiveType.UNIT


def unit() -> RPrimitive:
    """The reflective unit value (host "no data")."""
    return RPrimitive(PrimitiveType.UNIT)


# ---------------------------------------------------------------------------
# Dynamic values
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class DynamicStruct(RStruct):
    def insert(self, name: str, value: Reflect) -> None:
        for f in self.fields:
            if f.name == name:
                f.value = value
                return
        self.fields.append(RField(name, value))


@dataclass(slots=True)
class DynamicList(RList):
    pass


@dataclass(slots=True)
class DynamicMap(RMap):
    pass


ReflectValue = Union[RStruct, RTupleStruct, RTuple, RList, RArray, RMap, REnum, RPrimitive]


# ---------------------------------------------------------------------------
# Host objects
# ---------------------------------------------------------------------------

def reflect(obj: Any) -> Reflect:
    """Map an ordinary Python object onto the reflective model.

    - Reflect instances are returned unchanged
    - ``None`` → unit, ``bool`` → bool, ``float`` → f64, ``str`` → String
    - ``int`` → the first of i32, i64, u64 that fits, else an opaque primitive
    - dataclass instances → struct (declaration order)
    - named tuples → tuple struct, other tuples → tuple
    - ``list`` → list, ``dict`` → map
    - ``enum.Enum`` members → unit enum variant
    - anything else → opaque primitive
    """
    if isinstance(obj, Reflect):
        return obj
    if obj is None:
        return unit()
    if isinstance(obj, bool):
        return RPrimitive(PrimitiveType.BOOL, obj)
    if isinstance(obj, Enum):
        return REnum(type(obj).__name__, obj.name)
    if isinstance(obj, int):
        return _reflect_int(obj)
    if isinstance(obj, float):
        return RPrimitive(PrimitiveType.F64, obj)
    if isinstance(obj, str):
        return RPrimitive(PrimitiveType.STRING, obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return RStruct(
            type(obj).__name__,
            [RField(f.name, reflect(getattr(obj, f.name))) for f in dataclasses.fields(obj)],
        )
    if isinstance(obj, tuple):
        if hasattr(obj, "_fields"):
            return RTupleStruct(type(obj).__name__, [reflect(v) for v in obj])
        return RTuple([reflect(v) for v in obj])
    if isinstance(obj, list):
        return RList([reflect(v) for v in obj])
    if isinstance(obj, dict):
        return RMap([(reflect(k), reflect(v)) for k, v in obj.items()])
    return RPrimitive(PrimitiveType.OPAQUE, obj)


def _reflect_int(n: int) -> RPrimitive:
    for t in (PrimitiveType.I32, PrimitiveType.I64, PrimitiveType.U64):
        lo, hi = _INT_RANGES[t]
        if lo <= n <= hi:
            return RPrimitive(t, n)
    return RPrimitive(PrimitiveType.OPAQUE, n)
