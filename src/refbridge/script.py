"""Scripting value model: the script-side values and their execution context.

Values are a tagged union.  Primitive tags (null, undefined, boolean,
integer, rational, string, bigint, symbol) are immutable value classes;
``JsObject`` and its array/map/set specialisations are heap objects with
identity, allocated through a :class:`Context`.

Every engine operation that fails raises
:class:`~refbridge.errors.EngineOperationFailed`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum, IntFlag, auto
from typing import Callable, Union

from .errors import EngineOperationFailed


class ValueTag(Enum):
    NULL = auto()
    UNDEFINED = auto()
    BOOLEAN = auto()
    INTEGER = auto()
    RATIONAL = auto()
    STRING = auto()
    BIGINT = auto()
    SYMBOL = auto()
    OBJECT = auto()


class ScriptValue:
    """Common base of every script value."""

    __slots__ = ()

    tag: ValueTag

    def is_null_or_undefined(self) -> bool:
        return False

    def __str__(self) -> str:
        from .display import format_script
        return format_script(self)


# ---------------------------------------------------------------------------
# Primitive values
# ---------------------------------------------------------------------------

class JsNull(ScriptValue):
    """Singleton for the script ``null`` value."""

    __slots__ = ()
    tag = ValueTag.NULL
    _instance: "JsNull | None" = None

    def __new__(cls) -> "JsNull":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Null"

    def __bool__(self) -> bool:
        return False

    def is_null_or_undefined(self) -> bool:
        return True


class JsUndefined(ScriptValue):
    """Singleton for the script ``undefined`` value."""

    __slots__ = ()
    tag = ValueTag.UNDEFINED
    _instance: "JsUndefined | None" = None

    def __new__(cls) -> "JsUndefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Undefined"

    def __bool__(self) -> bool:
        return False

    def is_null_or_undefined(self) -> bool:
        return True


Null = JsNull()
Undefined = JsUndefined()


@dataclass(frozen=True, slots=True)
class JsBoolean(ScriptValue):
    value: bool
    tag = ValueTag.BOOLEAN


@dataclass(frozen=True, slots=True)
class JsInteger(ScriptValue):
    """32-bit signed integer."""

    value: int
    tag = ValueTag.INTEGER

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"integer value requires an int, got {type(self.value).__name__}")
        if not -(2 ** 31) <= self.value <= 2 ** 31 - 1:
            raise ValueError(f"{self.value} does not fit in a 32-bit integer")


@dataclass(frozen=True, slots=True)
class JsRational(ScriptValue):
    """64-bit float."""

    value: float
    tag = ValueTag.RATIONAL


@dataclass(frozen=True, slots=True)
class JsString(ScriptValue):
    value: str
    tag = ValueTag.STRING

    def to_std_string(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class JsBigInt(ScriptValue):
    value: int
    tag = ValueTag.BIGINT

    def to_std_string(self) -> str:
        return str(self.value)


class JsSymbol(ScriptValue):
    """A unique symbol; two symbols are equal only if they are the same object."""

    __slots__ = ("description",)
    tag = ValueTag.SYMBOL

    def __init__(self, description: str | None = None) -> None:
        self.description = description

    def descriptive_string(self) -> str:
        return f"Symbol({self.description or ''})"

    def __repr__(self) -> str:
        return f"JsSymbol({self.description!r})"


# ---------------------------------------------------------------------------
# Execution context
# ---------------------------------------------------------------------------

class Context:
    """Engine bookkeeping needed to create script objects.

    Hands out object ids and interns property-key strings.  A context must
    be used by one caller at a time; it does no locking.
    """

    def __init__(self) -> None:
        self._next_id = 0
        self._interned: dict[str, str] = {}

    @property
    def allocations(self) -> int:
        """Number of objects allocated through this context."""
        return self._next_id

    def allocate(self) -> int:
        oid = self._next_id
        self._next_id += 1
        return oid

    def intern(self, s: str) -> str:
        return self._interned.setdefault(s, s)


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------

class Attribute(IntFlag):
    NONE = 0
    WRITABLE = auto()
    ENUMERABLE = auto()
    CONFIGURABLE = auto()
    ALL = WRITABLE | ENUMERABLE | CONFIGURABLE


PropertyKey = Union[str, int, JsSymbol]
Getter = Callable[["JsObject", Context], ScriptValue]

_MAX_INDEX = 2 ** 32 - 2


def to_property_key(key: PropertyKey | ScriptValue) -> PropertyKey:
    """Normalise *key*: canonical array-index strings become ints."""
    if isinstance(key, JsString):
        key = key.value
    elif isinstance(key, JsInteger):
        key = key.value
    if isinstance(key, JsSymbol):
        return key
    if isinstance(key, bool):
        raise TypeError(f"invalid property key: {key!r}")
    if isinstance(key, int):
        if 0 <= key <= _MAX_INDEX:
            return key
        return str(key)
    if isinstance(key, str):
        if key.isascii() and key.isdigit() and str(int(key)) == key and int(key) <= _MAX_INDEX:
            return int(key)
        return key
    raise TypeError(f"invalid property key: {key!r}")


def property_key_to_string(key: PropertyKey) -> str:
    if isinstance(key, JsSymbol):
        return key.descriptive_string()
    return str(key)


@dataclass(slots=True)
class _Property:
    value: ScriptValue
    attributes: Attribute
    getter: Getter | None = None


@dataclass(frozen=True, slots=True)
class IteratorResult:
    value: ScriptValue
    done: bool


class JsIterator:
    """Iterator object with an engine-style ``next(ctx)`` step."""

    __slots__ = ("_step",)

    def __init__(self, step: Callable[[Context], IteratorResult]) -> None:
        self._step = step

    def next(self, ctx: Context) -> IteratorResult:
        return self._step(ctx)


class JsObject(ScriptValue):
    """Plain script object; also the base of arrays, maps and sets."""

    __slots__ = ("id", "_properties", "_extensible")
    tag = ValueTag.OBJECT

    def __init__(self, ctx: Context) -> None:
        self.id = ctx.allocate()
        self._properties: dict[PropertyKey, _Property] = {}
        self._extensible = True

    @classmethod
    def new(cls, ctx: Context) -> "JsObject":
        return cls(ctx)

    def __repr__(self) -> str:
        return f"{type(self).__name__}#{self.id}"

    # -- Kind tests -----------------------------------------------------

    def is_array(self) -> bool:
        return False

    def is_map(self) -> bool:
        return False

    def is_set(self) -> bool:
        return False

    # -- Extensibility --------------------------------------------------

    def is_extensible(self) -> bool:
        return self._extensible

    def prevent_extensions(self) -> None:
        self._extensible = False

    def freeze(self) -> None:
        self._extensible = False
        for prop in self._properties.values():
            prop.attributes = prop.attributes & Attribute.ENUMERABLE

    # -- Properties -----------------------------------------------------

    def define_property(
        self,
        key: PropertyKey | ScriptValue,
        value: ScriptValue,
        attributes: Attribute = Attribute.ALL,
    ) -> None:
        self._define(to_property_key(key), _Property(value, attributes))

    def define_accessor(
        self,
        key: PropertyKey | ScriptValue,
        getter: Getter,
        attributes: Attribute = Attribute.ENUMERABLE | Attribute.CONFIGURABLE,
    ) -> None:
        self._define(to_property_key(key), _Property(Undefined, attributes, getter))

    def _define(self, key: PropertyKey, prop: _Property) -> None:
        existing = self._properties.get(key)
        if existing is None:
            if not self._extensible:
                raise EngineOperationFailed(
                    f"cannot define property {property_key_to_string(key)}, object is not extensible"
                )
        elif not existing.attributes & Attribute.CONFIGURABLE:
            raise EngineOperationFailed(
                f"cannot redefine non-configurable property {property_key_to_string(key)}"
            )
        self._properties[key] = prop

    def has_own_property(self, key: PropertyKey | ScriptValue) -> bool:
        return to_property_key(key) in self._properties

    def property_attributes(self, key: PropertyKey | ScriptValue) -> Attribute | None:
        prop = self._properties.get(to_property_key(key))
        return None if prop is None else prop.attributes

    def get(self, key: PropertyKey | ScriptValue, ctx: Context) -> ScriptValue:
        prop = self._properties.get(to_property_key(key))
        if prop is None:
            return Undefined
        if prop.getter is not None:
            return prop.getter(self, ctx)
        return prop.value

    def set(self, key: PropertyKey | ScriptValue, value: ScriptValue, ctx: Context) -> None:
        pk = to_property_key(key)
        prop = self._properties.get(pk)
        if prop is None:
            self._define(pk, _Property(value, Attribute.ALL))
            return
        if prop.getter is not None:
            raise EngineOperationFailed(
                f"cannot set property {property_key_to_string(pk)} which has only a getter"
            )
        if not prop.attributes & Attribute.WRITABLE:
            raise EngineOperationFailed(
                f"cannot assign to read only property {property_key_to_string(pk)}"
            )
        prop.value = value

    def own_property_keys(self, ctx: Context) -> list[PropertyKey]:
        """Own keys in engine order: indices ascending, strings, then symbols."""
        indices = sorted(k for k in self._properties if isinstance(k, int))
        strings = [k for k in self._properties if isinstance(k, str)]
        symbols = [k for k in self._properties if isinstance(k, JsSymbol)]
        return [*indices, *strings, *symbols]

    def peek(self, key: PropertyKey) -> ScriptValue | None:
        """Stored value of *key* without running getters; None for accessors."""
        prop = self._properties.get(key)
        if prop is None or prop.getter is not None:
            return None
        return prop.value


class ObjectInitializer:
    """Builder for plain objects with attribute control."""

    def __init__(self, ctx: Context) -> None:
        self._ctx = ctx
        self._object = JsObject(ctx)

    def property(
        self,
        key: PropertyKey | ScriptValue,
        value: ScriptValue,
        attributes: Attribute = Attribute.ALL,
    ) -> "ObjectInitializer":
        if isinstance(key, str):
            key = self._ctx.intern(key)
        self._object.define_property(key, value, attributes)
        return self

    def build(self) -> JsObject:
        return self._object


# ---------------------------------------------------------------------------
# Array / Map / Set
# ---------------------------------------------------------------------------

class JsArray(JsObject):
    """Array object.

    Index keys live in a dense element list, so writing past the end pads
    with ``Undefined``.  Elements are plain data properties; their only
    attribute change is losing ``WRITABLE`` and ``CONFIGURABLE`` on
    :meth:`freeze`.
    """

    __slots__ = ("_elements", "_frozen")

    def __init__(self, ctx: Context) -> None:
        super().__init__(ctx)
        self._elements: list[ScriptValue] = []
        self._frozen = False

    @classmethod
    def from_list(cls, values: list[ScriptValue], ctx: Context) -> "JsArray":
        array = cls(ctx)
        for v in values:
            array.push(v, ctx)
        return array

    def is_array(self) -> bool:
        return True

    def length(self, ctx: Context) -> int:
        return len(self._elements)

    def push(self, value: ScriptValue, ctx: Context) -> int:
        self._write_index(len(self._elements), value)
        return len(self._elements)

    def _write_index(self, index: int, value: ScriptValue) -> None:
        if index < len(self._elements):
            if self._frozen:
                raise EngineOperationFailed(f"cannot assign to read only property {index}")
            self._elements[index] = value
            return
        if not self._extensible:
            raise EngineOperationFailed(
                f"cannot add property {index}, object is not extensible"
            )
        self._elements.extend([Undefined] * (index - len(self._elements)))
        self._elements.append(value)

    def freeze(self) -> None:
        self._frozen = True
        super().freeze()

    def define_property(
        self,
        key: PropertyKey | ScriptValue,
        value: ScriptValue,
        attributes: Attribute = Attribute.ALL,
    ) -> None:
        pk = to_property_key(key)
        if isinstance(pk, int):
            if attributes != Attribute.ALL:
                raise EngineOperationFailed(
                    f"cannot define array index {pk} with attributes {attributes!r}"
                )
            if pk < len(self._elements) and self._frozen:
                raise EngineOperationFailed(f"cannot redefine non-configurable property {pk}")
            self._write_index(pk, value)
            return
        super().define_property(pk, value, attributes)

    def define_accessor(
        self,
        key: PropertyKey | ScriptValue,
        getter: Getter,
        attributes: Attribute = Attribute.ENUMERABLE | Attribute.CONFIGURABLE,
    ) -> None:
        pk = to_property_key(key)
        if isinstance(pk, int):
            raise EngineOperationFailed(f"cannot define accessor for array index {pk}")
        super().define_accessor(pk, getter, attributes)

    def has_own_property(self, key: PropertyKey | ScriptValue) -> bool:
        pk = to_property_key(key)
        if isinstance(pk, int):
            return pk < len(self._elements)
        return super().has_own_property(pk)

    def property_attributes(self, key: PropertyKey | ScriptValue) -> Attribute | None:
        pk = to_property_key(key)
        if isinstance(pk, int):
            if pk >= len(self._elements):
                return None
            return Attribute.ENUMERABLE if self._frozen else Attribute.ALL
        return super().property_attributes(pk)

    def set(self, key: PropertyKey | ScriptValue, value: ScriptValue, ctx: Context) -> None:
        pk = to_property_key(key)
        if isinstance(pk, int):
            self._write_index(pk, value)
            return
        super().set(pk, value, ctx)

    def get(self, key: PropertyKey | ScriptValue, ctx: Context) -> ScriptValue:
        pk = to_property_key(key)
        if isinstance(pk, int) and pk < len(self._elements):
            return self._elements[pk]
        if pk == "length":
            return JsInteger(len(self._elements))
        return super().get(pk, ctx)

    def own_property_keys(self, ctx: Context) -> list[PropertyKey]:
        return [*range(len(self._elements)), *super().own_property_keys(ctx)]

    def peek(self, key: PropertyKey) -> ScriptValue | None:
        if isinstance(key, int) and key < len(self._elements):
            return self._elements[key]
        return super().peek(key)


def same_value_zero(a: ScriptValue, b: ScriptValue) -> bool:
    """Key equality used by maps and sets."""
    if isinstance(a, (JsInteger, JsRational)) and isinstance(b, (JsInteger, JsRational)):
        x, y = float(a.value), float(b.value)
        return x == y or (math.isnan(x) and math.isnan(y))
    if isinstance(a, (JsObject, JsSymbol)) or isinstance(b, (JsObject, JsSymbol)):
        return a is b
    return type(a) is type(b) and a == b


class JsMap(JsObject):
    __slots__ = ("_entries",)

    def __init__(self, ctx: Context) -> None:
        super().__init__(ctx)
        self._entries: list[list[ScriptValue]] = []

    def is_map(self) -> bool:
        return True

    def size(self) -> int:
        return len(self._entries)

    def _find(self, key: ScriptValue) -> int:
        for i, (k, _) in enumerate(self._entries):
            if same_value_zero(k, key):
                return i
        return -1

    def set(self, key: PropertyKey | ScriptValue, value: ScriptValue, ctx: Context) -> None:  # type: ignore[override]
        if not isinstance(key, ScriptValue):
            raise TypeError(f"map keys must be script values, got {type(key).__name__}")
        # -0 is normalised to +0
        if isinstance(key, JsRational) and key.value == 0:
            key = JsRational(0.0)
        i = self._find(key)
        if i >= 0:
            self._entries[i][1] = value
        else:
            self._entries.append([key, value])

    def get_entry(self, key: ScriptValue, ctx: Context) -> ScriptValue:
        i = self._find(key)
        return self._entries[i][1] if i >= 0 else Undefined

    def entries(self, ctx: Context) -> JsIterator:
        """Live iterator; each step yields a ``[key, value]`` array."""
        position = 0

        def step(c: Context) -> IteratorResult:
            nonlocal position
            if position >= len(self._entries):
                return IteratorResult(Undefined, True)
            key, value = self._entries[position]
            position += 1
            return IteratorResult(JsArray.from_list([key, value], c), False)

        return JsIterator(step)


class JsSet(JsObject):
    __slots__ = ("_values",)

    def __init__(self, ctx: Context) -> None:
        super().__init__(ctx)
        self._values: list[ScriptValue] = []

    def is_set(self) -> bool:
        return True

    def size(self) -> int:
        return len(self._values)

    def has(self, value: ScriptValue) -> bool:
        return any(same_value_zero(v, value) for v in self._values)

    def add(self, value: ScriptValue, ctx: Context) -> None:
        if not self.has(value):
            self._values.append(value)

    def values(self, ctx: Context) -> JsIterator:
        position = 0

        def step(c: Context) -> IteratorResult:
            nonlocal position
            if position >= len(self._values):
                return IteratorResult(Undefined, True)
            value = self._values[position]
            position += 1
            return IteratorResult(value, False)

        return JsIterator(step)


def throw(value: ScriptValue) -> EngineOperationFailed:
    """Build the error for a script-level ``throw value``."""
    return EngineOperationFailed.from_opaque(value)

