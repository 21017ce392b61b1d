"""Outbound conversion: reflective value → script value."""

from __future__ import annotations

from .config import get_variant_key
from .errors import MissingMetadata
from .primitives import primitive_to_script
from .reflect import (
    RArray,
    REnum,
    Reflect,
    ReflectKind,
    RList,
    RMap,
    RStruct,
    RTuple,
    RTupleStruct,
)
from .script import Attribute, Context, JsArray, JsMap, JsString, ObjectInitializer, ScriptValue


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def reflect_to_script(value: Reflect, ctx: Context) -> ScriptValue:
    """Recursively rebuild *value* as a script value allocated in *ctx*."""
    kind = value.kind
    if kind == ReflectKind.STRUCT:
        return _struct_to_object(value, ctx)
    if kind == ReflectKind.TUPLE_STRUCT:
        return _tuple_struct_to_array(value, ctx)
    if kind == ReflectKind.TUPLE:
        return _tuple_to_array(value, ctx)
    if kind == ReflectKind.LIST:
        return _list_to_array(value, ctx)
    if kind == ReflectKind.ARRAY:
        return _array_to_array(value, ctx)
    if kind == ReflectKind.MAP:
        return _map_to_map(value, ctx)
    if kind == ReflectKind.ENUM:
        return _enum_to_object(value, ctx)
    if kind == ReflectKind.VALUE:
        return primitive_to_script(value, ctx)
    raise AssertionError(f"unhandled reflect kind: {kind}")


# ---------------------------------------------------------------------------
# Per-shape conversion
# ---------------------------------------------------------------------------

def _struct_to_object(struct: RStruct, ctx: Context) -> ScriptValue:
    """Struct → plain object, one property per field in declaration order."""
    properties: list[tuple[str, ScriptValue]] = []
    for idx, field_value in enumerate(struct.iter_fields()):
        js_value = reflect_to_script(field_value, ctx)
        name = struct.name_at(idx)
        if name is None:
            raise MissingMetadata(
                f"Could not read field {idx} of {struct.type_name or 'struct'}"
            )
        properties.append((name, js_value))

    obj = ObjectInitializer(ctx)
    for name, js_value in properties:
        obj.property(name, js_value, Attribute.ALL)
    return obj.build()


def _tuple_struct_to_array(tuple_struct: RTupleStruct, ctx: Context) -> ScriptValue:
    array = JsArray.new(ctx)
    for field_value in tuple_struct.iter_fields():
        array.push(reflect_to_script(field_value, ctx), ctx)
    return array


def _tuple_to_array(tup: RTuple, ctx: Context) -> ScriptValue:
    array = JsArray.new(ctx)
    for field_value in tup.iter_fields():
        array.push(reflect_to_script(field_value, ctx), ctx)
    return array


def _list_to_array(lst: RList, ctx: Context) -> ScriptValue:
    array = JsArray.new(ctx)
    for item in lst:
        array.push(reflect_to_script(item, ctx), ctx)
    return array


def _array_to_array(arr: RArray, ctx: Context) -> ScriptValue:
    array = JsArray.new(ctx)
    for i in range(len(arr)):
        array.push(reflect_to_script(arr.get(i), ctx), ctx)
    return array


def _map_to_map(m: RMap, ctx: Context) -> ScriptValue:
    js_map = JsMap.new(ctx)
    for key, value in m:
        js_key = reflect_to_script(key, ctx)
        js_value = reflect_to_script(value, ctx)
        js_map.set(js_key, js_value, ctx)
    return js_map


def _enum_to_object(enum_value: REnum, ctx: Context) -> ScriptValue:
    """Enum → plain object of named payload fields plus the variant key.

    ``Shape::Circle { r: 1.0 }`` becomes ``{ r: 1, __variant: "Circle" }``.
    Tuple variants have unnamed fields and are rejected.
    """
    properties: list[tuple[str, ScriptValue]] = []
    for f in enum_value.iter_fields():
        if f.name is None:
            raise MissingMetadata(
                f"Could not read field name of {enum_value.type_name or 'enum'}::{enum_value.variant_name()}"
            )
        properties.append((f.name, reflect_to_script(f.value, ctx)))

    obj = ObjectInitializer(ctx)
    for name, js_value in properties:
        obj.property(name, js_value, Attribute.ALL)
    obj.property(get_variant_key(), JsString(enum_value.variant_name()), Attribute.ALL)
    return obj.build()
