"""Inbound conversion: script value → dynamic reflective value.

No concrete host type is known here, so composites come back as
``DynamicList``, ``DynamicMap`` and ``DynamicStruct``.  Enum objects (plain
objects carrying the variant key) are rejected; the outbound enum encoding
is write-only.
"""

from __future__ import annotations

import logging

from .config import get_variant_key
from .errors import UnsupportedValueKind
from .primitives import script_primitive_to_reflect
from .reflect import DynamicList, DynamicMap, DynamicStruct, Reflect
from .script import (
    Context,
    JsArray,
    JsMap,
    JsObject,
    JsSet,
    ScriptValue,
    ValueTag,
    property_key_to_string,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def script_to_reflect(value: ScriptValue, ctx: Context) -> Reflect:
    """Recursively rebuild *value* as a dynamic reflective value."""
    if value.tag != ValueTag.OBJECT:
        return script_primitive_to_reflect(value, ctx)
    if value.is_array():
        return _array_to_list(value, ctx)
    if value.is_map():
        return _map_to_map(value, ctx)
    if value.is_set():
        return _set_to_list(value, ctx)
    return _object_to_struct(value, ctx)


# ---------------------------------------------------------------------------
# Per-kind conversion
# ---------------------------------------------------------------------------

def _array_to_list(array: JsArray, ctx: Context) -> DynamicList:
    dynamic_list = DynamicList()
    for i in range(array.length(ctx)):
        dynamic_list.push(script_to_reflect(array.get(i, ctx), ctx))
    return dynamic_list


def _map_to_map(js_map: JsMap, ctx: Context) -> DynamicMap:
    dynamic_map = DynamicMap()
    entries = js_map.entries(ctx)
    while True:
        step = entries.next(ctx)
        if step.done:
            break
        entry = step.value
        key = script_to_reflect(entry.get(0, ctx), ctx)
        value = script_to_reflect(entry.get(1, ctx), ctx)
        dynamic_map.insert(key, value)
    return dynamic_map


def _set_to_list(js_set: JsSet, ctx: Context) -> DynamicList:
    """Set members become list elements in insertion order."""
    dynamic_list = DynamicList()
    values = js_set.values(ctx)
    while True:
        step = values.next(ctx)
        if step.done:
            break
        dynamic_list.push(script_to_reflect(step.value, ctx))
    return dynamic_list


def _object_to_struct(obj: JsObject, ctx: Context) -> DynamicStruct:
    dynamic_struct = DynamicStruct()
    for key in obj.own_property_keys(ctx):
        value = obj.get(key, ctx)
        dynamic_struct.insert(property_key_to_string(key), script_to_reflect(value, ctx))

    variant_key = get_variant_key()
    if not obj.get(variant_key, ctx).is_null_or_undefined():
        logger.debug("rejecting object with %s property", variant_key)
        raise UnsupportedValueKind("Enums are not supported")

    return dynamic_struct
