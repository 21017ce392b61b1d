"""refbridge — value bridge between a reflective object model and a scripting value model."""

from .bridge import (
    FromScriptValue,
    IntoScriptValue,
    from_script_value,
    into_script_value,
    try_from_script_value,
    try_into_script_value,
)
from .errors import (
    BridgeError,
    BridgePanic,
    ConversionError,
    EngineOperationFailed,
    ErrorKind,
    MissingMetadata,
    UnsupportedValueKind,
)
from .reflect import (
    DynamicList,
    DynamicMap,
    DynamicStruct,
    PrimitiveType,
    RArray,
    REnum,
    RField,
    Reflect,
    ReflectKind,
    RList,
    RMap,
    RPrimitive,
    RStruct,
    RTuple,
    RTupleStruct,
    reflect,
    unit,
)
from .script import (
    Attribute,
    Context,
    JsArray,
    JsBigInt,
    JsBoolean,
    JsInteger,
    JsMap,
    JsObject,
    JsRational,
    JsSet,
    JsString,
    JsSymbol,
    Null,
    ObjectInitializer,
    ScriptValue,
    Undefined,
    ValueTag,
)
from .outbound import reflect_to_script
from .inbound import script_to_reflect
from .display import format_reflect, format_script

__all__ = [
    "into_script_value",
    "try_into_script_value",
    "from_script_value",
    "try_from_script_value",
    "IntoScriptValue",
    "FromScriptValue",
    "reflect_to_script",
    "script_to_reflect",
    "reflect",
    "unit",
    "Reflect",
    "ReflectKind",
    "PrimitiveType",
    "RField",
    "RStruct",
    "RTupleStruct",
    "RTuple",
    "RList",
    "RArray",
    "RMap",
    "REnum",
    "RPrimitive",
    "DynamicStruct",
    "DynamicList",
    "DynamicMap",
    "Context",
    "ScriptValue",
    "ValueTag",
    "Null",
    "Undefined",
    "JsBoolean",
    "JsInteger",
    "JsRational",
    "JsString",
    "JsBigInt",
    "JsSymbol",
    "JsObject",
    "JsArray",
    "JsMap",
    "JsSet",
    "Attribute",
    "ObjectInitializer",
    "format_script",
    "format_reflect",
    "BridgeError",
    "BridgePanic",
    "ConversionError",
    "UnsupportedValueKind",
    "MissingMetadata",
    "EngineOperationFailed",
    "ErrorKind",
]
