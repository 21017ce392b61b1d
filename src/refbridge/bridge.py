"""Public facade: the two conversion capabilities.

Every reflective value inherits :class:`IntoScriptValue` and
:class:`FromScriptValue`.  The module-level functions offer the same entry
points for plain host objects, which are passed through
:func:`refbridge.reflect.reflect` first.

Each capability has a fallible entry point (``try_*``), which raises the
original :class:`~refbridge.errors.BridgeError`, and a panicking one, which
turns any such error into :class:`~refbridge.errors.BridgePanic`.

Usage::

    ctx = Context()
    obj = Point(1, 2)                         # a dataclass
    js = into_script_value(obj, ctx)          # → { x: 1, y: 2 }
    back = try_from_script_value(js, ctx)     # → DynamicStruct
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from .errors import BridgeError, BridgePanic

if TYPE_CHECKING:
    from .reflect import Reflect
    from .script import Context, ScriptValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _expect(direction: str, convert: Callable[[], T]) -> T:
    try:
        return convert()
    except BridgeError as exc:
        logger.critical("%s conversion failed: %s", direction, exc)
        raise BridgePanic(f"{direction} conversion failed: {exc}") from exc


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------

class IntoScriptValue:
    """Conversion of a reflective value into a script value."""

    __slots__ = ()

    def into_script_value(self, ctx: "Context") -> "ScriptValue":
        """Convert, raising :class:`BridgePanic` if the conversion fails."""
        return _expect("outbound", lambda: self.try_into_script_value(ctx))

    def try_into_script_value(self, ctx: "Context") -> "ScriptValue":
        """Convert, raising the underlying error if the conversion fails."""
        from .outbound import reflect_to_script
        logger.debug("converting %s to script value", self.kind.name)
        return reflect_to_script(self, ctx)


class FromScriptValue:
    """Conversion of a script value into a dynamic reflective value.

    The result is always a dynamic value (or a primitive); rebuilding a
    concrete host type from it is left to the caller.
    """

    __slots__ = ()

    @classmethod
    def from_script_value(cls, value: "ScriptValue", ctx: "Context") -> "Reflect":
        """Convert, raising :class:`BridgePanic` if the conversion fails."""
        return _expect("inbound", lambda: cls.try_from_script_value(value, ctx))

    @classmethod
    def try_from_script_value(cls, value: "ScriptValue", ctx: "Context") -> "Reflect":
        """Convert, raising the underlying error if the conversion fails."""
        from .inbound import script_to_reflect
        logger.debug("converting %s script value", value.tag.name)
        return script_to_reflect(value, ctx)


# ---------------------------------------------------------------------------
# Host-object entry points
# ---------------------------------------------------------------------------

def into_script_value(obj: Any, ctx: "Context") -> "ScriptValue":
    from .reflect import reflect
    return reflect(obj).into_script_value(ctx)


def try_into_script_value(obj: Any, ctx: "Context") -> "ScriptValue":
    from .reflect import reflect
    return reflect(obj).try_into_script_value(ctx)


def from_script_value(value: "ScriptValue", ctx: "Context") -> "Reflect":
    return FromScriptValue.from_script_value(value, ctx)


def try_from_script_value(value: "ScriptValue", ctx: "Context") -> "Reflect":
    return FromScriptValue.try_from_script_value(value, ctx)
