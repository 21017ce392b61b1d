"""Exceptions raised by refbridge."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .script import ScriptValue


class BridgeError(Exception):
    """Base class for all refbridge errors."""


class ConversionError(BridgeError):
    """Raised when a converter cannot map a value to the other model."""


class UnsupportedValueKind(ConversionError):
    """Raised for values that have no equivalent on the target side."""


class MissingMetadata(ConversionError):
    """Raised when a reflective field cannot be read by name."""


class ErrorKind(Enum):
    TYPE = "TypeError"
    RANGE = "RangeError"
    OPAQUE = "Opaque"


class EngineOperationFailed(BridgeError):
    """Raised by the scripting model when an engine operation fails.

    ``value`` holds the thrown script value for opaque errors (e.g. a value
    thrown by an accessor), otherwise ``None``.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.TYPE,
        value: "ScriptValue | None" = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.value = value

    @classmethod
    def from_opaque(cls, value: "ScriptValue") -> "EngineOperationFailed":
        return cls(str(value), ErrorKind.OPAQUE, value)

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.args[0]}"


class BridgePanic(RuntimeError):
    """Raised by the panicking entry points when a conversion fails.

    Not a :class:`BridgeError`; the failed conversion's error is chained as
    ``__cause__``.
    """
