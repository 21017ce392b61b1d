from __future__ import annotations
import os
from enum import Enum


DEFAULT_VARIANT_KEY = "__variant"


class UnknownPrimitivePolicy(Enum):
    NULL = "null"
    ERROR = "error"


def _from_env(var: str, default: str) -> str:
    raw = os.environ.get(var)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def get_unknown_primitive_policy() -> UnknownPrimitivePolicy:
    raw = _from_env('REFBRIDGE_UNKNOWN_PRIMITIVES', UnknownPrimitivePolicy.NULL.value)
    try:
        return UnknownPrimitivePolicy(raw.lower())
    except ValueError:
        # unrecognised settings keep the silent fallback
        return UnknownPrimitivePolicy.NULL


def get_variant_key() -> str:
    return _from_env('REFBRIDGE_VARIANT_KEY', DEFAULT_VARIANT_KEY)
