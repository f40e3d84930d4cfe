from __future__ import annotations
"""Recursive key-case conversion between the camelCase wire format and snake_case records.

Only dict keys change; values are converted recursively through dicts, lists
and tuples and are otherwise returned untouched.
"""
import re
from typing import Any, Callable

_UPPER = re.compile(r'[A-Z]')
_UNDERSCORE_LOWER = re.compile(r'_([a-z0-9])')


def snake_key(key: str) -> str:
    return _UPPER.sub(lambda m: '_' + m.group(0).lower(), key)


def camel_key(key: str) -> str:
    return _UNDERSCORE_LOWER.sub(lambda m: m.group(1).upper(), key)


def _convert(obj: Any, converter: Callable[[str], str]) -> Any:
    if isinstance(obj, dict):
        return {
            (converter(k) if isinstance(k, str) else k): _convert(v, converter)
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [_convert(v, converter) for v in obj]
    if isinstance(obj, tuple):
        return tuple(_convert(v, converter) for v in obj)
    return obj


def to_snake_case(obj: Any) -> Any:
    return _convert(obj, snake_key)


def to_camel_case(obj: Any) -> Any:
    return _convert(obj, camel_key)


__all__ = ['snake_key', 'camel_key', 'to_snake_case', 'to_camel_case']
