from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List
from flask import abort


def apply_filters(rows: Iterable[Dict[str, Any]], specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Generic record filter.

    specs: { param_name: { 'match': callable(record, value)->bool, 'coerce': type/func, 'validate': callable(optional) } }
    """
    checks: List[Callable[[Dict[str, Any]], bool]] = []
    for name, meta in specs.items():
        if name not in params or params[name] in (None, ''):
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except (TypeError, ValueError):
                abort(400, description=f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            abort(400, description=f'{name} invalid')
        checks.append(lambda row, m=meta['match'], v=val: m(row, v))
    return [row for row in rows if all(check(row) for check in checks)]


def equals(field: str) -> Callable[[Dict[str, Any], Any], bool]:
    return lambda row, value: row.get(field) == value


def contains(*fields: str) -> Callable[[Dict[str, Any], Any], bool]:
    """Case-insensitive substring match on any of `fields`."""
    def match(row, value):
        needle = str(value).lower()
        return any(needle in str(row.get(f) or '').lower() for f in fields)
    return match


__all__ = ['apply_filters', 'equals', 'contains']
