from __future__ import annotations
from typing import Any, Dict, List, Optional
from flask import abort


def apply_multi_sort(rows: List[Dict[str, Any]], sort_expr: Optional[str], allowed: Dict[str, str],
                     tie_breaker: str) -> List[Dict[str, Any]]:
    """Sort records by several fields.

    sort_expr: comma-separated tokens, each optionally prefixed with '-'.
    allowed: mapping of public sort key -> record field.
    tie_breaker: record field appended (ascending) for deterministic ordering.
    """
    keys = []
    for raw in (sort_expr or '').split(','):
        token = raw.strip()
        if not token:
            continue
        desc = token.startswith('-')
        key = token[1:] if desc else token
        field = allowed.get(key)
        if not field:
            abort(400, description=f'Invalid sort field {key}')
        keys.append((field, desc))
    keys.append((tie_breaker, False))
    ordered = list(rows)
    # Stable sorts applied from the least significant key
    for field, desc in reversed(keys):
        ordered.sort(key=lambda r: (r.get(field) is not None, r.get(field)), reverse=desc)
    return ordered


__all__ = ['apply_multi_sort']
