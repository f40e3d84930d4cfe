from __future__ import annotations
"""Pagination and conditional-GET helpers for list endpoints.

Lists are built in memory from store records, so the ETag is a digest of
the page content itself: any change to a listed record changes the tag.
"""
import hashlib
import json
from typing import Any, Dict, List, Sequence, Tuple

from flask import abort, current_app, make_response, request

from tracker.config.settings import normalize_pagination


def page_params() -> Tuple[int, int]:
    try:
        return normalize_pagination(
            request.args.get('limit'),
            request.args.get('offset'),
            current_app.config.get('PAGINATION_DEFAULT_LIMIT', 50),
            current_app.config.get('PAGINATION_MAX_LIMIT', 200),
        )
    except ValueError as e:
        abort(400, description=str(e))


def paginate(rows: Sequence[Any]) -> Tuple[List[Any], int, int, int]:
    limit, offset = page_params()
    return list(rows[offset:offset + limit]), len(rows), limit, offset


def compute_etag(payload: Any) -> str:
    seed = json.dumps(payload, sort_keys=True, default=str)
    return hashlib.sha256(seed.encode()).hexdigest()[:32]


def build_list_payload(rows: list, total: int, limit: int, offset: int, **extra: Any) -> Dict[str, Any]:
    payload = {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }
    payload.update(extra)
    return payload


def handle_conditional(etag_value: str):
    """Return a 304 response when If-None-Match carries `etag_value`, else None."""
    inm = request.headers.get('If-None-Match')
    if not inm:
        return None
    candidates = [t.strip().removeprefix('W/').strip('"') for t in inm.split(',')]
    if etag_value in candidates or '*' in candidates:
        resp = make_response('', 304)
        resp.headers['ETag'] = f'"{etag_value}"'
        return resp
    return None


def cached_json(payload: Dict[str, Any], status: int = 200):
    """JSON response carrying an ETag; honours If-None-Match."""
    etag = compute_etag(payload)
    cond = handle_conditional(etag)
    if cond:
        return cond
    resp = make_response(payload, status)
    resp.headers['ETag'] = f'"{etag}"'
    return resp


def cached_list_response(rows: Sequence[Any], **extra: Any):
    """Paginate `rows` (already serialized) and wrap them in the list envelope."""
    page, total, limit, offset = paginate(rows)
    return cached_json(build_list_payload(page, total, limit, offset, **extra))


__all__ = [
    'page_params', 'paginate', 'compute_etag', 'build_list_payload', 'handle_conditional',
    'cached_json', 'cached_list_response',
]
