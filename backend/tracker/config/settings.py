from __future__ import annotations
"""Runtime settings.

Values come from the process environment (a `.env` file is loaded first by
`python-dotenv`) and may be overridden per app through `create_app(config)`.
"""
import os
from typing import Any, Dict, Optional, Tuple

DEFAULT_LIMIT = 50
MAX_LIMIT = 200


def load_settings() -> Dict[str, Any]:
    return {
        'JWT_SECRET_KEY': os.getenv('JWT_SECRET_KEY', 'dev-secret'),
        'DATABASE_URL': os.getenv('DATABASE_URL', 'sqlite:///tracker.db'),
        'TRACKER_STORE': os.getenv('TRACKER_STORE', 'sql'),
        'AUTO_CREATE_TABLES': os.getenv('AUTO_CREATE_TABLES', '1') not in ('0', 'false', 'False'),
        'LOG_LEVEL': os.getenv('LOG_LEVEL', 'INFO'),
        'PAGINATION_DEFAULT_LIMIT': int(os.getenv('PAGINATION_DEFAULT_LIMIT', DEFAULT_LIMIT)),
        'PAGINATION_MAX_LIMIT': int(os.getenv('PAGINATION_MAX_LIMIT', MAX_LIMIT)),
    }


def normalize_pagination(limit_raw, offset_raw, default_limit: int = DEFAULT_LIMIT,
                         max_limit: int = MAX_LIMIT) -> Tuple[int, int]:
    try:
        limit = int(limit_raw) if limit_raw is not None else default_limit
        offset = int(offset_raw) if offset_raw is not None else 0
    except ValueError:
        raise ValueError('limit/offset must be int')
    limit = max(1, min(limit, max_limit))
    offset = max(0, offset)
    return limit, offset
