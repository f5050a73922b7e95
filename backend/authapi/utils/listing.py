from __future__ import annotations
from typing import Dict, Optional, Tuple
from flask import request, abort
from sqlalchemy.orm import Query
from authapi.config.pagination import normalize_pagination


def apply_pagination(q: Query) -> Tuple[Query, int, int, int]:
    try:
        limit, offset = normalize_pagination(request.args.get('limit'), request.args.get('offset'))
    except ValueError as e:
        abort(400, description=str(e))
    total = q.count()
    return q.offset(offset).limit(limit), total, limit, offset


def apply_sort(q: Query, sort_expr: Optional[str], allowed: Dict[str, object], tie_breaker) -> Query:
    """Order by comma separated keys from `allowed`; a leading '-' sorts descending.

    `tie_breaker` is always appended so pages are stable.
    """
    clauses = []
    for token in (sort_expr or '').split(','):
        token = token.strip()
        if not token:
            continue
        key = token.lstrip('-')
        col = allowed.get(key)
        if col is None:
            abort(400, description=f'Invalid sort field {key}')
        clauses.append(col.desc() if token.startswith('-') else col.asc())
    clauses.append(tie_breaker.asc())
    return q.order_by(*clauses)


def build_list_payload(rows: list, total: int, limit: int, offset: int):
    return {
        'data': rows,
        'pagination': {
            'total': total,
            'limit': limit,
            'offset': offset,
            'returned': len(rows)
        }
    }


def paginated(q: Query, to_json, sort_allowed: Optional[Dict[str, object]] = None, tie_breaker=None):
    """Sort (when allowed keys are given), page and serialize a list query."""
    if tie_breaker is not None:
        q = apply_sort(q, request.args.get('sort') if sort_allowed else None, sort_allowed or {}, tie_breaker)
    paged_q, total, limit, offset = apply_pagination(q)
    rows = [to_json(r) for r in paged_q.all()]
    return build_list_payload(rows, total, limit, offset)
