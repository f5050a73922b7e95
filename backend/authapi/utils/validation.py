"""Request body validation helpers.

Each helper returns the cleaned value (for inline use) or aborts with 400 and
a message naming the field.
"""
from __future__ import annotations
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional
from flask import abort, request


def json_body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        abort(400, description='JSON object body required')
    return data


def required_str(data: Dict[str, Any], field_name: str, max_len: Optional[int] = None) -> str:
    value = data.get(field_name)
    if not isinstance(value, str) or not value.strip():
        abort(400, description=f'{field_name} required')
    if max_len is not None and len(value) > max_len:
        abort(400, description=f'{field_name} must be at most {max_len} characters')
    return value


def optional_str(data: Dict[str, Any], field_name: str, max_len: Optional[int] = None, default: Optional[str] = None) -> Optional[str]:
    value = data.get(field_name, default)
    if value is None:
        return None
    if not isinstance(value, str):
        abort(400, description=f'{field_name} must be a string')
    if max_len is not None and len(value) > max_len:
        abort(400, description=f'{field_name} must be at most {max_len} characters')
    return value


def positive_decimal(data: Dict[str, Any], field_name: str) -> Decimal:
    raw = data.get(field_name)
    if raw is None or isinstance(raw, bool):
        abort(400, description=f'{field_name} required')
    try:
        value = Decimal(str(raw))
    except InvalidOperation:
        abort(400, description=f'{field_name} must be a number')
    if not value.is_finite() or value <= 0:
        abort(400, description=f'{field_name} must be greater than 0')
    return value


def _to_int(raw: Any, field_name: str) -> int:
    # No truncation: 2.7 and True are rejected rather than coerced
    if isinstance(raw, bool) or (isinstance(raw, float) and not raw.is_integer()):
        abort(400, description=f'{field_name} must be an integer')
    try:
        return int(raw)
    except (TypeError, ValueError):
        abort(400, description=f'{field_name} must be an integer')


def non_negative_int(data: Dict[str, Any], field_name: str, default: int = 0) -> int:
    value = _to_int(data.get(field_name, default), field_name)
    if value < 0:
        abort(400, description=f'{field_name} must be non-negative')
    return value


def required_int(data: Dict[str, Any], field_name: str) -> int:
    raw = data.get(field_name)
    if raw is None:
        abort(400, description=f'{field_name} required')
    return _to_int(raw, field_name)


def optional_int(data: Dict[str, Any], field_name: str) -> Optional[int]:
    raw = data.get(field_name)
    if raw is None:
        return None
    return _to_int(raw, field_name)


def matching_id(data: Dict[str, Any], path_id) -> None:
    """Body `id`, when sent, must equal the path id."""
    if 'id' in data and data['id'] is not None and str(data['id']) != str(path_id):
        abort(400, description='id in body does not match path')

__all__ = [
    'json_body', 'required_str', 'optional_str', 'positive_decimal',
    'non_negative_int', 'required_int', 'optional_int', 'matching_id',
]
