"""Wildcard matching shared by the permission and claim evaluators.

A stored grant field holding ``"*"`` matches any required value. Required
values are compared literally: exact, case-sensitive, no trimming. Any
normalization has to happen before values are stored.
"""
from __future__ import annotations
from sqlalchemy import or_

WILDCARD = '*'


def matches(stored: str, required: str) -> bool:
    return stored == WILDCARD or stored == required


def column_matches(column, required: str):
    """SQL form of matches() for a mapped column."""
    return or_(column == required, column == WILDCARD)

__all__ = ['WILDCARD', 'matches', 'column_matches']
