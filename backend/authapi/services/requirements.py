"""Route authorization requirements and the decisions evaluators return.

A route carries zero, one or both requirement kinds. Requirements are plain
immutable values built when the route is registered; stored grants may use
the wildcard, requirements never do.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

from authapi.utils.wildcard import WILDCARD


def _concrete(field_name: str, value: str) -> str:
    if not isinstance(value, str) or not value:
        raise ValueError(f'{field_name} must be a non-empty string')
    if value == WILDCARD:
        raise ValueError(f'{field_name} cannot be a wildcard')
    return value


@dataclass(frozen=True)
class PermissionRequirement:
    action: str
    resource_type: str
    resource_id: str = WILDCARD

    def __post_init__(self):
        _concrete('action', self.action)
        _concrete('resource_type', self.resource_type)
        # resource_id defaults to "*" and is then compared literally against stored rows
        if not isinstance(self.resource_id, str) or not self.resource_id:
            raise ValueError('resource_id must be a non-empty string')


@dataclass(frozen=True)
class ClaimRequirement:
    action: str
    resource_type: str

    def __post_init__(self):
        _concrete('action', self.action)
        _concrete('resource_type', self.resource_type)


@dataclass(frozen=True)
class RouteRequirements:
    permission: Optional[PermissionRequirement] = None
    claim: Optional[ClaimRequirement] = None

    def is_empty(self) -> bool:
        return self.permission is None and self.claim is None

    def as_dict(self):
        out = {}
        if self.permission is not None:
            out['permission'] = {
                'action': self.permission.action,
                'resource_type': self.permission.resource_type,
                'resource_id': self.permission.resource_id,
            }
        if self.claim is not None:
            out['claim'] = {
                'action': self.claim.action,
                'resource_type': self.claim.resource_type,
            }
        return out


@dataclass(frozen=True)
class Allow:
    pass


@dataclass(frozen=True)
class Deny:
    status: int
    body: str
    reason: str


Decision = Union[Allow, Deny]

ALLOW = Allow()
UNAUTHENTICATED = Deny(401, 'Unauthorized', 'unauthenticated')
# Both denial kinds share the response wording; reason only shows up in logs.
PERMISSION_DENIED = Deny(403, 'Permission denied', 'permission_denied')
CLAIM_DENIED = Deny(403, 'Permission denied', 'claim_denied')

__all__ = [
    'PermissionRequirement', 'ClaimRequirement', 'RouteRequirements',
    'Allow', 'Deny', 'Decision',
    'ALLOW', 'UNAUTHENTICATED', 'PERMISSION_DENIED', 'CLAIM_DENIED',
]
