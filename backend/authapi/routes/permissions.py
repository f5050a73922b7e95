from __future__ import annotations
from flask import abort, request
from sqlalchemy import select
from authapi.constants.permissions import RES_PERMISSION, ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE
from authapi.models.authz import Permission
from authapi.services.gate import GuardedBlueprint
from authapi.services.requirements import PermissionRequirement
from authapi.utils.listing import paginated
from authapi.utils.validation import json_body, required_str, matching_id
from authapi import get_db

permissions_bp = GuardedBlueprint('permissions', __name__)

FIELDS = ('resource_type', 'resource_id', 'action', 'subject_type', 'subject_id')
FIELD_MAX = 64


def _permission_json(p: Permission):
    return {
        'id': p.id,
        'resource_type': p.resource_type,
        'resource_id': p.resource_id,
        'action': p.action,
        'subject_type': p.subject_type,
        'subject_id': p.subject_id,
    }


def _get_or_404(permission_id: int) -> Permission:
    perm = get_db().execute(select(Permission).where(Permission.id == permission_id)).scalar_one_or_none()
    if not perm:
        abort(404)
    return perm


def _assign(perm: Permission, data):
    # Values are stored verbatim; matching is exact and case-sensitive
    for field in FIELDS:
        setattr(perm, field, required_str(data, field, FIELD_MAX))


@permissions_bp.get('/permissions', permission=PermissionRequirement(ACT_READ, RES_PERMISSION))
def list_permissions():
    q = get_db().query(Permission)
    for field in FIELDS:
        if value := request.args.get(field):
            q = q.filter(getattr(Permission, field) == value)
    return paginated(q, _permission_json, {}, Permission.id)


@permissions_bp.get('/permissions/<int:permission_id>', permission=PermissionRequirement(ACT_READ, RES_PERMISSION))
def get_permission(permission_id: int):
    return _permission_json(_get_or_404(permission_id))


@permissions_bp.post('/permissions', permission=PermissionRequirement(ACT_CREATE, RES_PERMISSION))
def create_permission():
    data = json_body()
    perm = Permission()
    _assign(perm, data)
    session = get_db()
    session.add(perm)
    session.commit()
    return _permission_json(perm), 201


@permissions_bp.put('/permissions/<int:permission_id>', permission=PermissionRequirement(ACT_UPDATE, RES_PERMISSION))
def update_permission(permission_id: int):
    data = json_body()
    matching_id(data, permission_id)
    perm = _get_or_404(permission_id)
    _assign(perm, data)
    get_db().commit()
    return '', 204


@permissions_bp.delete('/permissions/<int:permission_id>', permission=PermissionRequirement(ACT_DELETE, RES_PERMISSION))
def delete_permission(permission_id: int):
    session = get_db()
    session.delete(_get_or_404(permission_id))
    session.commit()
    return '', 204
