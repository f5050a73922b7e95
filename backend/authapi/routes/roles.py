from __future__ import annotations
from flask import Blueprint, abort
from sqlalchemy import select
from authapi.constants.permissions import ADMIN_ROLE
from authapi.decorators.auth import require_roles
from authapi.models.authz import Role
from authapi.utils.listing import paginated
from authapi.utils.validation import json_body, required_str, matching_id
from authapi import get_db

roles_bp = Blueprint('roles', __name__)


def _role_json(r: Role):
    return {'id': r.id, 'name': r.name}


def _get_or_404(role_id: str) -> Role:
    role = get_db().get(Role, role_id)
    if not role:
        abort(404)
    return role


def _name_taken(name: str, exclude_id=None) -> bool:
    stmt = select(Role).where(Role.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Role.id != exclude_id)
    return get_db().execute(stmt).scalar_one_or_none() is not None


@roles_bp.get('/roles')
@require_roles(ADMIN_ROLE)
def list_roles():
    return paginated(get_db().query(Role), _role_json, {}, Role.name)


@roles_bp.get('/roles/<role_id>')
@require_roles(ADMIN_ROLE)
def get_role(role_id: str):
    return _role_json(_get_or_404(role_id))


@roles_bp.post('/roles')
@require_roles(ADMIN_ROLE)
def create_role():
    name = required_str(json_body(), 'name', 64)
    if _name_taken(name):
        abort(400, description='role exists')
    role = Role(name=name)
    session = get_db()
    session.add(role)
    session.commit()
    return _role_json(role), 201


@roles_bp.put('/roles/<role_id>')
@require_roles(ADMIN_ROLE)
def update_role(role_id: str):
    data = json_body()
    matching_id(data, role_id)
    role = _get_or_404(role_id)
    name = required_str(data, 'name', 64)
    if _name_taken(name, exclude_id=role.id):
        abort(400, description='role name in use')
    role.name = name
    get_db().commit()
    return '', 204


@roles_bp.delete('/roles/<role_id>')
@require_roles(ADMIN_ROLE)
def delete_role(role_id: str):
    role = _get_or_404(role_id)
    if role.name == ADMIN_ROLE:
        abort(400, description='Cannot delete the Admin role')
    session = get_db()
    session.delete(role)
    session.commit()
    return '', 204
