from __future__ import annotations
from flask import Blueprint, abort
from sqlalchemy import select, delete
from authapi.constants.permissions import ADMIN_ROLE
from authapi.decorators.auth import require_roles
from authapi.models.authz import User, Role, UserRole, Claim, UserClaim
from authapi.utils.listing import paginated
from authapi.utils.validation import json_body, required_str, optional_str
from authapi import get_db

users_bp = Blueprint('users', __name__)


def _user_json(u: User):
    return {
        'id': u.id,
        'email': u.email,
        'user_name': u.user_name,
        'roles': u.role_names,
        'claim_ids': sorted(uc.claim_id for uc in u.user_claims),
    }


@users_bp.get('/users')
@require_roles(ADMIN_ROLE)
def list_users():
    return paginated(get_db().query(User), _user_json, {}, User.email)


@users_bp.post('/users')
@require_roles(ADMIN_ROLE)
def create_user():
    data = json_body()
    email = required_str(data, 'email', 128)
    session = get_db()
    if session.execute(select(User).where(User.email == email)).scalar_one_or_none():
        abort(400, description='user exists')
    user = User(email=email, user_name=optional_str(data, 'user_name', 128, default=email))
    session.add(user)
    session.commit()
    return _user_json(user), 201


@users_bp.post('/users/assign-role')
@require_roles(ADMIN_ROLE)
def assign_role():
    data = json_body()
    email = required_str(data, 'email')
    role_name = required_str(data, 'role')
    session = get_db()
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user:
        abort(404)
    role = session.execute(select(Role).where(Role.name == role_name)).scalar_one_or_none()
    if not role:
        abort(400, description=f'Unknown role {role_name}')
    if role_name not in user.role_names:
        session.add(UserRole(user_id=user.id, role_id=role.id))
        session.commit()
        session.refresh(user)
    return _user_json(user)


@users_bp.put('/users/<user_id>/claims')
@require_roles(ADMIN_ROLE)
def set_user_claims(user_id: str):
    session = get_db()
    user = session.get(User, user_id)
    if not user:
        abort(404)
    data = json_body()
    raw_ids = data.get('claim_ids') or []
    if not isinstance(raw_ids, list) or any(isinstance(x, bool) or not isinstance(x, int) for x in raw_ids):
        abort(400, description='claim_ids must be list[int]')
    claim_ids = set(raw_ids)
    claims = session.execute(select(Claim).where(Claim.id.in_(list(claim_ids)))).scalars().all() if claim_ids else []
    missing = claim_ids - {c.id for c in claims}
    if missing:
        abort(400, description=f'Unknown claim ids: {sorted(missing)}')
    # Replace assignments
    session.execute(delete(UserClaim).where(UserClaim.user_id == user.id))
    for cid in claim_ids:
        session.add(UserClaim(user_id=user.id, claim_id=cid))
    session.commit()
    return {'user_id': user.id, 'claim_ids': sorted(claim_ids)}
