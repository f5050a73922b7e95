"""Test seeding helpers: users, grants, claims and bearer headers.

Tokens are minted directly with flask-jwt-extended; issuing them is the
identity provider's job, the API only verifies them.
"""
from typing import Dict, Iterable, Optional, Tuple
from flask_jwt_extended import create_access_token
from authapi import get_db
from authapi.models.authz import User, Role, Permission, Claim, UserRole, UserClaim


def ensure_user(email: str, user_name: Optional[str] = None) -> str:
    """Return the id of the user with this email, creating it when missing."""
    session = get_db()
    u = session.query(User).filter_by(email=email).one_or_none()
    if not u:
        u = User(email=email, user_name=user_name or email.split('@')[0])
        session.add(u); session.commit()
    return u.id


def grant(subject_id: str = '*', action: str = '*', resource_type: str = '*', resource_id: str = '*', subject_type: str = 'User') -> int:
    session = get_db()
    p = Permission(
        action=action, resource_type=resource_type, resource_id=resource_id,
        subject_type=subject_type, subject_id=subject_id,
    )
    session.add(p); session.commit()
    return p.id


def make_claim(action: str, resource_type: str, resource_id: str = '*', display_name: Optional[str] = None) -> int:
    session = get_db()
    c = Claim(action=action, resource_type=resource_type, resource_id=resource_id,
              display_name=display_name or f'{action} {resource_type}')
    session.add(c); session.commit()
    return c.id


def give_claims(user_id: str, claim_ids: Iterable[int]):
    session = get_db()
    for cid in claim_ids:
        session.add(UserClaim(user_id=user_id, claim_id=cid))
    session.commit()


def ensure_role_assignment(user_id: str, role_name: str) -> str:
    session = get_db()
    role = session.query(Role).filter_by(name=role_name).one_or_none()
    if not role:
        role = Role(name=role_name)
        session.add(role); session.flush()
    if not session.query(UserRole).filter_by(user_id=user_id, role_id=role.id).one_or_none():
        session.add(UserRole(user_id=user_id, role_id=role.id))
    session.commit()
    return role.id


def bearer(app, user_id: str) -> Dict[str, str]:
    with app.app_context():
        token = create_access_token(identity=user_id)
    return {'Authorization': f'Bearer {token}'}


def seed_admin_user(app, email: str = 'admin@test.local') -> Tuple[str, Dict[str, str]]:
    """User with the Admin role and an all-wildcard grant scoped to itself."""
    uid = ensure_user(email)
    ensure_role_assignment(uid, 'Admin')
    grant(subject_id=uid)
    return uid, bearer(app, uid)
