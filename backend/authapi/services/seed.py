"""Idempotent bootstrap data: the Admin role, an admin user and its grants.

Every guarded admin endpoint needs a grant before anyone can call it, so a
fresh database is unusable until this has run once.
"""
from __future__ import annotations
from typing import Dict, List
from sqlalchemy import select

from authapi.constants.permissions import (
    ADMIN_ROLE, CLAIM_ACTIONS, PERMISSION_ACTIONS, SUBJECT_TYPE_USER,
)
from authapi.models.authz import Permission, Claim, Role, User, UserRole, UserClaim
from authapi.utils.wildcard import WILDCARD


def ensure_role(session, name: str) -> Role:
    role = session.execute(select(Role).where(Role.name == name)).scalar_one_or_none()
    if not role:
        role = Role(name=name)
        session.add(role)
        session.flush()
    return role


def ensure_user(session, email: str, user_name: str = None) -> User:
    user = session.execute(select(User).where(User.email == email)).scalar_one_or_none()
    if not user:
        user = User(email=email, user_name=user_name or email)
        session.add(user)
        session.flush()
    return user


def ensure_user_role(session, user: User, role: Role) -> bool:
    exists = session.execute(
        select(UserRole).where(UserRole.user_id == user.id, UserRole.role_id == role.id)
    ).scalar_one_or_none()
    if exists:
        return False
    session.add(UserRole(user_id=user.id, role_id=role.id))
    return True


def ensure_full_grant(session, user: User) -> bool:
    """All-wildcard permission row scoped to this user."""
    exists = session.execute(select(Permission).where(
        Permission.action == WILDCARD,
        Permission.resource_type == WILDCARD,
        Permission.resource_id == WILDCARD,
        Permission.subject_type == SUBJECT_TYPE_USER,
        Permission.subject_id == user.id,
    )).scalars().first()
    if exists:
        return False
    session.add(Permission(
        action=WILDCARD, resource_type=WILDCARD, resource_id=WILDCARD,
        subject_type=SUBJECT_TYPE_USER, subject_id=user.id,
    ))
    return True


def ensure_claims(session) -> Dict[str, Claim]:
    """One claim per (resource type, claim action) plus the all-access claim, keyed by display name."""
    wanted = [(res, act, f'{act} {res}') for res, acts in CLAIM_ACTIONS.items() for act in acts]
    wanted.append((WILDCARD, WILDCARD, 'All access'))
    out: Dict[str, Claim] = {}
    for res, act, display in wanted:
        claim = session.execute(select(Claim).where(Claim.display_name == display)).scalars().first()
        if not claim:
            claim = Claim(resource_type=res, resource_id=WILDCARD, action=act, display_name=display)
            session.add(claim)
            session.flush()
        out[display] = claim
    return out


def ensure_user_claim(session, user: User, claim: Claim) -> bool:
    exists = session.execute(
        select(UserClaim).where(UserClaim.user_id == user.id, UserClaim.claim_id == claim.id)
    ).scalar_one_or_none()
    if exists:
        return False
    session.add(UserClaim(user_id=user.id, claim_id=claim.id))
    return True


def seed_admin(session, email: str) -> Dict[str, object]:
    """Create (or complete) the admin bootstrap. Does not commit."""
    role = ensure_role(session, ADMIN_ROLE)
    user = ensure_user(session, email)
    claims = ensure_claims(session)
    return {
        'user_id': user.id,
        'role_assigned': ensure_user_role(session, user, role),
        'grant_created': ensure_full_grant(session, user),
        'claim_assigned': ensure_user_claim(session, user, claims['All access']),
        'claims_total': len(claims),
    }


def validate_grants(session) -> List[str]:
    """Problems with stored rows that can never match a route requirement."""
    known_resources = set(PERMISSION_ACTIONS) | set(CLAIM_ACTIONS) | {WILDCARD}
    problems = []
    for p in session.execute(select(Permission).order_by(Permission.id)).scalars():
        if p.subject_type not in (SUBJECT_TYPE_USER, WILDCARD):
            problems.append(f"Permission {p.id}: subject_type '{p.subject_type}' is never evaluated")
        if p.resource_type not in known_resources:
            problems.append(f"Permission {p.id}: unknown resource_type '{p.resource_type}'")
        elif p.resource_type in PERMISSION_ACTIONS and p.action not in PERMISSION_ACTIONS[p.resource_type] + [WILDCARD]:
            problems.append(f"Permission {p.id}: unknown action '{p.action}' for {p.resource_type}")
    for c in session.execute(select(Claim).order_by(Claim.id)).scalars():
        if c.resource_type not in known_resources:
            problems.append(f"Claim {c.id}: unknown resource_type '{c.resource_type}'")
    return problems
