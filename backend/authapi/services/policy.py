"""Permission and claim evaluators.

Both evaluators take the requirement, the caller's subject id and a session
explicitly, perform at most one read, never write, and return a Decision.
Store errors are not caught here; they surface through the app error handler.
"""
from __future__ import annotations
from typing import Optional
from sqlalchemy import select

from authapi.constants.permissions import SUBJECT_TYPE_USER
from authapi.models.authz import Permission, Claim, UserClaim
from authapi.services.requirements import (
    ClaimRequirement,
    Decision,
    PermissionRequirement,
    ALLOW,
    CLAIM_DENIED,
    PERMISSION_DENIED,
    UNAUTHENTICATED,
)
from authapi.utils.wildcard import WILDCARD, matches, column_matches

# Only user subjects are evaluated; group/service subject types are not supported yet.
EVALUATED_SUBJECT_TYPES = (SUBJECT_TYPE_USER, WILDCARD)


def permission_grants(row, requirement: PermissionRequirement, subject_id: str) -> bool:
    return (
        matches(row.action, requirement.action)
        and matches(row.resource_type, requirement.resource_type)
        and matches(row.resource_id, requirement.resource_id)
        and row.subject_type in EVALUATED_SUBJECT_TYPES
        and matches(row.subject_id, subject_id)
    )


def claim_grants(claim, requirement: ClaimRequirement) -> bool:
    # resource_id is stored on claims but not part of the match
    return matches(claim.action, requirement.action) and matches(claim.resource_type, requirement.resource_type)


def find_matching_permission(session, requirement: PermissionRequirement, subject_id: str) -> Optional[Permission]:
    stmt = (
        select(Permission)
        .where(
            column_matches(Permission.action, requirement.action),
            column_matches(Permission.resource_type, requirement.resource_type),
            column_matches(Permission.resource_id, requirement.resource_id),
            Permission.subject_type.in_(EVALUATED_SUBJECT_TYPES),
            column_matches(Permission.subject_id, subject_id),
        )
        .limit(1)
    )
    return session.execute(stmt).scalars().first()


def find_matching_claim(session, requirement: ClaimRequirement, subject_id: str) -> Optional[Claim]:
    stmt = (
        select(Claim)
        .join(UserClaim, UserClaim.claim_id == Claim.id)
        .where(
            UserClaim.user_id == subject_id,
            column_matches(Claim.action, requirement.action),
            column_matches(Claim.resource_type, requirement.resource_type),
        )
        .limit(1)
    )
    return session.execute(stmt).scalars().first()


def evaluate_permission(requirement: Optional[PermissionRequirement], subject_id: Optional[str], session) -> Decision:
    if requirement is None:
        return ALLOW
    if subject_id is None:
        return UNAUTHENTICATED
    if find_matching_permission(session, requirement, subject_id) is None:
        return PERMISSION_DENIED
    return ALLOW


def evaluate_claim(requirement: Optional[ClaimRequirement], subject_id: Optional[str], session) -> Decision:
    if requirement is None:
        return ALLOW
    if subject_id is None:
        return UNAUTHENTICATED
    if find_matching_claim(session, requirement, subject_id) is None:
        return CLAIM_DENIED
    return ALLOW


def load_subject_claims(session, subject_id: str):
    stmt = select(Claim).join(UserClaim, UserClaim.claim_id == Claim.id).where(UserClaim.user_id == subject_id)
    return session.execute(stmt).scalars().all()


def claims_cover(held_claims, target: Claim) -> bool:
    """True when `target` is one of `held_claims` or one of them matches it by wildcard.

    A target holding a wildcard itself is only covered by holding that exact claim.
    """
    concrete = bool(target.action) and bool(target.resource_type) and WILDCARD not in (target.action, target.resource_type)
    for claim in held_claims:
        if claim.id == target.id:
            return True
        if concrete and claim_grants(claim, ClaimRequirement(target.action, target.resource_type)):
            return True
    return False
