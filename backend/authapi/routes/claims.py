from __future__ import annotations
from flask import abort
from flask_jwt_extended import get_jwt_identity
from sqlalchemy import select, func
from authapi.constants.permissions import RES_CLAIM, ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE
from authapi.decorators.auth import require_identity
from authapi.models.authz import Claim, User
from authapi.models.navigation import Navigation
from authapi.services.gate import GuardedBlueprint
from authapi.services.policy import load_subject_claims
from authapi.services.requirements import PermissionRequirement
from authapi.utils.listing import paginated
from authapi.utils.validation import json_body, required_str, optional_str, matching_id
from authapi import get_db

claims_bp = GuardedBlueprint('claims', __name__)

FIELD_MAX = 64


def _claim_json(c: Claim):
    return {
        'id': c.id,
        'resource_type': c.resource_type,
        'resource_id': c.resource_id,
        'action': c.action,
        'display_name': c.display_name,
    }


def _get_or_404(claim_id: int) -> Claim:
    claim = get_db().execute(select(Claim).where(Claim.id == claim_id)).scalar_one_or_none()
    if not claim:
        abort(404)
    return claim


def _assign(claim: Claim, data):
    claim.resource_type = required_str(data, 'resource_type', FIELD_MAX)
    claim.action = required_str(data, 'action', FIELD_MAX)
    claim.resource_id = optional_str(data, 'resource_id', FIELD_MAX, default='*') or '*'
    claim.display_name = required_str(data, 'display_name', 128)


@claims_bp.get('/claims', permission=PermissionRequirement(ACT_READ, RES_CLAIM))
def list_claims():
    return paginated(get_db().query(Claim), _claim_json, {}, Claim.id)


@claims_bp.get('/claims/<int:claim_id>', permission=PermissionRequirement(ACT_READ, RES_CLAIM))
def get_claim(claim_id: int):
    return _claim_json(_get_or_404(claim_id))


@claims_bp.post('/claims', permission=PermissionRequirement(ACT_CREATE, RES_CLAIM))
def create_claim():
    data = json_body()
    claim = Claim()
    _assign(claim, data)
    session = get_db()
    session.add(claim)
    session.commit()
    return _claim_json(claim), 201


@claims_bp.put('/claims/<int:claim_id>', permission=PermissionRequirement(ACT_UPDATE, RES_CLAIM))
def update_claim(claim_id: int):
    data = json_body()
    matching_id(data, claim_id)
    claim = _get_or_404(claim_id)
    _assign(claim, data)
    get_db().commit()
    return '', 204


@claims_bp.delete('/claims/<int:claim_id>', permission=PermissionRequirement(ACT_DELETE, RES_CLAIM))
def delete_claim(claim_id: int):
    session = get_db()
    claim = _get_or_404(claim_id)
    in_use = session.execute(select(func.count(Navigation.id)).where(Navigation.claim_id == claim_id)).scalar_one()
    if in_use:
        abort(400, description='Cannot delete claim that gates navigation entries.')
    session.delete(claim)
    session.commit()
    return '', 204


@claims_bp.get('/users/me/claims')
@require_identity
def my_claims():
    """Display names of the caller's claims."""
    session = get_db()
    user_id = str(get_jwt_identity())
    if session.get(User, user_id) is None:
        abort(400, description='User not found')
    return {'data': [c.display_name for c in load_subject_claims(session, user_id)]}
