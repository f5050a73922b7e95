from __future__ import annotations
from flask import abort
from flask_jwt_extended import get_jwt_identity
from sqlalchemy import select
from authapi.constants.permissions import RES_NAVIGATION, ACT_READ, ACT_CREATE, ACT_UPDATE, ACT_DELETE
from authapi.decorators.auth import require_identity
from authapi.models.authz import Claim
from authapi.models.navigation import Navigation
from authapi.services.gate import GuardedBlueprint
from authapi.services.policy import load_subject_claims, claims_cover
from authapi.services.requirements import PermissionRequirement
from authapi.utils.listing import paginated
from authapi.utils.validation import json_body, required_str, optional_str, optional_int, matching_id
from authapi import get_db

navigations_bp = GuardedBlueprint('navigations', __name__)


def _nav_json(n: Navigation):
    return {
        'id': n.id,
        'display': n.display,
        'link': n.link,
        'icon': n.icon,
        'type': n.type,
        'order': n.order,
        'order_path': n.order_path,
        'parent_id': n.parent_id,
        'claim_id': n.claim_id,
        'additional_rules': n.additional_rules,
    }


def _get_or_404(nav_id: int) -> Navigation:
    nav = get_db().execute(select(Navigation).where(Navigation.id == nav_id)).scalar_one_or_none()
    if not nav:
        abort(404)
    return nav


def _assign(nav: Navigation, data):
    session = get_db()
    nav.display = required_str(data, 'display', 128)
    nav.link = optional_str(data, 'link', 256, default='') or ''
    nav.icon = optional_str(data, 'icon', 64, default='') or ''
    nav.type = optional_str(data, 'type', 32, default='') or ''
    nav.order = optional_int(data, 'order') or 0
    nav.order_path = optional_str(data, 'order_path', 256, default='') or ''
    nav.additional_rules = optional_str(data, 'additional_rules', 1024, default='')
    parent_id = optional_int(data, 'parent_id')
    if parent_id is not None:
        if nav.id is not None and parent_id == nav.id:
            abort(400, description='parent_id cannot reference itself')
        if session.get(Navigation, parent_id) is None:
            abort(400, description='Unknown parent_id')
    nav.parent_id = parent_id
    claim_id = optional_int(data, 'claim_id')
    if claim_id is not None and session.get(Claim, claim_id) is None:
        abort(400, description='Unknown claim_id')
    nav.claim_id = claim_id


@navigations_bp.get('/navigations', permission=PermissionRequirement(ACT_READ, RES_NAVIGATION))
def list_navigations():
    q = get_db().query(Navigation)
    allowed = {'order': Navigation.order, 'order_path': Navigation.order_path, 'id': Navigation.id}
    return paginated(q, _nav_json, allowed, Navigation.id)


@navigations_bp.get('/navigations/mine')
@require_identity
def my_navigations():
    """Entries without a claim plus those gated by a claim the caller holds."""
    session = get_db()
    held = load_subject_claims(session, str(get_jwt_identity()))
    rows = session.execute(
        select(Navigation).order_by(Navigation.order_path.asc(), Navigation.order.asc(), Navigation.id.asc())
    ).scalars().all()
    # A claim_id whose claim row is gone hides the entry
    visible = [
        n for n in rows
        if n.claim_id is None or (n.claim is not None and claims_cover(held, n.claim))
    ]
    return {'data': [_nav_json(n) for n in visible]}


@navigations_bp.get('/navigations/<int:nav_id>', permission=PermissionRequirement(ACT_READ, RES_NAVIGATION))
def get_navigation(nav_id: int):
    return _nav_json(_get_or_404(nav_id))


@navigations_bp.post('/navigations', permission=PermissionRequirement(ACT_CREATE, RES_NAVIGATION))
def create_navigation():
    data = json_body()
    nav = Navigation()
    _assign(nav, data)
    session = get_db()
    session.add(nav)
    session.commit()
    return _nav_json(nav), 201


@navigations_bp.put('/navigations/<int:nav_id>', permission=PermissionRequirement(ACT_UPDATE, RES_NAVIGATION))
def update_navigation(nav_id: int):
    data = json_body()
    matching_id(data, nav_id)
    nav = _get_or_404(nav_id)
    _assign(nav, data)
    get_db().commit()
    return '', 204


@navigations_bp.delete('/navigations/<int:nav_id>', permission=PermissionRequirement(ACT_DELETE, RES_NAVIGATION))
def delete_navigation(nav_id: int):
    session = get_db()
    nav = _get_or_404(nav_id)
    if nav.children:
        abort(400, description='Cannot delete navigation that has children.')
    session.delete(nav)
    session.commit()
    return '', 204
