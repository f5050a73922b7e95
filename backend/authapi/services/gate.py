"""Request gate: per-route requirements and the ordered evaluator stages.

Routes declare their requirements when they are registered:

    products_bp = GuardedBlueprint('products', __name__)

    @products_bp.get('/products', claim=ClaimRequirement('read', 'Product'))
    def list_products(): ...

    @products_bp.delete('/products/<int:product_id>',
                        permission=PermissionRequirement('Delete', 'Product'),
                        claim=ClaimRequirement('write', 'Product'))
    def delete_product(product_id): ...

Registering the blueprint copies its requirements into an endpoint keyed
mapping on the app. A before_request hook looks the matched endpoint up,
resolves the caller once and runs the permission stage then the claim stage.
The first Deny is written as the response; nothing after it runs.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, Union
from flask import Blueprint, Flask, Response, current_app, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt.exceptions import PyJWTError
from sqlalchemy.orm import Session

from authapi import get_db
from authapi.services import policy
from authapi.services.requirements import (
    ClaimRequirement,
    Decision,
    Deny,
    PermissionRequirement,
    RouteRequirements,
)

EXTENSION_KEY = 'authapi.gate'

Requirement = Union[PermissionRequirement, ClaimRequirement]
# Takes the stage's requirement, the subject id and a session
Evaluator = Callable[[Any, Optional[str], Session], Decision]


class RequirementRegistry:
    """Endpoint name -> RouteRequirements, filled at startup and read-only afterwards."""

    def __init__(self):
        self._by_endpoint: Dict[str, RouteRequirements] = {}

    def attach(self, endpoint: str, requirements: RouteRequirements):
        if endpoint in self._by_endpoint:
            raise ValueError(f'Requirements already attached to endpoint {endpoint}')
        self._by_endpoint[endpoint] = requirements

    def get(self, endpoint: Optional[str]) -> Optional[RouteRequirements]:
        if endpoint is None:
            return None
        return self._by_endpoint.get(endpoint)

    def items(self):
        return sorted(self._by_endpoint.items())

    def __len__(self):
        return len(self._by_endpoint)


def _registry(app: Flask) -> RequirementRegistry:
    registry = app.extensions.get(EXTENSION_KEY)
    if registry is None:
        registry = app.extensions[EXTENSION_KEY] = RequirementRegistry()
    return registry


class GuardedBlueprint(Blueprint):
    """Blueprint whose route decorators accept `permission=` and `claim=` requirements."""

    def add_url_rule(self, rule, endpoint=None, view_func=None, provide_automatic_options=None, **options):
        permission = options.pop('permission', None)
        claim = options.pop('claim', None)
        if permission is not None and not isinstance(permission, PermissionRequirement):
            raise TypeError('permission must be a PermissionRequirement')
        if claim is not None and not isinstance(claim, ClaimRequirement):
            raise TypeError('claim must be a ClaimRequirement')
        super().add_url_rule(rule, endpoint, view_func, provide_automatic_options=provide_automatic_options, **options)
        requirements = RouteRequirements(permission=permission, claim=claim)
        if requirements.is_empty():
            return
        local_endpoint = endpoint or view_func.__name__

        def attach(state):
            full = f"{state.name_prefix}.{state.name}.{local_endpoint}".lstrip('.')
            _registry(state.app).attach(full, requirements)

        self.record(attach)


def requirements_for(endpoint: Optional[str], app: Optional[Flask] = None) -> Optional[RouteRequirements]:
    return _registry(app or current_app).get(endpoint)


def registered_requirements(app: Optional[Flask] = None):
    return _registry(app or current_app).items()


def resolve_subject_id() -> Optional[str]:
    """Durable user id from the verified bearer token; None when absent or unverifiable."""
    try:
        verify_jwt_in_request(optional=True)
    except (JWTExtendedException, PyJWTError) as e:
        current_app.logger.info('Bearer token rejected: %s', e)
        return None
    identity = get_jwt_identity()
    if identity is None or identity == '':
        return None
    return str(identity)


def _stages(requirements: RouteRequirements) -> Iterator[Tuple[Optional[Requirement], Evaluator]]:
    # Order matters: permission is checked before claim.
    yield requirements.permission, policy.evaluate_permission
    yield requirements.claim, policy.evaluate_claim


def deny_response(decision: Deny) -> Response:
    return Response(decision.body, status=decision.status, content_type='application/json')


def authorize_request():
    """before_request hook. Returns a response to short-circuit, or None to continue."""
    if request.method == 'OPTIONS':
        return None
    requirements = requirements_for(request.endpoint)
    if requirements is None:
        return None
    subject_id = resolve_subject_id()
    session = get_db()
    for requirement, evaluate in _stages(requirements):
        if requirement is None:
            continue
        decision = evaluate(requirement, subject_id, session)
        if isinstance(decision, Deny):
            current_app.logger.info(
                'Access denied: endpoint=%s reason=%s subject=%s',
                request.endpoint, decision.reason, subject_id,
            )
            return deny_response(decision)
    current_app.logger.debug('Access granted: endpoint=%s subject=%s', request.endpoint, subject_id)
    return None


def init_gate(app: Flask):
    _registry(app)
    app.before_request(authorize_request)

__all__ = [
    'GuardedBlueprint', 'RequirementRegistry', 'init_gate', 'authorize_request',
    'requirements_for', 'registered_requirements', 'resolve_subject_id', 'deny_response',
]
