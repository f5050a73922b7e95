from functools import wraps
from flask import abort
from flask_jwt_extended import verify_jwt_in_request, get_jwt_identity
from sqlalchemy import select
from authapi.models.authz import Role, UserRole
from authapi import get_db


def subject_role_names(subject_id: str):
    session = get_db()
    stmt = select(Role.name).join(UserRole, UserRole.role_id == Role.id).where(UserRole.user_id == subject_id)
    return set(session.execute(stmt).scalars())


def require_roles(*names: str):
    """Caller must hold every named role (the Users/Roles admin surface)."""
    def outer(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            subject_id = get_jwt_identity()
            if not subject_id:
                abort(401, description='Unauthorized')
            held = subject_role_names(str(subject_id))
            if not all(n in held for n in names):
                abort(403, description='Missing role')
            return fn(*args, **kwargs)
        return wrapper
    return outer


def require_identity(fn):
    """Caller must present a verified token; no grant lookup."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        return fn(*args, **kwargs)
    return wrapper
