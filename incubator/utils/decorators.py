from functools import wraps
from uuid import UUID

from flask import request
from flask_login import current_user

from ..errors import InvalidInput, Unauthorized


def is_uuid(value):
    try:
        UUID(str(value))
    except ValueError:
        return False
    return True


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not current_user.is_authenticated:
            raise Unauthorized("Missing or invalid bearer token")
        return view(*args, **kwargs)
    return wrapped


def manager_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        from ..services import policy
        from ..services.policy import Capability
        if not current_user.is_authenticated:
            raise Unauthorized("Missing or invalid bearer token")
        policy().require(Capability.IS_MANAGER, actor_id=current_user.id, role=current_user.role)
        return view(*args, **kwargs)
    return wrapped


def uuid_args(*names):
    """Reject path parameters that are not UUIDs with a 400."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            for name in names:
                if not is_uuid(kwargs.get(name)):
                    raise InvalidInput(f"Invalid {name.replace('_', ' ')}")
            return view(*args, **kwargs)
        return wrapped
    return decorator


def reviewer_id_header():
    """Reviewer identity from the ``x-reviewer-id`` header."""
    reviewer_id = (request.headers.get("x-reviewer-id") or "").strip()
    if not reviewer_id or reviewer_id == "undefined":
        raise Unauthorized("x-reviewer-id header is missing or invalid")
    if not is_uuid(reviewer_id):
        raise Unauthorized("x-reviewer-id must be a valid UUID")
    return reviewer_id
