from __future__ import annotations

from functools import wraps
from typing import Callable, Iterable, Optional

from flask import request, g, abort

from models import storage
from models.user import Role
from services import auth as auth_service
from utils.security import decode_token, TokenError


def current_user():
    return g.current_user


def jwt_required():
    """Authenticate the bearer token and attach the user to flask.g."""
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            auth = request.headers.get("Authorization", "")
            if not auth.startswith("Bearer "):
                abort(401, description="Missing or invalid Authorization header")
            token = auth.split(" ", 1)[1].strip()
            try:
                decoded = decode_token(token, expected_type="access")
            except TokenError as e:
                abort(401, description=str(e))

            user = auth_service.validate(storage.get_session(), decoded.get("sub"))
            if user is None:
                abort(401, description="User not found or inactive")
            g.current_user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: Iterable[str], owner_check: Optional[Callable[..., bool]] = None):
    """
    Allow access if the user's role is one of required_roles.

    owner_check(user, **view_args) adds a per-resource ownership test;
    returning False yields 403. Admins are never subject to it.
    """
    req = set(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            user = g.current_user
            if user.role not in req:
                abort(403, description="Insufficient role")
            if owner_check is not None and user.role != Role.ADMIN.value:
                if not owner_check(user, **kwargs):
                    abort(403, description="You can only access your own resources")
            return fn(*args, **kwargs)

        return wrapper

    return decorator
