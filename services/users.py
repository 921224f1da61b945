from __future__ import annotations

from typing import Optional

from sqlalchemy import String, select
from werkzeug.exceptions import Conflict, NotFound

from models import storage
from models.user import User
from utils.pagination import paginate
from utils.query_builder import FilterSet, partial_update

NOT_FOUND = "User not found"


def list_users(session, page: int, limit: int, role: Optional[str] = None):
    filters = FilterSet().add("role", role, String(), lambda p: User.role == p)
    stmt = filters.apply(select(User)).order_by(User.created_at.desc(), User.id)
    return paginate(session, stmt, page, limit)


def get_user(session, user_id: str) -> User:
    user = session.get(User, user_id)
    if user is None:
        raise NotFound(NOT_FOUND)
    return user


def update_user(session, user_id: str, data: dict) -> User:
    """Admin update: email, names, phone, role, is_active."""
    with storage.transaction():
        user = get_user(session, user_id)
        if "email" in data and data["email"] != user.email:
            taken = session.execute(select(User.id).where(User.email == data["email"])).first()
            if taken is not None:
                raise Conflict("Email already registered")
        return partial_update(session, User, user_id, data, not_found=NOT_FOUND)


def update_profile(session, user_id: str, data: dict) -> User:
    """Self-service update restricted to User.PROFILE_COLUMNS."""
    changes = {key: value for key, value in data.items() if key in User.PROFILE_COLUMNS}
    with storage.transaction():
        return partial_update(session, User, user_id, changes, not_found=NOT_FOUND)
