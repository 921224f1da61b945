"""
Authentication: registration, login and token subject validation.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from werkzeug.exceptions import Conflict, Unauthorized

from models import storage
from models.user import User, Role
from utils.security import hash_password, verify_password, create_access_token

INVALID_CREDENTIALS = "Invalid credentials"


def find_by_email(session, email: str) -> Optional[User]:
    return session.execute(select(User).where(User.email == email)).scalar_one_or_none()


def create_user(session, data: dict, role: str = Role.CUSTOMER.value) -> User:
    if find_by_email(session, data["email"]) is not None:
        raise Conflict("Email already registered")
    user = User(
        email=data["email"],
        password_hash=hash_password(data["password"]),
        first_name=data["first_name"],
        last_name=data["last_name"],
        phone=data.get("phone"),
        role=role,
    )
    session.add(user)
    return user


def register(session, data: dict) -> dict:
    with storage.transaction():
        user = create_user(session, data)
    return {"access_token": create_access_token(user), "user": user}


def login(session, email: str, password: str) -> dict:
    # Unknown email, inactive account and wrong password share one message
    user = find_by_email(session, email)
    if user is None or not user.is_active or not verify_password(password, user.password_hash):
        raise Unauthorized(INVALID_CREDENTIALS)
    return {"access_token": create_access_token(user), "user": user}


def validate(session, user_id: str) -> Optional[User]:
    """Return the active user a token's subject refers to, or None."""
    if not user_id:
        return None
    user = session.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user
