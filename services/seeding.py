"""
Startup seeding of the default admin and tester accounts.

Existing accounts are left untouched. Any failure is logged and swallowed
so a seeding problem never blocks application startup.
"""
from __future__ import annotations

import logging

from models import storage
from models.user import Role
from services.auth import create_user, find_by_email

logger = logging.getLogger("bookstore.seed")


def _ensure_account(session, email, password, first_name, last_name, role) -> None:
    if not email or not password:
        return
    if find_by_email(session, email) is not None:
        logger.info("Default %s account %s already exists", role, email)
        return
    with storage.transaction():
        create_user(
            session,
            {"email": email, "password": password, "first_name": first_name, "last_name": last_name},
            role=role,
        )
    logger.info("Created default %s account %s", role, email)


def seed_default_accounts(config) -> None:
    session = storage.get_session()
    try:
        _ensure_account(
            session, config.get("ADMIN_EMAIL"), config.get("ADMIN_PASSWORD"),
            "Admin", "User", Role.ADMIN.value,
        )
        _ensure_account(
            session, config.get("TESTER_EMAIL"), config.get("TESTER_PASSWORD"),
            "Tester", "User", Role.CUSTOMER.value,
        )
    except Exception:
        logger.exception("Seeding default accounts failed; continuing startup")
    finally:
        storage.close()
