"""
Shipping addresses. At most one address per user carries is_default; the
flag is cleared on the user's other addresses inside the same transaction
that sets it.
"""
from __future__ import annotations

from typing import List

from sqlalchemy import select
from werkzeug.exceptions import Forbidden, NotFound

from models import storage
from models.address import Address
from utils.query_builder import clear_flag, partial_update

NOT_FOUND = "Address not found"
NOT_OWNER = "You can only access your own addresses"


def list_addresses(session, user_id: str) -> List[Address]:
    stmt = (
        select(Address)
        .where(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.created_at.desc())
    )
    return session.execute(stmt).scalars().all()


def get_address(session, address_id: str, user_id: str) -> Address:
    address = session.get(Address, address_id)
    if address is None:
        raise NotFound(NOT_FOUND)
    if address.user_id != user_id:
        raise Forbidden(NOT_OWNER)
    return address


def create_address(session, user_id: str, data: dict) -> Address:
    with storage.transaction():
        if data.get("is_default"):
            clear_flag(session, Address.is_default, Address.user_id, user_id)
        address = Address(user_id=user_id, **data)
        session.add(address)
    return address


def update_address(session, address_id: str, user_id: str, data: dict) -> Address:
    with storage.transaction():
        if session.get(Address, address_id) is None:
            raise NotFound(NOT_FOUND)
        if data.get("is_default"):
            clear_flag(session, Address.is_default, Address.user_id, user_id, keep_id=address_id)
        return partial_update(
            session,
            Address,
            address_id,
            data,
            owner_column=Address.user_id,
            owner_id=user_id,
            not_found=NOT_FOUND,
            forbidden=NOT_OWNER,
        )


def delete_address(session, address_id: str, user_id: str) -> None:
    with storage.transaction():
        session.delete(get_address(session, address_id, user_id))
