"""
Shopping cart. One row per (user, book); adding a book already in the cart
accumulates quantity. Stock is re-checked on every mutation.
"""
from __future__ import annotations

from typing import List

from sqlalchemy import delete, select
from werkzeug.exceptions import BadRequest, NotFound

from models import storage
from models.book import Book
from models.cart_item import CartItem

INSUFFICIENT_STOCK = "Insufficient stock"


def _item_select():
    return select(
        CartItem.id,
        CartItem.user_id,
        CartItem.book_id,
        CartItem.quantity,
        CartItem.created_at,
        CartItem.updated_at,
        Book.title,
        Book.price,
        Book.cover_image_url,
        Book.stock,
    ).join(Book, Book.id == CartItem.book_id)


def get_cart(session, user_id: str) -> List[dict]:
    stmt = (
        _item_select()
        .where(CartItem.user_id == user_id, Book.is_active.is_(True))
        .order_by(CartItem.created_at.desc())
    )
    return [dict(row._mapping) for row in session.execute(stmt)]


def _get_item(session, item_id: str) -> dict:
    row = session.execute(_item_select().where(CartItem.id == item_id)).one()
    return dict(row._mapping)


def add_to_cart(session, user_id: str, book_id: str, quantity: int) -> dict:
    with storage.transaction():
        book = session.get(Book, book_id)
        if book is None:
            raise NotFound("Book not found")
        if not book.is_active:
            raise BadRequest("Book is not available")

        item = session.execute(
            select(CartItem).where(CartItem.user_id == user_id, CartItem.book_id == book_id)
        ).scalar_one_or_none()
        new_quantity = quantity + (item.quantity if item is not None else 0)
        if book.stock < new_quantity:
            raise BadRequest(INSUFFICIENT_STOCK)

        if item is None:
            item = CartItem(user_id=user_id, book_id=book_id, quantity=new_quantity)
            session.add(item)
        else:
            item.quantity = new_quantity
        session.flush()
        item_id = item.id
    return _get_item(session, item_id)


def update_item(session, user_id: str, item_id: str, quantity: int) -> dict:
    with storage.transaction():
        item = session.execute(
            select(CartItem).where(CartItem.id == item_id, CartItem.user_id == user_id)
        ).scalar_one_or_none()
        if item is None:
            raise NotFound("Cart item not found")
        stock = session.execute(select(Book.stock).where(Book.id == item.book_id)).scalar_one()
        if stock < quantity:
            raise BadRequest(INSUFFICIENT_STOCK)
        item.quantity = quantity
    return _get_item(session, item_id)


def remove_item(session, user_id: str, item_id: str) -> None:
    with storage.transaction():
        result = session.execute(delete(CartItem).where(CartItem.id == item_id, CartItem.user_id == user_id))
        if result.rowcount == 0:
            raise NotFound("Cart item not found")


def clear_cart(session, user_id: str) -> None:
    with storage.transaction():
        session.execute(delete(CartItem).where(CartItem.user_id == user_id))
