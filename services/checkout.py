"""
Checkout: turns the user's cart into an order.

CHECKOUT_BACKEND selects the implementation:
- "local": in-process, one transaction (see checkout_local)
- "procedure": CALL process_checkout(user, address, discount_code) on
  PostgreSQL, then read back the user's newest order
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy import delete, select, text, update
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import storage
from models.address import Address
from models.book import Book
from models.cart_item import CartItem
from models.order import Order, OrderItem, OrderStatus

logger = logging.getLogger("bookstore.api")

BACKENDS = ("local", "procedure")


def checkout(session, user_id: str, address_id: str, discount_code: Optional[str], backend: str = "local") -> Order:
    if backend == "procedure":
        return checkout_procedure(session, user_id, address_id, discount_code)
    if backend == "local":
        return checkout_local(session, user_id, address_id, discount_code)
    raise ValueError(f"Unknown CHECKOUT_BACKEND: {backend}")


def checkout_local(session, user_id: str, address_id: str, discount_code: Optional[str] = None) -> Order:
    """
    - the address must exist and belong to the user
    - the cart must not be empty; every book must be active with enough stock
    - unit_price and subtotal are copied from the current book price
    - stock is decremented with a guarded UPDATE (stock >= quantity)
    - shipping_cost and discount_amount are 0; the cart is emptied
    """
    if discount_code:
        raise BadRequest("Discount codes are not supported")

    with storage.transaction():
        address = session.get(Address, address_id)
        if address is None:
            raise NotFound("Address not found")
        if address.user_id != user_id:
            raise Forbidden("You can only use your own addresses")

        lines = session.execute(
            select(CartItem, Book)
            .join(Book, Book.id == CartItem.book_id)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at, CartItem.id)
        ).all()
        if not lines:
            raise BadRequest("Cart is empty")

        order = Order(user_id=user_id, address_id=address_id, status=OrderStatus.CREATED.value)
        session.add(order)
        total = Decimal("0.00")
        for item, book in lines:
            if not book.is_active:
                raise BadRequest(f"Book is not available: {book.title}")
            taken = session.execute(
                update(Book)
                .where(Book.id == book.id, Book.stock >= item.quantity)
                .values(stock=Book.stock - item.quantity)
                .execution_options(synchronize_session=False)
            )
            if taken.rowcount != 1:
                raise BadRequest(f"Insufficient stock for: {book.title}")
            unit_price = Decimal(book.price)
            subtotal = unit_price * item.quantity
            total += subtotal
            order.items.append(
                OrderItem(book_id=book.id, quantity=item.quantity, unit_price=unit_price, subtotal=subtotal)
            )

        order.total_amount = total
        order.shipping_cost = Decimal("0.00")
        order.discount_amount = Decimal("0.00")
        session.execute(
            delete(CartItem).where(CartItem.user_id == user_id).execution_options(synchronize_session=False)
        )
    order_id = order.id
    session.expire_all()
    logger.info("Order %s created for user %s (%s items)", order_id, user_id, len(lines))
    return session.get(Order, order_id)


def checkout_procedure(session, user_id: str, address_id: str, discount_code: Optional[str] = None) -> Order:
    with storage.transaction():
        session.execute(
            text("CALL process_checkout(:user_id, :address_id, :discount_code)"),
            {"user_id": user_id, "address_id": address_id, "discount_code": discount_code or None},
        )
    order = session.execute(
        select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc()).limit(1)
    ).scalar_one_or_none()
    if order is None:
        raise BadRequest("Checkout did not produce an order")
    return order
