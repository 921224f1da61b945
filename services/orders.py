"""
Orders: listings, items, purchased books and the status state machine.

Status lifecycle: created -> shipped | delivered | completed | cancelled.
Moving to "shipped" stamps shipped_at and moving to "delivered" stamps
delivered_at. Transitions are not otherwise restricted.
"""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import String, and_, func, select
from werkzeug.exceptions import NotFound

from models import storage
from models.base_model import utcnow
from models.book import Book
from models.order import Order, OrderItem, OrderStatus, TERMINAL_STATUSES
from models.review import Review
from models.user import Role
from utils.pagination import paginate
from utils.query_builder import FilterSet, partial_update

NOT_FOUND = "Order not found"


def list_orders(session, page: int, limit: int, user_id: Optional[str] = None):
    filters = FilterSet().add("user_id", user_id, String(), lambda p: Order.user_id == p)
    stmt = filters.apply(select(Order)).order_by(Order.created_at.desc(), Order.id)
    return paginate(session, stmt, page, limit)


def get_order(session, order_id: str) -> Order:
    order = session.get(Order, order_id)
    if order is None:
        raise NotFound(NOT_FOUND)
    return order


def owns_order(user, order_id: str) -> bool:
    """Ownership test for roles_required(); a missing order is left to the view's 404."""
    order = storage.get_session().get(Order, order_id)
    return order is None or order.user_id == user.id or user.role == Role.ADMIN.value


def list_items(session, order_id: str) -> List[dict]:
    get_order(session, order_id)
    stmt = (
        select(
            OrderItem.id,
            OrderItem.order_id,
            OrderItem.book_id,
            OrderItem.quantity,
            OrderItem.unit_price,
            OrderItem.subtotal,
            OrderItem.created_at,
            Book.title,
            Book.isbn,
            Book.cover_image_url,
        )
        .join(Book, Book.id == OrderItem.book_id)
        .where(OrderItem.order_id == order_id)
        .order_by(OrderItem.created_at, OrderItem.id)
    )
    return [dict(row._mapping) for row in session.execute(stmt)]


def update_status(session, order_id: str, status: str) -> Order:
    changes = {"status": status}
    if status == OrderStatus.SHIPPED.value:
        changes["shipped_at"] = utcnow()
    elif status == OrderStatus.DELIVERED.value:
        changes["delivered_at"] = utcnow()
    with storage.transaction():
        return partial_update(session, Order, order_id, changes, not_found=NOT_FOUND)


def purchased_books(session, user_id: str) -> List[dict]:
    """Books the user bought in shipped, delivered or completed orders, with their review if any."""
    last_purchased_at = func.max(Order.created_at).label("last_purchased_at")
    stmt = (
        select(
            Book.id,
            Book.title,
            Book.isbn,
            Book.price,
            Book.cover_image_url,
            Book.description,
            Book.language,
            Book.pages,
            Book.publication_date,
            last_purchased_at,
            Review.id.label("review_id"),
            Review.rating.label("review_rating"),
            Review.comment.label("review_comment"),
        )
        .join(OrderItem, OrderItem.book_id == Book.id)
        .join(Order, Order.id == OrderItem.order_id)
        .outerjoin(Review, and_(Review.book_id == Book.id, Review.user_id == user_id))
        .where(Order.user_id == user_id, Order.status.in_(TERMINAL_STATUSES))
        .group_by(
            Book.id, Book.title, Book.isbn, Book.price, Book.cover_image_url, Book.description,
            Book.language, Book.pages, Book.publication_date, Review.id, Review.rating, Review.comment,
        )
        .order_by(last_purchased_at.desc())
    )
    books = []
    for row in session.execute(stmt):
        item = dict(row._mapping)
        item["has_review"] = item["review_id"] is not None
        books.append(item)
    return books
