"""
Reviews. A customer may review a book once, and only after buying it in an
order that reached a terminal status (shipped, delivered or completed).
"""
from __future__ import annotations

from sqlalchemy import select
from werkzeug.exceptions import BadRequest, Forbidden, NotFound

from models import storage
from models.book import Book
from models.order import Order, OrderItem, TERMINAL_STATUSES
from models.review import Review
from models.user import User
from utils.pagination import paginate
from utils.query_builder import partial_update

NOT_FOUND = "Review not found"


def _review_select():
    return select(
        Review.id,
        Review.user_id,
        Review.book_id,
        Review.rating,
        Review.comment,
        Review.created_at,
        Review.updated_at,
        User.first_name,
        User.last_name,
    ).join(User, User.id == Review.user_id)


def list_for_book(session, book_id: str, page: int, limit: int):
    stmt = _review_select().where(Review.book_id == book_id).order_by(Review.created_at.desc(), Review.id)
    rows, total = paginate(session, stmt, page, limit, scalars=False)
    return [dict(row._mapping) for row in rows], total


def get_review(session, review_id: str) -> dict:
    row = session.execute(_review_select().where(Review.id == review_id)).one_or_none()
    if row is None:
        raise NotFound(NOT_FOUND)
    return dict(row._mapping)


def has_purchased(session, user_id: str, book_id: str) -> bool:
    stmt = (
        select(OrderItem.id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(
            Order.user_id == user_id,
            OrderItem.book_id == book_id,
            Order.status.in_(TERMINAL_STATUSES),
        )
        .limit(1)
    )
    return session.execute(stmt).first() is not None


def has_reviewed(session, user_id: str, book_id: str) -> bool:
    stmt = select(Review.id).where(Review.user_id == user_id, Review.book_id == book_id)
    return session.execute(stmt).first() is not None


def eligibility(session, user_id: str, book_id: str) -> dict:
    reviewed = has_reviewed(session, user_id, book_id)
    return {
        "can_review": has_purchased(session, user_id, book_id) and not reviewed,
        "has_reviewed": reviewed,
    }


def create_review(session, user_id: str, data: dict) -> dict:
    with storage.transaction():
        if session.get(Book, data["book_id"]) is None:
            raise NotFound("Book not found")
        if not has_purchased(session, user_id, data["book_id"]):
            raise BadRequest("You can only review books you have purchased")
        if has_reviewed(session, user_id, data["book_id"]):
            raise BadRequest("You have already reviewed this book")
        review = Review(user_id=user_id, **data)
        session.add(review)
    return get_review(session, review.id)


def update_review(session, review_id: str, user_id: str, data: dict) -> dict:
    with storage.transaction():
        partial_update(
            session,
            Review,
            review_id,
            data,
            owner_column=Review.user_id,
            owner_id=user_id,
            not_found=NOT_FOUND,
            forbidden="You can only update your own reviews",
        )
    return get_review(session, review_id)


def delete_review(session, review_id: str, user_id: str) -> None:
    with storage.transaction():
        review = session.get(Review, review_id)
        if review is None:
            raise NotFound(NOT_FOUND)
        if review.user_id != user_id:
            raise Forbidden("You can only delete your own reviews")
        session.delete(review)
