"""
Admin reports.

sales / sold_books take a mandatory date range plus optional filters; only
orders in a terminal status count unless a status is given explicitly.
book_catalog, order_summary and customer_history are fixed listings capped
at REPORT_ROW_LIMIT rows.
"""
from __future__ import annotations

from typing import List

from sqlalchemy import Numeric, String, distinct, exists, func, select

from models.book import Book, BookAuthor
from models.category import Category
from models.order import Order, OrderItem, OrderStatus, TERMINAL_STATUSES
from models.publisher import Publisher
from models.user import User
from services.books import catalog_select, rows_to_dicts
from utils.query_builder import FilterSet, day_bounds

REPORT_ROW_LIMIT = 100


def _sales_filters(query: dict) -> FilterSet:
    lower, upper = day_bounds(query["start_date"], query["end_date"])
    filters = FilterSet()
    filters.require(Order.created_at >= lower)
    filters.require(Order.created_at < upper)
    if query.get("status") is None:
        filters.require(Order.status.in_(TERMINAL_STATUSES))
    filters.add("status", query.get("status"), String(), lambda p: Order.status == p)
    filters.add("category", query.get("category"), String(), lambda p: Book.category_id == p)
    filters.add(
        "author",
        query.get("author"),
        String(),
        lambda p: exists().where(BookAuthor.book_id == Book.id, BookAuthor.author_id == p),
    )
    filters.add("publisher", query.get("publisher"), String(), lambda p: Book.publisher_id == p)
    filters.add("book", query.get("book"), String(), lambda p: OrderItem.book_id == p)
    filters.add("min_price", query.get("min_price"), Numeric(10, 2), lambda p: OrderItem.unit_price >= p)
    filters.add("max_price", query.get("max_price"), Numeric(10, 2), lambda p: OrderItem.unit_price <= p)
    return filters


def _rows(session, stmt) -> List[dict]:
    return [dict(row._mapping) for row in session.execute(stmt)]


def sales(session, query: dict) -> List[dict]:
    """
    One row per day: orders, unique customers, revenue, items sold, average order value.

    Order totals are summed from the lines that pass the filters, then each
    order counts once towards the day's average.
    """
    sale_date = func.date(Order.created_at).label("sale_date")
    per_order = (
        select(
            sale_date,
            Order.id.label("order_id"),
            Order.user_id.label("user_id"),
            func.sum(OrderItem.subtotal).label("order_total"),
            func.sum(OrderItem.quantity).label("items_sold"),
        )
        .select_from(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .join(Book, Book.id == OrderItem.book_id)
    )
    per_order = (
        _sales_filters(query)
        .apply(per_order)
        .group_by(func.date(Order.created_at), Order.id, Order.user_id)
        .subquery("per_order")
    )
    stmt = (
        select(
            per_order.c.sale_date,
            func.count(per_order.c.order_id).label("total_orders"),
            func.count(distinct(per_order.c.user_id)).label("unique_customers"),
            func.sum(per_order.c.order_total).label("total_revenue"),
            func.sum(per_order.c.items_sold).label("total_items_sold"),
            func.avg(per_order.c.order_total).label("average_order_value"),
        )
        .group_by(per_order.c.sale_date)
        .order_by(per_order.c.sale_date)
    )
    return _rows(session, stmt)


def sold_books(session, query: dict) -> List[dict]:
    total_quantity_sold = func.sum(OrderItem.quantity).label("total_quantity_sold")
    stmt = (
        select(
            Book.id.label("book_id"),
            Book.title,
            Book.isbn,
            Book.price,
            Book.cover_image_url,
            Category.name.label("category_name"),
            Publisher.name.label("publisher_name"),
            total_quantity_sold,
            func.sum(OrderItem.subtotal).label("total_revenue"),
            func.count(distinct(Order.id)).label("orders_count"),
            func.avg(OrderItem.unit_price).label("average_sale_price"),
        )
        .select_from(Order)
        .join(OrderItem, OrderItem.order_id == Order.id)
        .join(Book, Book.id == OrderItem.book_id)
        .outerjoin(Category, Category.id == Book.category_id)
        .outerjoin(Publisher, Publisher.id == Book.publisher_id)
    )
    stmt = (
        _sales_filters(query)
        .apply(stmt)
        .group_by(Book.id, Book.title, Book.isbn, Book.price, Book.cover_image_url, Category.name, Publisher.name)
        .order_by(total_quantity_sold.desc(), Book.title)
    )
    return _rows(session, stmt)


def book_catalog(session) -> List[dict]:
    stmt, _ = catalog_select()
    rows = session.execute(stmt.order_by(Book.title, Book.id).limit(REPORT_ROW_LIMIT)).all()
    catalog = []
    for book in rows_to_dicts(session, rows):
        names = [f"{a['first_name']} {a['last_name']}" for a in book["authors"]]
        book["authors"] = ", ".join(names) if names else None
        catalog.append(book)
    return catalog


def order_summary(session) -> List[dict]:
    stmt = (
        select(
            Order.id.label("order_id"),
            Order.user_id,
            User.email.label("customer_email"),
            (User.first_name + " " + User.last_name).label("customer_name"),
            Order.status,
            Order.total_amount,
            func.count(OrderItem.id).label("item_count"),
            func.coalesce(func.sum(OrderItem.quantity), 0).label("total_quantity"),
            Order.created_at,
        )
        .join(User, User.id == Order.user_id)
        .outerjoin(OrderItem, OrderItem.order_id == Order.id)
        .group_by(
            Order.id, Order.user_id, User.email, User.first_name, User.last_name,
            Order.status, Order.total_amount, Order.created_at,
        )
        .order_by(Order.created_at.desc(), Order.id)
        .limit(REPORT_ROW_LIMIT)
    )
    return _rows(session, stmt)


def customer_history(session) -> List[dict]:
    """Per customer: order count, amount spent, books bought, first and last order (cancelled orders excluded)."""
    not_cancelled = Order.status != OrderStatus.CANCELLED.value
    per_user = (
        select(
            Order.user_id.label("user_id"),
            func.count(Order.id).label("total_orders"),
            func.sum(Order.total_amount).label("total_spent"),
            func.min(Order.created_at).label("first_order_at"),
            func.max(Order.created_at).label("last_order_at"),
        )
        .where(not_cancelled)
        .group_by(Order.user_id)
        .subquery("per_user")
    )
    books_per_user = (
        select(Order.user_id.label("user_id"), func.sum(OrderItem.quantity).label("total_books"))
        .join(OrderItem, OrderItem.order_id == Order.id)
        .where(not_cancelled)
        .group_by(Order.user_id)
        .subquery("books_per_user")
    )
    stmt = (
        select(
            User.id.label("user_id"),
            User.email,
            (User.first_name + " " + User.last_name).label("customer_name"),
            per_user.c.total_orders,
            per_user.c.total_spent,
            func.coalesce(books_per_user.c.total_books, 0).label("total_books"),
            per_user.c.first_order_at,
            per_user.c.last_order_at,
        )
        .join(per_user, per_user.c.user_id == User.id)
        .outerjoin(books_per_user, books_per_user.c.user_id == User.id)
        .order_by(per_user.c.total_spent.desc(), User.email)
        .limit(REPORT_ROW_LIMIT)
    )
    return _rows(session, stmt)
