"""
Books: catalog listing, advanced search, CRUD, author links, bestsellers.

Listing and search share one statement shape: the book row, publisher and
category names, and COALESCEd rating aggregates from an outer-joined
subquery over reviews. Authors for a whole page are loaded with a single
IN query, so a page costs three statements (count, rows, authors) no
matter how many books it holds.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
    delete,
    exists,
    func,
    or_,
    select,
)
from werkzeug.exceptions import BadRequest, Conflict, NotFound

from models import storage
from models.author import Author
from models.book import Book, BookAuthor
from models.category import Category
from models.order import Order, OrderItem, TERMINAL_STATUSES
from models.publisher import Publisher
from models.review import Review
from utils.pagination import paginate
from utils.query_builder import FilterSet, clear_flag, day_bounds, partial_update

BOOK_COLUMNS = [c.key for c in Book.__table__.columns]


def _ratings_subquery():
    return (
        select(
            Review.book_id.label("book_id"),
            func.avg(Review.rating).label("avg_rating"),
            func.count(Review.id).label("review_count"),
        )
        .group_by(Review.book_id)
        .subquery("ratings")
    )


def catalog_select():
    """select() of books with names and rating aggregates; returns (stmt, average_rating column)."""
    ratings = _ratings_subquery()
    average_rating = func.coalesce(ratings.c.avg_rating, 0)
    stmt = (
        select(
            Book,
            Publisher.name.label("publisher_name"),
            Category.name.label("category_name"),
            average_rating.label("average_rating"),
            func.coalesce(ratings.c.review_count, 0).label("review_count"),
        )
        .outerjoin(Publisher, Book.publisher_id == Publisher.id)
        .outerjoin(Category, Book.category_id == Category.id)
        .outerjoin(ratings, ratings.c.book_id == Book.id)
    )
    return stmt, average_rating


def _authors_by_book(session, book_ids: List[str]) -> Dict[str, List[dict]]:
    grouped: Dict[str, List[dict]] = {book_id: [] for book_id in book_ids}
    if not book_ids:
        return grouped
    rows = session.execute(
        select(
            BookAuthor.book_id,
            Author.id,
            Author.first_name,
            Author.last_name,
            BookAuthor.is_primary,
        )
        .join(Author, Author.id == BookAuthor.author_id)
        .where(BookAuthor.book_id.in_(book_ids))
        .order_by(BookAuthor.is_primary.desc(), Author.last_name, Author.first_name)
    ).all()
    for book_id, author_id, first_name, last_name, is_primary in rows:
        grouped[book_id].append(
            {"id": author_id, "first_name": first_name, "last_name": last_name, "is_primary": is_primary}
        )
    return grouped


def rows_to_dicts(session, rows) -> List[dict]:
    authors = _authors_by_book(session, [row[0].id for row in rows])
    result = []
    for book, publisher_name, category_name, average_rating, review_count in rows:
        item = {key: getattr(book, key) for key in BOOK_COLUMNS}
        item.update(
            publisher_name=publisher_name,
            category_name=category_name,
            average_rating=round(float(average_rating or 0), 2),
            review_count=int(review_count or 0),
            authors=authors[book.id],
        )
        result.append(item)
    return result


def _text_condition(session, text_config: str):
    """Case-insensitive substring of title or description, OR (on PostgreSQL) a full-text match on both."""
    dialect = session.get_bind().dialect.name

    def condition(param):
        pattern = "%" + param + "%"
        substring = or_(Book.title.ilike(pattern), Book.description.ilike(pattern))
        if dialect != "postgresql":
            return substring
        document = func.to_tsvector(
            text_config, func.coalesce(Book.title, "") + " " + func.coalesce(Book.description, "")
        )
        return or_(substring, document.op("@@")(func.plainto_tsquery(text_config, param)))

    return condition


def get_book(session, book_id: str) -> dict:
    stmt, _ = catalog_select()
    rows = session.execute(stmt.where(Book.id == book_id)).all()
    if not rows:
        raise NotFound("Book not found")
    return rows_to_dicts(session, rows)[0]


def list_books(session, page: int, limit: int, search: Optional[str] = None,
               include_inactive: bool = False, text_config: str = "spanish"):
    stmt, _ = catalog_select()
    filters = FilterSet()
    if not include_inactive:
        filters.require(Book.is_active.is_(True))
    filters.add("search", search, String(), _text_condition(session, text_config))
    stmt = filters.apply(stmt).order_by(Book.created_at.desc(), Book.id)
    rows, total = paginate(session, stmt, page, limit, scalars=False)
    return rows_to_dicts(session, rows), total


def search_books(session, query: dict, page: int, limit: int, text_config: str = "spanish"):
    """Advanced search. `query` is the output of BookSearchQuerySchema."""
    stmt, average_rating = catalog_select()

    filters = FilterSet()
    filters.require(Book.is_active.is_(True))
    filters.add("search", query.get("search"), String(), _text_condition(session, text_config))
    filters.add("category", query.get("category"), String(), lambda p: Book.category_id == p)
    filters.add(
        "author",
        query.get("author"),
        String(),
        lambda p: exists().where(BookAuthor.book_id == Book.id, BookAuthor.author_id == p),
    )
    filters.add("publisher", query.get("publisher"), String(), lambda p: Book.publisher_id == p)
    filters.add("language", query.get("language"), String(), lambda p: func.lower(Book.language) == func.lower(p))
    filters.add("min_price", query.get("min_price"), Numeric(10, 2), lambda p: Book.price >= p)
    filters.add("max_price", query.get("max_price"), Numeric(10, 2), lambda p: Book.price <= p)
    filters.add("min_rating", query.get("min_rating"), Float(), lambda p: average_rating >= p)
    filters.add("min_stock", query.get("min_stock"), Integer(), lambda p: Book.stock >= p)
    filters.add("max_stock", query.get("max_stock"), Integer(), lambda p: Book.stock <= p)
    filters.add("start_date", query.get("start_date"), Date(), lambda p: Book.publication_date >= p)
    filters.add("end_date", query.get("end_date"), Date(), lambda p: Book.publication_date <= p)

    sort_columns = {
        "title": Book.title,
        "price": Book.price,
        "date": Book.publication_date,
        "rating": average_rating,
    }
    column = sort_columns[query.get("sort_by") or "title"]
    ordering = column.desc() if query.get("sort_order") == "DESC" else column.asc()

    stmt = filters.apply(stmt).order_by(ordering, Book.id)
    rows, total = paginate(session, stmt, page, limit, scalars=False)
    return rows_to_dicts(session, rows), total


def _check_references(session, data: dict) -> None:
    if data.get("publisher_id") and session.get(Publisher, data["publisher_id"]) is None:
        raise BadRequest("publisher_id not found")
    if data.get("category_id") and session.get(Category, data["category_id"]) is None:
        raise BadRequest("category_id not found")


def _resolve_authors(session, author_ids: List[str]) -> List[str]:
    unique_ids = list(dict.fromkeys(author_ids))
    if not unique_ids:
        return unique_ids
    found = set(session.execute(select(Author.id).where(Author.id.in_(unique_ids))).scalars())
    if len(found) != len(unique_ids):
        raise BadRequest("One or more author_ids not found")
    return unique_ids


def _link_authors(session, book_id: str, author_ids: List[str], primary_id: Optional[str]) -> None:
    if author_ids and primary_id is None:
        primary_id = author_ids[0]
    for author_id in author_ids:
        session.add(BookAuthor(book_id=book_id, author_id=author_id, is_primary=author_id == primary_id))


def _ensure_isbn_free(session, isbn: str) -> None:
    if session.execute(select(Book.id).where(Book.isbn == isbn)).first() is not None:
        raise Conflict("A book with this ISBN already exists.")


def create_book(session, data: dict, default_language: str = "Spanish") -> dict:
    data = dict(data)
    author_ids = data.pop("author_ids", None) or []
    primary_id = data.pop("primary_author_id", None)
    data["language"] = data.get("language") or default_language

    with storage.transaction():
        _ensure_isbn_free(session, data["isbn"])
        _check_references(session, data)
        author_ids = _resolve_authors(session, author_ids)
        book = Book(**data)
        session.add(book)
        session.flush()
        _link_authors(session, book.id, author_ids, primary_id)
    return get_book(session, book.id)


def update_book(session, book_id: str, data: dict) -> dict:
    data = dict(data)
    author_ids = data.pop("author_ids", None)
    primary_id = data.pop("primary_author_id", None)

    with storage.transaction():
        book = session.get(Book, book_id)
        if book is None:
            raise NotFound("Book not found")
        if "isbn" in data and data["isbn"] != book.isbn:
            _ensure_isbn_free(session, data["isbn"])
        _check_references(session, data)
        partial_update(session, Book, book_id, data, not_found="Book not found")
        if author_ids is not None:
            author_ids = _resolve_authors(session, author_ids)
            session.execute(delete(BookAuthor).where(BookAuthor.book_id == book_id))
            _link_authors(session, book_id, author_ids, primary_id)
    return get_book(session, book_id)


def delete_book(session, book_id: str) -> None:
    with storage.transaction():
        book = session.get(Book, book_id)
        if book is None:
            raise NotFound("Book not found")
        in_orders = session.execute(select(OrderItem.id).where(OrderItem.book_id == book_id).limit(1)).first()
        if in_orders is not None:
            raise Conflict("Cannot delete a book that appears in orders; deactivate it instead.")
        session.delete(book)


def bestsellers(session, limit: int = 10, start_date=None, end_date=None) -> List[dict]:
    """Top books by quantity sold in shipped, delivered or completed orders."""
    lower, upper = day_bounds(start_date, end_date)
    total_sold = func.sum(OrderItem.quantity).label("total_sold")
    stmt = (
        select(
            Book.id.label("book_id"),
            Book.title,
            Book.isbn,
            Book.price,
            Book.cover_image_url,
            total_sold,
            func.sum(OrderItem.subtotal).label("total_revenue"),
        )
        .join(OrderItem, OrderItem.book_id == Book.id)
        .join(Order, Order.id == OrderItem.order_id)
        .where(Order.status.in_(TERMINAL_STATUSES))
    )
    filters = FilterSet()
    filters.add("start_at", lower, DateTime(timezone=True), lambda p: Order.created_at >= p)
    filters.add("end_before", upper, DateTime(timezone=True), lambda p: Order.created_at < p)
    stmt = (
        filters.apply(stmt)
        .group_by(Book.id, Book.title, Book.isbn, Book.price, Book.cover_image_url)
        .order_by(total_sold.desc(), Book.title)
        .limit(limit)
    )
    return [dict(row._mapping) for row in session.execute(stmt)]


def list_book_authors(session, book_id: str) -> List[dict]:
    if session.get(Book, book_id) is None:
        raise NotFound("Book not found")
    stmt = (
        select(
            BookAuthor.book_id,
            Book.title.label("book_title"),
            BookAuthor.author_id,
            (Author.first_name + " " + Author.last_name).label("author_name"),
            BookAuthor.is_primary,
        )
        .join(Book, Book.id == BookAuthor.book_id)
        .join(Author, Author.id == BookAuthor.author_id)
        .where(BookAuthor.book_id == book_id)
        .order_by(BookAuthor.is_primary.desc(), Author.last_name, Author.first_name)
    )
    return [dict(row._mapping) for row in session.execute(stmt)]


def add_author(session, book_id: str, author_id: str, is_primary: bool = False) -> dict:
    with storage.transaction():
        book = session.get(Book, book_id)
        if book is None:
            raise NotFound("Book not found")
        author = session.get(Author, author_id)
        if author is None:
            raise NotFound("Author not found")
        existing = session.execute(
            select(BookAuthor.id).where(BookAuthor.book_id == book_id, BookAuthor.author_id == author_id)
        ).first()
        if existing is not None:
            raise BadRequest("Author is already assigned to this book")
        if is_primary:
            clear_flag(session, BookAuthor.is_primary, BookAuthor.book_id, book_id)
        session.add(BookAuthor(book_id=book_id, author_id=author_id, is_primary=is_primary))
    return {
        "book_id": book_id,
        "book_title": book.title,
        "author_id": author_id,
        "author_name": f"{author.first_name} {author.last_name}",
        "is_primary": is_primary,
    }


def remove_author(session, book_id: str, author_id: str) -> None:
    with storage.transaction():
        result = session.execute(
            delete(BookAuthor).where(BookAuthor.book_id == book_id, BookAuthor.author_id == author_id)
        )
        if result.rowcount == 0:
            raise NotFound("Author-book relationship not found")
