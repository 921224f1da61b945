from __future__ import annotations

from sqlalchemy import select
from werkzeug.exceptions import NotFound

from models import storage
from models.author import Author
from utils.pagination import paginate
from utils.query_builder import partial_update


def list_authors(session, page: int, limit: int):
    stmt = select(Author).order_by(Author.last_name, Author.first_name, Author.id)
    return paginate(session, stmt, page, limit)


def get_author(session, author_id: str) -> Author:
    author = session.get(Author, author_id)
    if author is None:
        raise NotFound("Author not found")
    return author


def create_author(session, data: dict) -> Author:
    with storage.transaction():
        author = Author(**data)
        session.add(author)
    return author


def update_author(session, author_id: str, data: dict) -> Author:
    with storage.transaction():
        return partial_update(session, Author, author_id, data, not_found="Author not found")


def delete_author(session, author_id: str) -> None:
    with storage.transaction():
        session.delete(get_author(session, author_id))
