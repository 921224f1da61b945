from __future__ import annotations

from typing import Optional

from sqlalchemy import select
from werkzeug.exceptions import BadRequest, NotFound

from models import storage
from models.category import Category
from utils.pagination import paginate
from utils.query_builder import partial_update


def _check_parent(session, parent_id: Optional[str], category_id: Optional[str] = None) -> None:
    if parent_id is None:
        return
    if category_id is not None and parent_id == category_id:
        raise BadRequest("A category cannot be its own parent")
    if session.get(Category, parent_id) is None:
        raise BadRequest("parent_id not found")


def list_categories(session, page: int, limit: int):
    stmt = select(Category).order_by(Category.name, Category.id)
    return paginate(session, stmt, page, limit)


def get_category(session, category_id: str) -> Category:
    category = session.get(Category, category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


def create_category(session, data: dict) -> Category:
    with storage.transaction():
        _check_parent(session, data.get("parent_id"))
        category = Category(**data)
        session.add(category)
    return category


def update_category(session, category_id: str, data: dict) -> Category:
    with storage.transaction():
        get_category(session, category_id)
        _check_parent(session, data.get("parent_id"), category_id)
        return partial_update(session, Category, category_id, data, not_found="Category not found")


def delete_category(session, category_id: str) -> None:
    with storage.transaction():
        session.delete(get_category(session, category_id))
