from __future__ import annotations

from sqlalchemy import select
from werkzeug.exceptions import NotFound

from models import storage
from models.publisher import Publisher
from utils.pagination import paginate
from utils.query_builder import partial_update


def list_publishers(session, page: int, limit: int):
    stmt = select(Publisher).order_by(Publisher.name, Publisher.id)
    return paginate(session, stmt, page, limit)


def get_publisher(session, publisher_id: str) -> Publisher:
    publisher = session.get(Publisher, publisher_id)
    if publisher is None:
        raise NotFound("Publisher not found")
    return publisher


def create_publisher(session, data: dict) -> Publisher:
    with storage.transaction():
        publisher = Publisher(**data)
        session.add(publisher)
    return publisher


def update_publisher(session, publisher_id: str, data: dict) -> Publisher:
    with storage.transaction():
        return partial_update(session, Publisher, publisher_id, data, not_found="Publisher not found")


def delete_publisher(session, publisher_id: str) -> None:
    with storage.transaction():
        session.delete(get_publisher(session, publisher_id))
