from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.author import (
    AuthorCreateSchema,
    AuthorUpdateSchema,
    AuthorOutSchema,
)
from services import authors as author_service
from utils.decorators import roles_required
from utils.pagination import envelope, parse_pagination

bp = Blueprint("authors", __name__)

create_schema = AuthorCreateSchema()
update_schema = AuthorUpdateSchema()
out_schema = AuthorOutSchema()
out_list_schema = AuthorOutSchema(many=True)


@bp.get("/authors")
def list_authors():
    """
    List authors ordered by last name, then first name
    ---
    tags: [Authors]
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: Pagination envelope }
    """
    page, limit = parse_pagination()
    authors, total = author_service.list_authors(storage.get_session(), page, limit)
    return jsonify(envelope(out_list_schema.dump(authors), total, page, limit))


@bp.get("/authors/<author_id>")
def get_author(author_id: str):
    """
    Get an author
    ---
    tags: [Authors]
    parameters:
      - { in: path, name: author_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    author = author_service.get_author(storage.get_session(), author_id)
    return jsonify(out_schema.dump(author))


@bp.post("/authors")
@roles_required([Role.ADMIN.value])
def create_author():
    """
    Create an author (admin)
    ---
    tags: [Authors]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [first_name, last_name]
          properties:
            first_name: { type: string, maxLength: 128 }
            last_name: { type: string, maxLength: 128 }
            bio: { type: string }
            birth_date: { type: string, format: date }
            nationality: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    # No uniqueness on Author (names can collide)
    author = author_service.create_author(storage.get_session(), data)
    return jsonify(out_schema.dump(author)), 201


@bp.route("/authors/<author_id>", methods=["PUT", "PATCH"])
@roles_required([Role.ADMIN.value])
def update_author(author_id: str):
    """
    Update an author (partial, admin)
    ---
    tags: [Authors]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: author_id, type: string, required: true }
      - { in: body, name: body, required: true, schema: { type: object } }
    responses:
      200: { description: Updated }
      404: { description: Not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    author = author_service.update_author(storage.get_session(), author_id, data)
    return jsonify(out_schema.dump(author))


@bp.delete("/authors/<author_id>")
@roles_required([Role.ADMIN.value])
def delete_author(author_id: str):
    """
    Delete an author (admin); book links are removed with it
    ---
    tags: [Authors]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: author_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    author_service.delete_author(storage.get_session(), author_id)
    return ("", 204)
