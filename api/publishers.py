from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.publisher import (
    PublisherCreateSchema,
    PublisherUpdateSchema,
    PublisherOutSchema,
)
from services import publishers as publisher_service
from utils.decorators import roles_required
from utils.pagination import envelope, parse_pagination

bp = Blueprint("publishers", __name__)

create_schema = PublisherCreateSchema()
update_schema = PublisherUpdateSchema()
out_schema = PublisherOutSchema()
out_list_schema = PublisherOutSchema(many=True)


@bp.get("/publishers")
def list_publishers():
    """
    List publishers ordered by name
    ---
    tags: [Publishers]
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: Pagination envelope }
    """
    page, limit = parse_pagination()
    publishers, total = publisher_service.list_publishers(storage.get_session(), page, limit)
    return jsonify(envelope(out_list_schema.dump(publishers), total, page, limit))


@bp.get("/publishers/<publisher_id>")
def get_publisher(publisher_id: str):
    """
    Get a publisher
    ---
    tags: [Publishers]
    parameters:
      - { in: path, name: publisher_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    publisher = publisher_service.get_publisher(storage.get_session(), publisher_id)
    return jsonify(out_schema.dump(publisher))


@bp.post("/publishers")
@roles_required([Role.ADMIN.value])
def create_publisher():
    """
    Create a publisher (admin)
    ---
    tags: [Publishers]
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
          required: [name]
          properties:
            name: { type: string, maxLength: 128 }
            address: { type: string }
            city: { type: string }
            country: { type: string }
            phone: { type: string }
            email: { type: string, format: email }
            website: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    publisher = publisher_service.create_publisher(storage.get_session(), data)
    return jsonify(out_schema.dump(publisher)), 201


@bp.route("/publishers/<publisher_id>", methods=["PUT", "PATCH"])
@roles_required([Role.ADMIN.value])
def update_publisher(publisher_id: str):
    """
    Update a publisher (partial, admin)
    ---
    tags: [Publishers]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: publisher_id, type: string, required: true }
      - { in: body, name: body, required: true, schema: { type: object } }
    responses:
      200: { description: Updated }
      404: { description: Not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    publisher = publisher_service.update_publisher(storage.get_session(), publisher_id, data)
    return jsonify(out_schema.dump(publisher))


@bp.delete("/publishers/<publisher_id>")
@roles_required([Role.ADMIN.value])
def delete_publisher(publisher_id: str):
    """
    Delete a publisher (admin); its books keep existing without a publisher
    ---
    tags: [Publishers]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: publisher_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    publisher_service.delete_publisher(storage.get_session(), publisher_id)
    return ("", 204)
