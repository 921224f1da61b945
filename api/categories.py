from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.category import (
    CategoryCreateSchema,
    CategoryUpdateSchema,
    CategoryOutSchema,
)
from services import categories as category_service
from utils.decorators import roles_required
from utils.pagination import envelope, parse_pagination

bp = Blueprint("categories", __name__)

create_schema = CategoryCreateSchema()
update_schema = CategoryUpdateSchema()
out_schema = CategoryOutSchema()
out_list_schema = CategoryOutSchema(many=True)


@bp.get("/categories")
def list_categories():
    """
    List categories ordered by name
    ---
    tags: [Categories]
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: Pagination envelope }
    """
    page, limit = parse_pagination()
    categories, total = category_service.list_categories(storage.get_session(), page, limit)
    return jsonify(envelope(out_list_schema.dump(categories), total, page, limit))


@bp.get("/categories/<category_id>")
def get_category(category_id: str):
    """
    Get a category
    ---
    tags: [Categories]
    parameters:
      - { in: path, name: category_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    category = category_service.get_category(storage.get_session(), category_id)
    return jsonify(out_schema.dump(category))


@bp.post("/categories")
@roles_required([Role.ADMIN.value])
def create_category():
    """
    Create a category (admin); parent_id must reference an existing category
    ---
    tags: [Categories]
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
            description: { type: string }
            parent_id: { type: string }
    responses:
      201: { description: Created }
      400: { description: Validation error or unknown parent_id }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    category = category_service.create_category(storage.get_session(), data)
    return jsonify(out_schema.dump(category)), 201


@bp.route("/categories/<category_id>", methods=["PUT", "PATCH"])
@roles_required([Role.ADMIN.value])
def update_category(category_id: str):
    """
    Update a category (partial, admin); a category cannot be its own parent
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: category_id, type: string, required: true }
      - { in: body, name: body, required: true, schema: { type: object } }
    responses:
      200: { description: Updated }
      404: { description: Not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    category = category_service.update_category(storage.get_session(), category_id, data)
    return jsonify(out_schema.dump(category))


@bp.delete("/categories/<category_id>")
@roles_required([Role.ADMIN.value])
def delete_category(category_id: str):
    """
    Delete a category (admin); its books and subcategories are detached
    ---
    tags: [Categories]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: category_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      404: { description: Not found }
    """
    category_service.delete_category(storage.get_session(), category_id)
    return ("", 204)
