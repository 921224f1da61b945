from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.user import (
    ProfileUpdateSchema,
    UserListQuerySchema,
    UserOutSchema,
    UserUpdateSchema,
)
from services import users as user_service
from utils.decorators import roles_required, jwt_required, current_user
from utils.pagination import envelope, parse_pagination

bp = Blueprint("users", __name__)

user_update_schema = UserUpdateSchema()
profile_update_schema = ProfileUpdateSchema()
user_list_query_schema = UserListQuerySchema()
user_out_schema = UserOutSchema()
user_list_out_schema = UserOutSchema(many=True)

ADMIN = [Role.ADMIN.value]


@bp.get("/users")
@roles_required(ADMIN)
def list_users():
    """
    List users (admin), optionally filtered by role
    ---
    tags: [Users]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
      - { in: query, name: role, type: string, enum: [admin, customer] }
    responses:
      200: { description: Pagination envelope }
      403: { description: Not an admin }
    """
    page, limit = parse_pagination()
    query = user_list_query_schema.load(request.args.to_dict())
    users, total = user_service.list_users(storage.get_session(), page, limit, role=query["role"])
    return jsonify(envelope(user_list_out_schema.dump(users), total, page, limit))


@bp.get("/users/me")
@jwt_required()
def get_me():
    """
    The current user's profile
    ---
    tags: [Users]
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    return jsonify(user_out_schema.dump(current_user()))


@bp.patch("/users/me")
@jwt_required()
def update_me():
    """
    Update the current user's profile (first_name, last_name, phone)
    ---
    tags: [Users]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            first_name: { type: string }
            last_name: { type: string }
            phone: { type: string }
    responses:
      200: { description: Updated }
      400: { description: Validation error (including fields outside the profile) }
    """
    data = profile_update_schema.load(request.get_json(silent=True) or {})
    user = user_service.update_profile(storage.get_session(), current_user().id, data)
    return jsonify(user_out_schema.dump(user))


@bp.get("/users/<user_id>")
@roles_required(ADMIN)
def get_user(user_id: str):
    """
    Get a user (admin)
    ---
    tags: [Users]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    user = user_service.get_user(storage.get_session(), user_id)
    return jsonify(user_out_schema.dump(user))


@bp.route("/users/<user_id>", methods=["PUT", "PATCH"])
@roles_required(ADMIN)
def update_user(user_id: str):
    """
    Update a user (admin): email, names, phone, role, is_active
    ---
    tags: [Users]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: user_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            email: { type: string, format: email }
            first_name: { type: string }
            last_name: { type: string }
            phone: { type: string }
            role: { type: string, enum: [admin, customer] }
            is_active: { type: boolean }
    responses:
      200: { description: Updated }
      404: { description: Not found }
      409: { description: Email already registered }
    """
    data = user_update_schema.load(request.get_json(silent=True) or {})
    user = user_service.update_user(storage.get_session(), user_id, data)
    return jsonify(user_out_schema.dump(user))
