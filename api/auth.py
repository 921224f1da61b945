"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- GET  /auth/me

Tokens are stateless HS256 JWTs (see utils.security); logout is client-side.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models import storage
from models.schemas.user import UserRegisterSchema, UserLoginSchema, UserOutSchema
from services import auth as auth_service
from utils.decorators import jwt_required, current_user

bp = Blueprint("auth", __name__)

user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
user_out_schema = UserOutSchema()


def _token_response(result: dict) -> dict:
    return {
        "access_token": result["access_token"],
        "token_type": "bearer",
        "expires_in": int(current_app.config["JWT_TOKEN_EXPIRES"].total_seconds()),
        "user": user_out_schema.dump(result["user"]),
    }


@bp.post("/auth/register")
def register():
    """
    Register a new customer account
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password, first_name, last_name]
          properties:
            email: { type: string, format: email }
            password: { type: string, minLength: 6 }
            first_name: { type: string }
            last_name: { type: string }
            phone: { type: string }
    responses:
      201:
        description: Created; returns an access token and the user
      400:
        description: Validation error
      409:
        description: Email already registered
    """
    payload = request.get_json(silent=True) or {}
    data = user_register_schema.load(payload)
    result = auth_service.register(storage.get_session(), data)
    return jsonify(_token_response(result)), 201


@bp.post("/auth/login")
def login():
    """
    Login: return an access token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns token)
      401:
        description: Invalid credentials
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)
    result = auth_service.login(storage.get_session(), data["email"], data["password"])
    return jsonify(_token_response(result)), 200


@bp.get("/auth/me")
@jwt_required()
def me():
    """
    Current authenticated user
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: The user the token belongs to
      401:
        description: Missing or invalid token
    """
    return jsonify(user_out_schema.dump(current_user())), 200
