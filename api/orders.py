from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models import storage
from models.user import Role
from models.schemas.order import (
    OrderCreateSchema,
    OrderItemOutSchema,
    OrderOutSchema,
    OrderStatusSchema,
    PurchasedBookOutSchema,
)
from services import orders as order_service
from services.checkout import checkout
from utils.decorators import roles_required, current_user
from utils.pagination import envelope, parse_pagination

bp = Blueprint("orders", __name__)

create_schema = OrderCreateSchema()
status_schema = OrderStatusSchema()
out_schema = OrderOutSchema()
out_list_schema = OrderOutSchema(many=True)
items_schema = OrderItemOutSchema(many=True)
purchased_schema = PurchasedBookOutSchema(many=True)

ADMIN = [Role.ADMIN.value]
ANY_ROLE = [Role.ADMIN.value, Role.CUSTOMER.value]


@bp.get("/orders/admin")
@roles_required(ADMIN)
def list_all_orders():
    """
    All orders, newest first (admin)
    ---
    tags: [Orders]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: Pagination envelope }
    """
    page, limit = parse_pagination()
    orders, total = order_service.list_orders(storage.get_session(), page, limit)
    return jsonify(envelope(out_list_schema.dump(orders), total, page, limit))


@bp.get("/orders/my-orders")
@roles_required(ANY_ROLE)
def list_my_orders():
    """
    The current user's orders, newest first
    ---
    tags: [Orders]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: Pagination envelope }
    """
    page, limit = parse_pagination()
    orders, total = order_service.list_orders(storage.get_session(), page, limit, user_id=current_user().id)
    return jsonify(envelope(out_list_schema.dump(orders), total, page, limit))


@bp.get("/orders/my-books")
@roles_required(ANY_ROLE)
def list_my_books():
    """
    Books the current user bought (shipped, delivered or completed orders) with review status
    ---
    tags: [Orders]
    security:
      - Bearer: []
    responses:
      200: { description: Purchased books }
    """
    books = order_service.purchased_books(storage.get_session(), current_user().id)
    return jsonify(purchased_schema.dump(books))


@bp.post("/orders")
@roles_required(ANY_ROLE)
def create_order():
    """
    Check out the current user's cart
    ---
    tags: [Orders]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [address_id]
          properties:
            address_id: { type: string }
            discount_code: { type: string }
    responses:
      201: { description: The created order }
      400: { description: Empty cart, insufficient stock or unavailable book }
      403: { description: Address belongs to another user }
      404: { description: Address not found }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    order = checkout(
        storage.get_session(),
        current_user().id,
        data["address_id"],
        data["discount_code"],
        backend=current_app.config["CHECKOUT_BACKEND"],
    )
    return jsonify(out_schema.dump(order)), 201


@bp.get("/orders/<order_id>")
@roles_required(ANY_ROLE, owner_check=order_service.owns_order)
def get_order(order_id: str):
    """
    Get an order (owner or admin)
    ---
    tags: [Orders]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: order_id, type: string, required: true }
    responses:
      200: { description: OK }
      403: { description: Order belongs to another user }
      404: { description: Not found }
    """
    order = order_service.get_order(storage.get_session(), order_id)
    return jsonify(out_schema.dump(order))


@bp.get("/orders/<order_id>/items")
@roles_required(ANY_ROLE, owner_check=order_service.owns_order)
def get_order_items(order_id: str):
    """
    Lines of an order with prices captured at purchase time (owner or admin)
    ---
    tags: [Orders]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: order_id, type: string, required: true }
    responses:
      200: { description: Order items }
      403: { description: Order belongs to another user }
      404: { description: Not found }
    """
    items = order_service.list_items(storage.get_session(), order_id)
    return jsonify(items_schema.dump(items))


@bp.route("/orders/<order_id>/status", methods=["PUT", "PATCH"])
@roles_required(ADMIN)
def update_order_status(order_id: str):
    """
    Change an order's status (admin); shipped stamps shipped_at, delivered stamps delivered_at
    ---
    tags: [Orders]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: order_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [status]
          properties:
            status: { type: string, enum: [created, shipped, delivered, completed, cancelled] }
    responses:
      200: { description: Updated order }
      400: { description: Unknown status }
      404: { description: Not found }
    """
    data = status_schema.load(request.get_json(silent=True) or {})
    order = order_service.update_status(storage.get_session(), order_id, data["status"])
    return jsonify(out_schema.dump(order))
