from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.cart import AddToCartSchema, UpdateCartItemSchema, CartItemOutSchema
from services import cart as cart_service
from utils.decorators import roles_required, current_user

bp = Blueprint("cart", __name__)

add_schema = AddToCartSchema()
update_schema = UpdateCartItemSchema()
item_schema = CartItemOutSchema()
items_schema = CartItemOutSchema(many=True)

CUSTOMER = [Role.CUSTOMER.value, Role.ADMIN.value]


@bp.get("/cart")
@roles_required(CUSTOMER)
def get_cart():
    """
    Items in the current user's cart (active books only)
    ---
    tags: [Cart]
    security:
      - Bearer: []
    responses:
      200: { description: Cart items with title, price, cover and stock }
    """
    items = cart_service.get_cart(storage.get_session(), current_user().id)
    return jsonify(items_schema.dump(items))


@bp.post("/cart")
@roles_required(CUSTOMER)
def add_to_cart():
    """
    Add a book to the cart; adding it again accumulates quantity
    ---
    tags: [Cart]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [book_id, quantity]
          properties:
            book_id: { type: string }
            quantity: { type: integer, minimum: 1 }
    responses:
      201: { description: Cart item }
      400: { description: Insufficient stock or book not available }
      404: { description: Book not found }
    """
    data = add_schema.load(request.get_json(silent=True) or {})
    item = cart_service.add_to_cart(storage.get_session(), current_user().id, data["book_id"], data["quantity"])
    return jsonify(item_schema.dump(item)), 201


@bp.route("/cart/<item_id>", methods=["PUT", "PATCH"])
@roles_required(CUSTOMER)
def update_cart_item(item_id: str):
    """
    Set the quantity of a cart item
    ---
    tags: [Cart]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: item_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [quantity]
          properties:
            quantity: { type: integer, minimum: 1 }
    responses:
      200: { description: Updated cart item }
      400: { description: Insufficient stock }
      404: { description: Cart item not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    item = cart_service.update_item(storage.get_session(), current_user().id, item_id, data["quantity"])
    return jsonify(item_schema.dump(item))


@bp.delete("/cart/<item_id>")
@roles_required(CUSTOMER)
def remove_cart_item(item_id: str):
    """
    Remove an item from the cart
    ---
    tags: [Cart]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: item_id, type: string, required: true }
    responses:
      204: { description: Removed }
      404: { description: Cart item not found }
    """
    cart_service.remove_item(storage.get_session(), current_user().id, item_id)
    return ("", 204)


@bp.delete("/cart")
@roles_required(CUSTOMER)
def clear_cart():
    """
    Empty the cart
    ---
    tags: [Cart]
    security:
      - Bearer: []
    responses:
      204: { description: Cart cleared }
    """
    cart_service.clear_cart(storage.get_session(), current_user().id)
    return ("", 204)
