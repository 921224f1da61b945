from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.address import AddressCreateSchema, AddressUpdateSchema, AddressOutSchema
from services import addresses as address_service
from utils.decorators import roles_required, current_user

bp = Blueprint("addresses", __name__)

create_schema = AddressCreateSchema()
update_schema = AddressUpdateSchema()
out_schema = AddressOutSchema()
out_list_schema = AddressOutSchema(many=True)

ANY_ROLE = [Role.ADMIN.value, Role.CUSTOMER.value]


@bp.get("/addresses")
@roles_required(ANY_ROLE)
def list_addresses():
    """
    The current user's addresses, default first
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    responses:
      200: { description: List of addresses }
    """
    addresses = address_service.list_addresses(storage.get_session(), current_user().id)
    return jsonify(out_list_schema.dump(addresses))


@bp.get("/addresses/<address_id>")
@roles_required(ANY_ROLE)
def get_address(address_id: str):
    """
    Get one of the current user's addresses
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: address_id, type: string, required: true }
    responses:
      200: { description: OK }
      403: { description: Address belongs to another user }
      404: { description: Not found }
    """
    address = address_service.get_address(storage.get_session(), address_id, current_user().id)
    return jsonify(out_schema.dump(address))


@bp.post("/addresses")
@roles_required(ANY_ROLE)
def create_address():
    """
    Add an address; is_default=true makes it the only default
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [street, city, postal_code, country]
          properties:
            street: { type: string }
            city: { type: string }
            state: { type: string }
            postal_code: { type: string }
            country: { type: string }
            is_default: { type: boolean, default: false }
    responses:
      201: { description: Created }
      400: { description: Validation error }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    address = address_service.create_address(storage.get_session(), current_user().id, data)
    return jsonify(out_schema.dump(address)), 201


@bp.route("/addresses/<address_id>", methods=["PUT", "PATCH"])
@roles_required(ANY_ROLE)
def update_address(address_id: str):
    """
    Update one of the current user's addresses (partial)
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: address_id, type: string, required: true }
      - { in: body, name: body, required: true, schema: { type: object } }
    responses:
      200: { description: Updated }
      403: { description: Address belongs to another user }
      404: { description: Not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    address = address_service.update_address(storage.get_session(), address_id, current_user().id, data)
    return jsonify(out_schema.dump(address))


@bp.delete("/addresses/<address_id>")
@roles_required(ANY_ROLE)
def delete_address(address_id: str):
    """
    Delete one of the current user's addresses
    ---
    tags: [Addresses]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: address_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      403: { description: Address belongs to another user }
      404: { description: Not found }
    """
    address_service.delete_address(storage.get_session(), address_id, current_user().id)
    return ("", 204)
