from marshmallow import Schema, fields, validate

from models.schemas.common import money_out


class AddToCartSchema(Schema):
    book_id = fields.String(required=True)
    quantity = fields.Integer(required=True, validate=validate.Range(min=1))


class UpdateCartItemSchema(Schema):
    quantity = fields.Integer(required=True, validate=validate.Range(min=1))


class CartItemOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    book_id = fields.String()
    quantity = fields.Integer()
    title = fields.String()
    price = money_out()
    cover_image_url = fields.String(allow_none=True)
    stock = fields.Integer()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
