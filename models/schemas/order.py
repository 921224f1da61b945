from marshmallow import Schema, fields, validate

from models.order import OrderStatus
from models.schemas.common import money_out


class OrderCreateSchema(Schema):
    address_id = fields.String(required=True)
    discount_code = fields.String(allow_none=True, load_default=None)


class OrderStatusSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf([s.value for s in OrderStatus]))


class OrderOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    address_id = fields.String(allow_none=True)
    status = fields.String()
    total_amount = money_out()
    shipping_cost = money_out()
    discount_amount = money_out()
    shipped_at = fields.DateTime(allow_none=True)
    delivered_at = fields.DateTime(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class OrderItemOutSchema(Schema):
    id = fields.String()
    order_id = fields.String()
    book_id = fields.String()
    quantity = fields.Integer()
    unit_price = money_out()
    subtotal = money_out()
    title = fields.String()
    isbn = fields.String()
    cover_image_url = fields.String(allow_none=True)
    created_at = fields.DateTime()


class PurchasedBookOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    isbn = fields.String()
    price = money_out()
    cover_image_url = fields.String(allow_none=True)
    description = fields.String(allow_none=True)
    language = fields.String()
    pages = fields.Integer(allow_none=True)
    publication_date = fields.Date(allow_none=True)
    last_purchased_at = fields.DateTime()
    has_review = fields.Boolean()
    review_id = fields.String(allow_none=True)
    review_rating = fields.Integer(allow_none=True)
    review_comment = fields.String(allow_none=True)
