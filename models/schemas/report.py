from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

from models.order import OrderStatus
from models.schemas.common import money_out


class SalesReportQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    start_date = fields.Date(data_key="startDate", required=True)
    end_date = fields.Date(data_key="endDate", required=True)
    category = fields.String(load_default=None)
    author = fields.String(load_default=None)
    publisher = fields.String(load_default=None)
    book = fields.String(load_default=None)
    min_price = fields.Decimal(data_key="minPrice", load_default=None)
    max_price = fields.Decimal(data_key="maxPrice", load_default=None)
    status = fields.String(load_default=None, validate=validate.OneOf([s.value for s in OrderStatus]))

    @validates_schema
    def _validate_range(self, data, **kwargs):
        if data["start_date"] > data["end_date"]:
            raise ValidationError("startDate must not be after endDate.", "startDate")


class SalesReportRowSchema(Schema):
    sale_date = fields.String()
    total_orders = fields.Integer()
    unique_customers = fields.Integer()
    total_revenue = money_out()
    total_items_sold = fields.Integer()
    average_order_value = money_out()


class SoldBookRowSchema(Schema):
    book_id = fields.String()
    title = fields.String()
    isbn = fields.String()
    price = money_out()
    cover_image_url = fields.String(allow_none=True)
    category_name = fields.String(allow_none=True)
    publisher_name = fields.String(allow_none=True)
    total_quantity_sold = fields.Integer()
    total_revenue = money_out()
    orders_count = fields.Integer()
    average_sale_price = money_out()


class BookCatalogRowSchema(Schema):
    id = fields.String()
    isbn = fields.String()
    title = fields.String()
    price = money_out()
    stock = fields.Integer()
    is_active = fields.Boolean()
    category_name = fields.String(allow_none=True)
    publisher_name = fields.String(allow_none=True)
    authors = fields.String(allow_none=True)
    average_rating = fields.Float()
    review_count = fields.Integer()


class OrderSummaryRowSchema(Schema):
    order_id = fields.String()
    user_id = fields.String()
    customer_email = fields.String()
    customer_name = fields.String()
    status = fields.String()
    total_amount = money_out()
    item_count = fields.Integer()
    total_quantity = fields.Integer()
    created_at = fields.DateTime()


class CustomerHistoryRowSchema(Schema):
    user_id = fields.String()
    email = fields.String()
    customer_name = fields.String()
    total_orders = fields.Integer()
    total_spent = money_out()
    total_books = fields.Integer()
    first_order_at = fields.DateTime(allow_none=True)
    last_order_at = fields.DateTime(allow_none=True)
