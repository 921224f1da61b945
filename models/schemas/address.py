from marshmallow import Schema, fields

from models.schemas.common import non_blank


class AddressCreateSchema(Schema):
    street = fields.String(required=True, validate=non_blank(255))
    city = fields.String(required=True, validate=non_blank(128))
    state = fields.String(allow_none=True)
    postal_code = fields.String(required=True, validate=non_blank(32))
    country = fields.String(required=True, validate=non_blank(128))
    is_default = fields.Boolean(load_default=False)


class AddressUpdateSchema(Schema):
    street = fields.String(validate=non_blank(255))
    city = fields.String(validate=non_blank(128))
    state = fields.String(allow_none=True)
    postal_code = fields.String(validate=non_blank(32))
    country = fields.String(validate=non_blank(128))
    is_default = fields.Boolean()


class AddressOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    street = fields.String()
    city = fields.String()
    state = fields.String(allow_none=True)
    postal_code = fields.String()
    country = fields.String()
    is_default = fields.Boolean()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
