from marshmallow import Schema, fields, validate

from models.schemas.common import non_blank


class PublisherCreateSchema(Schema):
    name = fields.String(required=True, validate=non_blank(128))
    address = fields.String(allow_none=True, validate=validate.Length(max=255))
    city = fields.String(allow_none=True, validate=validate.Length(max=128))
    country = fields.String(allow_none=True, validate=validate.Length(max=128))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))
    email = fields.Email(allow_none=True)
    website = fields.String(allow_none=True, validate=validate.Length(max=255))


class PublisherUpdateSchema(PublisherCreateSchema):
    name = fields.String(validate=non_blank(128))


class PublisherOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    address = fields.String(allow_none=True)
    city = fields.String(allow_none=True)
    country = fields.String(allow_none=True)
    phone = fields.String(allow_none=True)
    email = fields.String(allow_none=True)
    website = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
