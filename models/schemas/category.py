from marshmallow import Schema, fields

from models.schemas.common import non_blank


class CategoryCreateSchema(Schema):
    name = fields.String(required=True, validate=non_blank(128))
    description = fields.String(allow_none=True)
    parent_id = fields.String(allow_none=True)


class CategoryUpdateSchema(Schema):
    name = fields.String(validate=non_blank(128))
    description = fields.String(allow_none=True)
    parent_id = fields.String(allow_none=True)


class CategoryOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    description = fields.String(allow_none=True)
    parent_id = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
