from marshmallow import Schema, fields, validates, validate

from models.schemas.common import non_blank, validate_not_future


class AuthorCreateSchema(Schema):
    first_name = fields.String(required=True, validate=non_blank(128))
    last_name = fields.String(required=True, validate=non_blank(128))
    bio = fields.String(allow_none=True)
    birth_date = fields.Date(allow_none=True)
    nationality = fields.String(allow_none=True, validate=validate.Length(max=64))

    @validates("birth_date")
    def _validate_birth_date(self, value, **kwargs):
        validate_not_future(value)


class AuthorUpdateSchema(AuthorCreateSchema):
    first_name = fields.String(validate=non_blank(128))
    last_name = fields.String(validate=non_blank(128))


class AuthorOutSchema(Schema):
    id = fields.String()
    first_name = fields.String()
    last_name = fields.String()
    bio = fields.String(allow_none=True)
    birth_date = fields.Date(allow_none=True)
    nationality = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
