from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from models.schemas.common import non_blank

ROLES = ("admin", "customer")


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class UserRegisterSchema(_EmailNormalizingSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6, max=128))
    first_name = fields.String(required=True, validate=non_blank(128))
    last_name = fields.String(required=True, validate=non_blank(128))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))


class UserLoginSchema(_EmailNormalizingSchema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)


class UserUpdateSchema(_EmailNormalizingSchema):
    """Admin update of any account."""
    email = fields.Email()
    first_name = fields.String(validate=non_blank(128))
    last_name = fields.String(validate=non_blank(128))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))
    role = fields.String(validate=validate.OneOf(ROLES))
    is_active = fields.Boolean()


class ProfileUpdateSchema(Schema):
    """Self-service update: profile fields only."""
    first_name = fields.String(validate=non_blank(128))
    last_name = fields.String(validate=non_blank(128))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))


class UserListQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    role = fields.String(load_default=None, validate=validate.OneOf(ROLES))


class UserOutSchema(Schema):
    id = fields.String()
    email = fields.String()
    first_name = fields.String()
    last_name = fields.String()
    phone = fields.String(allow_none=True)
    role = fields.String()
    is_active = fields.Boolean()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class AuthResponseSchema(Schema):
    access_token = fields.String()
    token_type = fields.String()
    expires_in = fields.Integer()
    user = fields.Nested(UserOutSchema)
