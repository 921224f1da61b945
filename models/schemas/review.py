from marshmallow import Schema, fields, validate

RATING = validate.Range(min=1, max=5)


class ReviewCreateSchema(Schema):
    book_id = fields.String(required=True)
    rating = fields.Integer(required=True, validate=RATING)
    comment = fields.String(allow_none=True, validate=validate.Length(max=5000))


class ReviewUpdateSchema(Schema):
    rating = fields.Integer(validate=RATING)
    comment = fields.String(allow_none=True, validate=validate.Length(max=5000))


class ReviewOutSchema(Schema):
    id = fields.String()
    user_id = fields.String()
    book_id = fields.String()
    rating = fields.Integer()
    comment = fields.String(allow_none=True)
    first_name = fields.String()
    last_name = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class ReviewEligibilityOutSchema(Schema):
    can_review = fields.Boolean(data_key="canReview")
    has_reviewed = fields.Boolean(data_key="hasReviewed")
