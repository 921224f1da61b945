from marshmallow import (
    EXCLUDE,
    Schema,
    ValidationError,
    fields,
    post_load,
    pre_load,
    validate,
    validates,
    validates_schema,
)

from models.schemas.common import (
    validate_and_normalize_isbn,
    validate_not_future,
    non_blank,
    money,
    money_out,
)

SORT_KEYS = ("title", "price", "date", "rating")
SORT_ORDERS = ("ASC", "DESC")


class _BookFieldsMixin:
    """Validation shared by create and update payloads."""

    @validates("publication_date")
    def _validate_publication_date(self, value, **kwargs):
        validate_not_future(value)

    @validates_schema
    def _validate_primary_author(self, data, **kwargs):
        primary = data.get("primary_author_id")
        if primary is None:
            return
        if primary not in (data.get("author_ids") or []):
            raise ValidationError("primary_author_id must be one of author_ids.", "primary_author_id")

    @post_load
    def _normalize_isbn(self, data, **kwargs):
        # Replace input 'isbn' with normalized digits-only (or ISBN10 with X)
        if "isbn" in data:
            data["isbn"] = validate_and_normalize_isbn(data["isbn"])
        return data


class BookCreateSchema(_BookFieldsMixin, Schema):
    isbn = fields.String(required=True)
    title = fields.String(required=True, validate=non_blank(255))
    description = fields.String(allow_none=True)
    price = money(required=True)
    stock = fields.Integer(load_default=0, validate=validate.Range(min=0))
    pages = fields.Integer(allow_none=True, validate=validate.Range(min=1))
    publication_date = fields.Date(allow_none=True)
    language = fields.String(validate=validate.Length(min=1, max=64))
    publisher_id = fields.String(allow_none=True)
    category_id = fields.String(allow_none=True)
    cover_image_url = fields.String(allow_none=True, validate=validate.Length(max=512))
    is_active = fields.Boolean(load_default=True)
    author_ids = fields.List(fields.String(), load_default=list)
    primary_author_id = fields.String(allow_none=True)


class BookUpdateSchema(_BookFieldsMixin, Schema):
    # All optional, but validate if present
    isbn = fields.String()
    title = fields.String(validate=non_blank(255))
    description = fields.String(allow_none=True)
    price = money()
    stock = fields.Integer(validate=validate.Range(min=0))
    pages = fields.Integer(allow_none=True, validate=validate.Range(min=1))
    publication_date = fields.Date(allow_none=True)
    language = fields.String(validate=validate.Length(min=1, max=64))
    publisher_id = fields.String(allow_none=True)
    category_id = fields.String(allow_none=True)
    cover_image_url = fields.String(allow_none=True, validate=validate.Length(max=512))
    is_active = fields.Boolean()
    # When present, replaces the whole author set
    author_ids = fields.List(fields.String())
    primary_author_id = fields.String(allow_none=True)


class BookAuthorOutSchema(Schema):
    id = fields.String()
    first_name = fields.String()
    last_name = fields.String()
    is_primary = fields.Boolean()


class BookOutSchema(Schema):
    id = fields.String()
    isbn = fields.String()
    title = fields.String()
    description = fields.String(allow_none=True)
    price = money_out()
    stock = fields.Integer()
    pages = fields.Integer(allow_none=True)
    publication_date = fields.Date(allow_none=True)
    language = fields.String()
    cover_image_url = fields.String(allow_none=True)
    is_active = fields.Boolean()
    publisher_id = fields.String(allow_none=True)
    publisher_name = fields.String(allow_none=True)
    category_id = fields.String(allow_none=True)
    category_name = fields.String(allow_none=True)
    average_rating = fields.Float()
    review_count = fields.Integer()
    authors = fields.List(fields.Nested(BookAuthorOutSchema))
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class BookListQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default=None)


class BookSearchQuerySchema(Schema):
    """Query string of GET /books/search/advanced (page/limit handled separately)."""

    class Meta:
        unknown = EXCLUDE

    search = fields.String(load_default=None)
    category = fields.String(load_default=None)
    author = fields.String(load_default=None)
    publisher = fields.String(load_default=None)
    language = fields.String(load_default=None)
    min_price = fields.Decimal(data_key="minPrice", load_default=None, validate=validate.Range(min=0))
    max_price = fields.Decimal(data_key="maxPrice", load_default=None, validate=validate.Range(min=0))
    min_rating = fields.Float(data_key="minRating", load_default=None, validate=validate.Range(min=0, max=5))
    min_stock = fields.Integer(data_key="minStock", load_default=None, validate=validate.Range(min=0))
    max_stock = fields.Integer(data_key="maxStock", load_default=None, validate=validate.Range(min=0))
    start_date = fields.Date(data_key="startDate", load_default=None)
    end_date = fields.Date(data_key="endDate", load_default=None)
    sort_by = fields.String(data_key="sortBy", load_default="title", validate=validate.OneOf(SORT_KEYS))
    sort_order = fields.String(data_key="sortOrder", load_default="ASC", validate=validate.OneOf(SORT_ORDERS))

    @pre_load
    def _normalize(self, data, **kwargs):
        data = {k: v for k, v in data.items() if v != ""}
        if isinstance(data.get("sortOrder"), str):
            data["sortOrder"] = data["sortOrder"].upper()
        return data


class BestsellersQuerySchema(Schema):
    class Meta:
        unknown = EXCLUDE

    limit = fields.Integer(load_default=10, validate=validate.Range(min=1, max=100))
    start_date = fields.Date(data_key="startDate", load_default=None)
    end_date = fields.Date(data_key="endDate", load_default=None)


class BestsellerOutSchema(Schema):
    book_id = fields.String()
    title = fields.String()
    isbn = fields.String()
    price = money_out()
    cover_image_url = fields.String(allow_none=True)
    total_sold = fields.Integer()
    total_revenue = money_out()


class AddAuthorToBookSchema(Schema):
    author_id = fields.String(required=True)
    is_primary = fields.Boolean(load_default=False)


class BookAuthorLinkOutSchema(Schema):
    book_id = fields.String()
    book_title = fields.String()
    author_id = fields.String()
    author_name = fields.String()
    is_primary = fields.Boolean()
