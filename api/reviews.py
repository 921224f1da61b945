from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.review import (
    ReviewCreateSchema,
    ReviewEligibilityOutSchema,
    ReviewOutSchema,
    ReviewUpdateSchema,
)
from services import reviews as review_service
from utils.decorators import roles_required, jwt_required, current_user
from utils.pagination import envelope, parse_pagination

bp = Blueprint("reviews", __name__)

create_schema = ReviewCreateSchema()
update_schema = ReviewUpdateSchema()
out_schema = ReviewOutSchema()
out_list_schema = ReviewOutSchema(many=True)
eligibility_schema = ReviewEligibilityOutSchema()

CUSTOMER = [Role.CUSTOMER.value]


@bp.get("/reviews/book/<book_id>")
def list_book_reviews(book_id: str):
    """
    Reviews of a book with reviewer names, newest first
    ---
    tags: [Reviews]
    parameters:
      - { in: path, name: book_id, type: string, required: true }
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
    responses:
      200: { description: Pagination envelope }
    """
    page, limit = parse_pagination()
    reviews, total = review_service.list_for_book(storage.get_session(), book_id, page, limit)
    return jsonify(envelope(out_list_schema.dump(reviews), total, page, limit))


@bp.get("/reviews/can-review/<book_id>")
@jwt_required()
def can_review(book_id: str):
    """
    Whether the current user may review a book
    ---
    tags: [Reviews]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: book_id, type: string, required: true }
    responses:
      200:
        description: "{canReview, hasReviewed}"
    """
    result = review_service.eligibility(storage.get_session(), current_user().id, book_id)
    return jsonify(eligibility_schema.dump(result))


@bp.get("/reviews/<review_id>")
def get_review(review_id: str):
    """
    Get a review
    ---
    tags: [Reviews]
    parameters:
      - { in: path, name: review_id, type: string, required: true }
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    review = review_service.get_review(storage.get_session(), review_id)
    return jsonify(out_schema.dump(review))


@bp.post("/reviews")
@roles_required(CUSTOMER)
def create_review():
    """
    Review a purchased book (customers, once per book)
    ---
    tags: [Reviews]
    security:
      - Bearer: []
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [book_id, rating]
          properties:
            book_id: { type: string }
            rating: { type: integer, minimum: 1, maximum: 5 }
            comment: { type: string }
    responses:
      201: { description: Created }
      400: { description: Book not purchased or already reviewed }
      404: { description: Book not found }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    review = review_service.create_review(storage.get_session(), current_user().id, data)
    return jsonify(out_schema.dump(review)), 201


@bp.route("/reviews/<review_id>", methods=["PUT", "PATCH"])
@roles_required(CUSTOMER)
def update_review(review_id: str):
    """
    Update your own review (rating and/or comment)
    ---
    tags: [Reviews]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: review_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            rating: { type: integer, minimum: 1, maximum: 5 }
            comment: { type: string }
    responses:
      200: { description: Updated }
      403: { description: Review belongs to another user }
      404: { description: Not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    review = review_service.update_review(storage.get_session(), review_id, current_user().id, data)
    return jsonify(out_schema.dump(review))


@bp.delete("/reviews/<review_id>")
@roles_required(CUSTOMER)
def delete_review(review_id: str):
    """
    Delete your own review
    ---
    tags: [Reviews]
    security:
      - Bearer: []
    parameters:
      - { in: path, name: review_id, type: string, required: true }
    responses:
      204: { description: Deleted }
      403: { description: Review belongs to another user }
      404: { description: Not found }
    """
    review_service.delete_review(storage.get_session(), review_id, current_user().id)
    return ("", 204)
