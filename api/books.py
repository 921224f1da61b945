from __future__ import annotations

from flask import Blueprint, request, jsonify, current_app

from models import storage
from models.user import Role
from models.schemas.book import (
    AddAuthorToBookSchema,
    BestsellerOutSchema,
    BestsellersQuerySchema,
    BookAuthorLinkOutSchema,
    BookCreateSchema,
    BookListQuerySchema,
    BookOutSchema,
    BookSearchQuerySchema,
    BookUpdateSchema,
)
from services import books as book_service
from utils.decorators import roles_required
from utils.pagination import envelope, parse_pagination

bp = Blueprint("books", __name__)

# Schemas
book_create_schema = BookCreateSchema()
book_update_schema = BookUpdateSchema()
book_out_schema = BookOutSchema()
books_out_schema = BookOutSchema(many=True)
book_list_query_schema = BookListQuerySchema()
book_search_query_schema = BookSearchQuerySchema()
bestsellers_query_schema = BestsellersQuerySchema()
bestsellers_out_schema = BestsellerOutSchema(many=True)
add_author_schema = AddAuthorToBookSchema()
book_author_link_schema = BookAuthorLinkOutSchema()
book_author_links_schema = BookAuthorLinkOutSchema(many=True)

ADMIN = [Role.ADMIN.value]


def _list_response(include_inactive: bool):
    page, limit = parse_pagination()
    query = book_list_query_schema.load(request.args.to_dict())
    books, total = book_service.list_books(
        storage.get_session(),
        page,
        limit,
        search=query["search"] or None,
        include_inactive=include_inactive,
        text_config=current_app.config["SEARCH_TEXT_CONFIG"],
    )
    return jsonify(envelope(books_out_schema.dump(books), total, page, limit))


@bp.get("/books")
def list_books():
    """
    List active books (paginated); ?search= filters by title / full text
    ---
    tags:
      - Books
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
      - { in: query, name: search, type: string }
    responses:
      200:
        description: "Pagination envelope: data, total, page, limit, totalPages"
    """
    return _list_response(include_inactive=False)


@bp.get("/books/admin")
@roles_required(ADMIN)
def list_books_admin():
    """
    List all books including inactive ones (admin)
    ---
    tags:
      - Books
    security:
      - Bearer: []
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
      - { in: query, name: search, type: string }
    responses:
      200:
        description: Pagination envelope
      403:
        description: Not an admin
    """
    return _list_response(include_inactive=True)


@bp.get("/books/search/advanced")
def search_books():
    """
    Advanced search over active books
    ---
    tags:
      - Books
    parameters:
      - { in: query, name: page, type: integer, default: 1 }
      - { in: query, name: limit, type: integer, default: 10 }
      - { in: query, name: search, type: string, description: "Title substring or full-text match" }
      - { in: query, name: category, type: string }
      - { in: query, name: author, type: string }
      - { in: query, name: publisher, type: string }
      - { in: query, name: language, type: string }
      - { in: query, name: minPrice, type: number }
      - { in: query, name: maxPrice, type: number }
      - { in: query, name: minRating, type: number }
      - { in: query, name: minStock, type: integer }
      - { in: query, name: maxStock, type: integer }
      - { in: query, name: startDate, type: string, format: date }
      - { in: query, name: endDate, type: string, format: date }
      - { in: query, name: sortBy, type: string, enum: [title, price, date, rating], default: title }
      - { in: query, name: sortOrder, type: string, enum: [ASC, DESC], default: ASC }
    responses:
      200:
        description: Pagination envelope with authors, ratings and review counts
      400:
        description: Invalid filter or sort value
    """
    page, limit = parse_pagination()
    query = book_search_query_schema.load(request.args.to_dict())
    books, total = book_service.search_books(
        storage.get_session(), query, page, limit, text_config=current_app.config["SEARCH_TEXT_CONFIG"]
    )
    return jsonify(envelope(books_out_schema.dump(books), total, page, limit))


@bp.get("/books/bestsellers")
def bestsellers():
    """
    Best-selling books (shipped, delivered or completed orders)
    ---
    tags:
      - Books
    parameters:
      - { in: query, name: limit, type: integer, default: 10 }
      - { in: query, name: startDate, type: string, format: date }
      - { in: query, name: endDate, type: string, format: date }
    responses:
      200:
        description: Books ordered by quantity sold
    """
    query = bestsellers_query_schema.load(request.args.to_dict())
    rows = book_service.bestsellers(
        storage.get_session(), query["limit"], query["start_date"], query["end_date"]
    )
    return jsonify(bestsellers_out_schema.dump(rows))


@bp.get("/books/<book_id>")
def get_book(book_id: str):
    """
    Get a single book by id
    ---
    tags:
      - Books
    parameters:
      - { in: path, name: book_id, type: string, required: true }
    responses:
      200:
        description: Book found
      404:
        description: Not found
    """
    book = book_service.get_book(storage.get_session(), book_id)
    return jsonify(book_out_schema.dump(book))


@bp.post("/books")
@roles_required(ADMIN)
def create_book():
    """
    Create a new book (admin)
    ---
    tags:
      - Books
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [isbn, title, price]
          properties:
            isbn: { type: string, description: "ISBN-10 or ISBN-13" }
            title: { type: string, maxLength: 255 }
            description: { type: string }
            price: { type: string, example: "19.99" }
            stock: { type: integer, minimum: 0, default: 0 }
            pages: { type: integer, minimum: 1 }
            publication_date: { type: string, format: date }
            language: { type: string, default: Spanish }
            publisher_id: { type: string }
            category_id: { type: string }
            cover_image_url: { type: string }
            is_active: { type: boolean, default: true }
            author_ids:
              type: array
              items: { type: string }
            primary_author_id: { type: string, description: "Defaults to the first of author_ids" }
    responses:
      201:
        description: Created
      400:
        description: Validation error or unknown reference
      409:
        description: Book with same ISBN already exists
    """
    payload = request.get_json(silent=True) or {}
    data = book_create_schema.load(payload)
    book = book_service.create_book(
        storage.get_session(), data, default_language=current_app.config["DEFAULT_BOOK_LANGUAGE"]
    )
    return jsonify(book_out_schema.dump(book)), 201


@bp.route("/books/<book_id>", methods=["PUT", "PATCH"])
@roles_required(ADMIN)
def update_book(book_id: str):
    """
    Update a book (partial; author_ids replaces the author set)
    ---
    tags:
      - Books
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - { in: path, name: book_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
    responses:
      200:
        description: Updated
      404:
        description: Not found
      409:
        description: Conflict (duplicate ISBN)
    """
    payload = request.get_json(silent=True) or {}
    data = book_update_schema.load(payload)
    book = book_service.update_book(storage.get_session(), book_id, data)
    return jsonify(book_out_schema.dump(book))


@bp.delete("/books/<book_id>")
@roles_required(ADMIN)
def delete_book(book_id: str):
    """
    Delete a book (admin)
    ---
    tags:
      - Books
    security:
      - Bearer: []
    parameters:
      - { in: path, name: book_id, type: string, required: true }
    responses:
      204:
        description: Deleted
      404:
        description: Not found
      409:
        description: The book appears in orders
    """
    book_service.delete_book(storage.get_session(), book_id)
    return ("", 204)


@bp.get("/books/<book_id>/authors")
def list_book_authors(book_id: str):
    """
    Authors linked to a book
    ---
    tags:
      - Books
    parameters:
      - { in: path, name: book_id, type: string, required: true }
    responses:
      200:
        description: book_id, book_title, author_id, author_name, is_primary per link
      404:
        description: Book not found
    """
    links = book_service.list_book_authors(storage.get_session(), book_id)
    return jsonify(book_author_links_schema.dump(links))


@bp.post("/books/<book_id>/authors")
@roles_required(ADMIN)
def add_book_author(book_id: str):
    """
    Link an author to a book (admin); is_primary clears the flag on the other links
    ---
    tags:
      - Books
    security:
      - Bearer: []
    parameters:
      - { in: path, name: book_id, type: string, required: true }
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [author_id]
          properties:
            author_id: { type: string }
            is_primary: { type: boolean, default: false }
    responses:
      201:
        description: Linked
      400:
        description: Author already linked
      404:
        description: Book or author not found
    """
    payload = request.get_json(silent=True) or {}
    data = add_author_schema.load(payload)
    link = book_service.add_author(storage.get_session(), book_id, data["author_id"], data["is_primary"])
    return jsonify(book_author_link_schema.dump(link)), 201


@bp.delete("/books/<book_id>/authors/<author_id>")
@roles_required(ADMIN)
def remove_book_author(book_id: str, author_id: str):
    """
    Unlink an author from a book (admin)
    ---
    tags:
      - Books
    security:
      - Bearer: []
    parameters:
      - { in: path, name: book_id, type: string, required: true }
      - { in: path, name: author_id, type: string, required: true }
    responses:
      204:
        description: Unlinked
      404:
        description: No such link
    """
    book_service.remove_author(storage.get_session(), book_id, author_id)
    return ("", 204)
