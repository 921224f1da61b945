"""
Admin reports:
- GET /reports/sales            daily sales in a date range
- GET /reports/sold-books       per-book sales in a date range
- GET /reports/book-catalog     catalog with authors and ratings
- GET /reports/order-summary    orders with customer and item counts
- GET /reports/customer-history per-customer purchase totals
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models import storage
from models.user import Role
from models.schemas.report import (
    BookCatalogRowSchema,
    CustomerHistoryRowSchema,
    OrderSummaryRowSchema,
    SalesReportQuerySchema,
    SalesReportRowSchema,
    SoldBookRowSchema,
)
from services import reports as report_service
from utils.decorators import roles_required

bp = Blueprint("reports", __name__)

query_schema = SalesReportQuerySchema()
sales_schema = SalesReportRowSchema(many=True)
sold_books_schema = SoldBookRowSchema(many=True)
catalog_schema = BookCatalogRowSchema(many=True)
order_summary_schema = OrderSummaryRowSchema(many=True)
customer_history_schema = CustomerHistoryRowSchema(many=True)

ADMIN = [Role.ADMIN.value]

@bp.get("/reports/sales")
@roles_required(ADMIN)
def sales_report():
    """
    Daily sales report (admin)
    ---
    tags: [Reports]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: startDate, type: string, format: date, required: true }
      - { in: query, name: endDate, type: string, format: date, required: true }
      - { in: query, name: category, type: string }
      - { in: query, name: author, type: string }
      - { in: query, name: publisher, type: string }
      - { in: query, name: book, type: string }
      - { in: query, name: minPrice, type: number }
      - { in: query, name: maxPrice, type: number }
      - { in: query, name: status, type: string, description: "Defaults to shipped, delivered and completed" }
    responses:
      200: { description: One row per day }
      400: { description: Missing or invalid date range }
    """
    query = query_schema.load(request.args.to_dict())
    rows = report_service.sales(storage.get_session(), query)
    return jsonify(sales_schema.dump(rows))


@bp.get("/reports/sold-books")
@roles_required(ADMIN)
def sold_books_report():
    """
    Books sold in a date range (admin)
    ---
    tags: [Reports]
    security:
      - Bearer: []
    parameters:
      - { in: query, name: startDate, type: string, format: date, required: true }
      - { in: query, name: endDate, type: string, format: date, required: true }
      - { in: query, name: category, type: string }
      - { in: query, name: author, type: string }
      - { in: query, name: publisher, type: string }
      - { in: query, name: book, type: string }
      - { in: query, name: minPrice, type: number }
      - { in: query, name: maxPrice, type: number }
      - { in: query, name: status, type: string, description: "Defaults to shipped, delivered and completed" }
    responses:
      200: { description: One row per book, most sold first }
      400: { description: Missing or invalid date range }
    """
    query = query_schema.load(request.args.to_dict())
    rows = report_service.sold_books(storage.get_session(), query)
    return jsonify(sold_books_schema.dump(rows))


@bp.get("/reports/book-catalog")
@roles_required(ADMIN)
def book_catalog_report():
    """
    Book catalog with authors, ratings and stock (admin, first 100 rows)
    ---
    tags: [Reports]
    security:
      - Bearer: []
    responses:
      200: { description: Catalog rows }
    """
    return jsonify(catalog_schema.dump(report_service.book_catalog(storage.get_session())))


@bp.get("/reports/order-summary")
@roles_required(ADMIN)
def order_summary_report():
    """
    Orders with customer and item counts (admin, newest 100)
    ---
    tags: [Reports]
    security:
      - Bearer: []
    responses:
      200: { description: Order rows }
    """
    return jsonify(order_summary_schema.dump(report_service.order_summary(storage.get_session())))


@bp.get("/reports/customer-history")
@roles_required(ADMIN)
def customer_history_report():
    """
    Purchase history per customer (admin, top 100 by amount spent)
    ---
    tags: [Reports]
    security:
      - Bearer: []
    responses:
      200: { description: Customer rows }
    """
    return jsonify(customer_history_schema.dump(report_service.customer_history(storage.get_session())))
