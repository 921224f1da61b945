"""
Resource services.

Each function takes the request's SQLAlchemy session plus already-validated
data (dicts loaded by the marshmallow schemas) and raises werkzeug HTTP
exceptions (NotFound, Forbidden, BadRequest, Conflict, Unauthorized), which
api/errors.py renders with the uniform error envelope.
"""
