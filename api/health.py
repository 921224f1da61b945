from datetime import datetime, timezone

from flask import Blueprint

from models import storage

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    """
    Health check (runs SELECT 1 against the database)
    ---
    tags:
      - Health
    responses:
      200:
        description: API and database are up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            timestamp:
              type: string
              format: date-time
            database:
              type: string
              example: connected
      503:
        description: Database unreachable
    """
    database_ok = storage.ping()
    body = {
        "status": "ok" if database_ok else "error",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "database": "connected" if database_ok else "disconnected",
    }
    return body, 200 if database_ok else 503
