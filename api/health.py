from flask import Blueprint

from models import storage

bp = Blueprint("health", __name__)

VERSION = "1.0.0"


@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            status:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
            database:
              type: string
              example: sqlite
    """
    engine = storage.engine
    return {
        "status": "ok",
        "version": VERSION,
        "database": engine.url.get_backend_name() if engine is not None else None,
    }, 200
