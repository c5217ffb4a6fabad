# mcbuildlib/routes/bulk.py
from flask import Blueprint, jsonify, current_app

from .. import get_conn
from ..auth.guards import require_admin
from ..services.bulk import DEFAULT_MAX_ENTRIES, bulk_create
from .common import json_object

bulk_bp = Blueprint("bulk", __name__)

@bulk_bp.post("/bulk/create")
@require_admin
def create_in_bulk():
    """
    POST /api/bulk/create - create missing authors, themes and colors (Admin only).

    Request:
      { "authors": [{"name": "Steve"}], "themes": [...], "colors": [...] }
      Every list is optional.

    Responses:
      - 200: { "createdAuthors": [...], "skippedAuthors": [...],
               "createdThemes":  [...], "skippedThemes":  [...],
               "createdColors":  [...], "skippedColors":  [...] }
      - 400: { "error": "validation_failed", "message": ..., "details": { "authors[0].name": ... } }
      - 401 / 403
    """
    payload = json_object()
    max_entries = int(current_app.config.get("BULK_MAX_ENTRIES", DEFAULT_MAX_ENTRIES))

    # each kind commits on its own; the connection must start without a transaction
    with get_conn() as conn:
        result = bulk_create(conn, payload, max_entries)
    return jsonify(result), 200
