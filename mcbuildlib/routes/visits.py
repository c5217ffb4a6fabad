# mcbuildlib/routes/visits.py
from flask import Blueprint, jsonify, current_app, request

from ..auth.guards import require_admin

visits_bp = Blueprint("visits", __name__)

# requests to these prefixes are not counted
EXCLUDED_PREFIXES = ("/api/visits", "/static")


def count_visit():
    """before_request hook: bump the shared counter once per counted request."""
    if request.path.startswith(EXCLUDED_PREFIXES):
        return None
    current_app.extensions["visit_counter"].increment()
    return None


@visits_bp.get("/visits")
def total_visits():
    return jsonify({"total_requests": current_app.extensions["visit_counter"].total}), 200


@visits_bp.post("/visits/reset")
@require_admin
def reset_visits():
    current_app.extensions["visit_counter"].reset()
    current_app.logger.info("visit counter reset")
    return jsonify({"total_requests": 0}), 200
