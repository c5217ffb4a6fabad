# mcbuildlib/routes/catalog.py
"""
Authors, themes and colors share one set of endpoints; ``_named_blueprint``
builds it for each kind.

    GET    /<kind>                   list with related builds
    GET    /<kind>/query?name=       fuzzy name search
    GET    /<kind>/<identifier>      by id (digits) or exact name
    POST   /<kind>                   create        (Admin)
    PUT    /<kind>/<int:id>          rename        (Admin)
    DELETE /<kind>/<identifier>      delete        (Admin)
"""
from __future__ import annotations
from flask import Blueprint, request, jsonify, current_app

from .. import get_conn
from ..auth.guards import require_admin
from ..services import catalog
from ..services.catalog import AUTHOR, COLOR, THEME, NamedKind
from .common import check_query_params, json_object

ALLOWED_SIMPLE_QUERY_PARAMS = {"name"}


def _named_blueprint(kind: NamedKind) -> Blueprint:
    bp = Blueprint(kind.plural, __name__)
    base = f"/{kind.plural}"

    @bp.get(base)
    def list_entities():
        with get_conn() as conn:
            return jsonify({kind.plural: catalog.list_all(conn, kind)}), 200

    @bp.get(f"{base}/query")
    def query_entities():
        check_query_params(ALLOWED_SIMPLE_QUERY_PARAMS)
        with get_conn() as conn:
            return jsonify({kind.plural: catalog.search(conn, kind, request.args.get("name"))}), 200

    @bp.get(f"{base}/<identifier>")
    def get_entity(identifier: str):
        with get_conn() as conn:
            return jsonify(catalog.describe(conn, kind, identifier)), 200

    @bp.post(base)
    @require_admin
    def create_entity():
        data = json_object()
        with get_conn() as conn, conn.begin():
            row = catalog.create(conn, kind, data.get("name"))
        current_app.logger.info("created %s %s", kind.label, row["id"])
        return jsonify(row), 201

    @bp.put(f"{base}/<int:entity_id>")
    @require_admin
    def rename_entity(entity_id: int):
        data = json_object()
        with get_conn() as conn, conn.begin():
            row = catalog.rename(conn, kind, entity_id, data.get("name"))
        return jsonify(row), 200

    @bp.delete(f"{base}/<identifier>")
    @require_admin
    def delete_entity(identifier: str):
        with get_conn() as conn, conn.begin():
            row = catalog.delete(conn, kind, identifier)
        return jsonify({"deleted": True, "id": row["id"], "name": row["name"]}), 200

    return bp


authors_bp = _named_blueprint(AUTHOR)
themes_bp = _named_blueprint(THEME)
colors_bp = _named_blueprint(COLOR)
