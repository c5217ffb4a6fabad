# mcbuildlib/routes/builds.py
from __future__ import annotations
import io
from flask import Blueprint, request, jsonify, current_app, send_file

from .. import get_conn
from ..auth.guards import require_admin, require_member
from ..services import builds
from ..services.builds import BuildInput
from ..services.errors import BadRequest
from .common import check_query_params

builds_bp = Blueprint("builds", __name__)

ALLOWED_FILTER_PARAMS = {"author", "name", "theme", "color"}


def _form_input() -> BuildInput:
    """Read a multipart build form. List fields may be repeated keys."""
    form = request.form
    upload = request.files.get("schemFile")
    return BuildInput(
        name=form.get("name"),
        authors=form.getlist("authors"),
        themes=form.getlist("themes"),
        colors=form.getlist("colors"),
        description=form.get("description"),
        screenshots=form.getlist("screenshots"),
        schem_file=upload.read() if upload else None,
    )


@builds_bp.get("/builds")
def list_builds():
    with get_conn() as conn:
        return jsonify({"builds": builds.list_all(conn)}), 200


@builds_bp.get("/builds/query")
def query_builds():
    """
    GET /api/builds/query?author=&name=&theme=&color=&color=
    All filters are optional and combined with AND; repeated color matches any.
    """
    check_query_params(ALLOWED_FILTER_PARAMS)
    with get_conn() as conn:
        rows = builds.filter_builds(
            conn,
            author=request.args.get("author"),
            name=request.args.get("name"),
            theme=request.args.get("theme"),
            colors=request.args.getlist("color"),
        )
    return jsonify({"builds": rows}), 200


@builds_bp.get("/builds/<identifier>")
def get_build(identifier: str):
    with get_conn() as conn:
        return jsonify(builds.get(conn, identifier)), 200


@builds_bp.post("/builds")
@require_member
def create_build():
    data = _form_input()
    with get_conn() as conn, conn.begin():
        row = builds.create(conn, data)
    current_app.logger.info("build %s created", row["id"])
    return jsonify(row), 201


@builds_bp.put("/builds/<int:build_id>")
@require_admin
def update_build(build_id: int):
    data = _form_input()
    with get_conn() as conn, conn.begin():
        row = builds.update(conn, build_id, data)
    return jsonify(row), 200


@builds_bp.delete("/builds/<int:build_id>")
@require_admin
def delete_build(build_id: int):
    with get_conn() as conn, conn.begin():
        row = builds.delete(conn, build_id)
    return jsonify({"deleted": True, **row}), 200


@builds_bp.get("/builds/<identifier>/schem")
def download_schem(identifier: str):
    with get_conn() as conn:
        name, data = builds.schem_file(conn, identifier)
    return send_file(
        io.BytesIO(data),
        mimetype="application/octet-stream",
        as_attachment=True,
        download_name=f"{name}.schem",
    )


@builds_bp.get("/builds/<identifier>/screenshots")
def list_screenshots(identifier: str):
    with get_conn() as conn:
        return jsonify({"screenshots": builds.screenshots(conn, identifier)}), 200


@builds_bp.get("/builds/<identifier>/screenshot")
def get_screenshot(identifier: str):
    raw = request.args.get("index", "0")
    try:
        index = int(raw)
    except ValueError:
        raise BadRequest(f"Index must be an integer, got '{raw}'")
    with get_conn() as conn:
        url = builds.screenshot(conn, identifier, index)
    return jsonify({"index": index, "url": url}), 200
