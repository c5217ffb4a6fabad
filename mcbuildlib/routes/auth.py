# mcbuildlib/routes/auth.py
from flask import Blueprint, jsonify, current_app

from .. import get_conn
from ..auth.guards import current_user, require_auth
from ..services.auth import AuthService
from .common import json_object

auth_bp = Blueprint("auth", __name__)

@auth_bp.post("/auth/login")
def login():
    """
    POST /api/auth/login
    Body: { "username": str, "password": str }
    Returns: 200 { "access_token": <jwt>, "user": { id, username, role } }
             400 on missing fields, 401 on bad credentials
    """
    data = json_object()
    username = data.get("username")
    password = data.get("password")
    if not username or not password:
        return {"error": "bad_request", "message": "username and password required"}, 400

    # ensure connection is closed/returned to pool
    with get_conn() as conn:
        user = AuthService.authenticate_user(conn, username, password)

    if not user:
        current_app.logger.info("failed login for %r", username)
        return {"error": "invalid_credentials"}, 401

    token = AuthService.generate_token(
        user,
        current_app.config["JWT_SECRET"],
        int(current_app.config.get("JWT_EXPIRES_HOURS", 24)),
    )
    return jsonify({"access_token": token, "user": user}), 200


@auth_bp.post("/users/register")
def register():
    """
    POST /api/users/register
    Body: { "username": str, "password": str }
    Returns: 201 { user }, 400 validation_failed, 409 conflict
    """
    data = json_object()
    with get_conn() as conn, conn.begin():
        user = AuthService.register_user(conn, data.get("username"), data.get("password"))
    current_app.logger.info("Registered new user: %s", user["username"])
    return jsonify({"user": user}), 201


@auth_bp.get("/users/me")
@require_auth()
def me():
    user = current_user()
    with get_conn() as conn:
        row = AuthService.get_user_by_id(conn, user["id"])
    if not row:
        return {"error": "unauthorized"}, 401
    return jsonify({"user": row}), 200
