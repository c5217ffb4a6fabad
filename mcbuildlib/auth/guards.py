# mcbuildlib/auth/guards.py
from __future__ import annotations
from functools import wraps
from typing import Iterable, Optional
from flask import request, jsonify, current_app, g
from ..services.auth import AuthService

# ---------- helpers ----------
def _json(status: int, payload: dict):
    return jsonify(payload), status

def _unauth(msg="unauthorized"):
    return _json(401, {"error": msg})

def _forbid(msg="forbidden"):
    return _json(403, {"error": msg})

def _decode_jwt_from_auth_header() -> Optional[dict]:
    auth = request.headers.get("Authorization", "")
    if not auth.lower().startswith("bearer "):
        return None
    token = auth.split(None, 1)[1] if " " in auth else ""
    return AuthService.verify_token(token, current_app.config.get("JWT_SECRET"))

def _load_identity() -> bool:
    """Populate g from the bearer token once per request; False when there is no valid token."""
    if getattr(g, "user_id", None):
        return True
    payload = _decode_jwt_from_auth_header()
    if not payload:
        return False
    try:
        g.user_id = int(payload.get("sub") or 0)
    except (TypeError, ValueError):
        return False
    g.username = payload.get("username")
    g.user_role = payload.get("role")
    return bool(g.user_id)

# ---------- queries used by the rest of the app ----------
def current_user() -> Optional[dict]:
    if not _load_identity():
        return None
    return {"id": g.user_id, "username": g.username, "role": g.user_role}

def has_role(role: str) -> bool:
    user = current_user()
    return bool(user) and user["role"] == role

# ---------- decorators ----------
def require_auth(roles: Optional[Iterable[str]] = None):
    """Require a valid JWT; optional role filter."""
    roles = set(roles or [])
    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = current_user()
            if not user:
                return _unauth()
            if roles and user["role"] not in roles:
                return _forbid()
            return fn(*args, **kwargs)
        return wrapper
    return deco

def require_admin(fn):
    return require_auth(roles={"Admin"})(fn)

def require_member(fn):
    """Any signed-in account (User or Admin)."""
    return require_auth(roles={"User", "Admin"})(fn)
