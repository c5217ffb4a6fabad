from werkzeug.security import generate_password_hash, check_password_hash
import jwt
import datetime
from typing import Optional, Dict, Any
from sqlalchemy import text
from sqlalchemy.engine import Connection
from ..models.user import RoleEnum
from .errors import Conflict, ValidationFailed
from .validation import first_failure, is_text, is_not_blank, length_between

JWT_ALGORITHM = "HS256"

# ---- credential rules ----
USERNAME_RULES = (
    (is_text, "Username must be a string"),
    (is_not_blank, "Username cannot be blank"),
    (length_between(3, 50), "Username must be between 3 and 50 characters"),
)
PASSWORD_RULES = (
    (is_text, "Password must be a string"),
    (is_not_blank, "Password cannot be blank"),
    (length_between(8, 100), "Password must be between 8 and 100 characters"),
)

def _norm_username(v: Optional[str]) -> str:
    return (v or "").strip()

def _public(row) -> Dict[str, Any]:
    user = {k: row[k] for k in ("id", "username", "role")}
    created = row.get("created_at") if hasattr(row, "get") else None
    if isinstance(created, datetime.datetime):
        user["created_at"] = created.isoformat()
    elif created is not None:
        user["created_at"] = str(created)
    return user

class AuthService:
    # ---------- password helpers ----------
    @staticmethod
    def hash_password(password: str) -> str:
        return generate_password_hash(password)

    @staticmethod
    def verify_password(hashed_password: str, password: str) -> bool:
        if not hashed_password or not password:
            return False
        return check_password_hash(hashed_password, password)

    # ---------- JWT helpers ----------
    @staticmethod
    def generate_token(user: Dict[str, Any], secret: str, expires_hours: int = 24) -> str:
        now = datetime.datetime.now(datetime.timezone.utc)
        payload = {
            "sub": str(user["id"]),
            "username": user["username"],
            "role": user["role"],
            "iat": int(now.timestamp()),
            "exp": int((now + datetime.timedelta(hours=expires_hours)).timestamp()),
        }
        return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)

    @staticmethod
    def verify_token(token: Optional[str], secret: str) -> Optional[Dict[str, Any]]:
        """Verify JWT token and return payload if valid."""
        if not token or not secret:
            return None
        if token.startswith("Bearer "):
            token = token[7:]
        try:
            return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
        except jwt.InvalidTokenError:
            return None

    # ---------- user flows ----------
    @staticmethod
    def register_user(conn: Connection, username, password, role: RoleEnum = RoleEnum.User) -> Dict[str, Any]:
        """Create a user account; new accounts get the User role unless told otherwise."""
        if isinstance(username, str):
            username = username.strip()
        errors = {}
        for field, value, rules in (("username", username, USERNAME_RULES), ("password", password, PASSWORD_RULES)):
            msg = first_failure(value, rules)
            if msg:
                errors[field] = msg
        if errors:
            raise ValidationFailed(errors)

        username = _norm_username(username)
        exists = conn.execute(
            text("SELECT 1 FROM users WHERE username = :username"),
            {"username": username},
        ).scalar()
        if exists:
            raise Conflict(
                f"A User with name '{username}' already exists. Please choose a unique name."
            )

        row = conn.execute(
            text("""
                INSERT INTO users (username, password_hash, role)
                VALUES (:username, :password_hash, :role)
                RETURNING id, username, role, created_at
            """),
            {
                "username": username,
                "password_hash": AuthService.hash_password(password),
                "role": RoleEnum(role).value,
            },
        ).mappings().one()
        return _public(row)

    @staticmethod
    def authenticate_user(conn: Connection, username, password) -> Optional[Dict[str, Any]]:
        """Return the public user dict on matching credentials, else None."""
        username = _norm_username(username) if isinstance(username, str) else ""
        if not username or not isinstance(password, str) or not password:
            return None
        row = conn.execute(
            text("""
                SELECT id, username, role, password_hash, created_at
                FROM users
                WHERE username = :username
                LIMIT 1
            """),
            {"username": username},
        ).mappings().one_or_none()
        if not row or not AuthService.verify_password(row["password_hash"], password):
            return None
        return _public(row)

    @staticmethod
    def get_user_by_id(conn: Connection, user_id: int) -> Optional[Dict[str, Any]]:
        row = conn.execute(
            text("SELECT id, username, role, created_at FROM users WHERE id = :user_id"),
            {"user_id": user_id},
        ).mappings().one_or_none()
        return _public(row) if row else None
