import logging
from sqlalchemy import text
from sqlalchemy.engine import Engine
from ..models.user import RoleEnum
from .auth import AuthService

log = logging.getLogger(__name__)

def seed_admin(engine: Engine, username: str | None, password: str | None) -> bool:
    """Create the configured admin account if it does not exist yet. Returns True when created."""
    if not username or not password:
        return False

    with engine.connect() as conn:
        exists = conn.execute(
            text("SELECT 1 FROM users WHERE username = :username"),
            {"username": username.strip()},
        ).scalar()
        if exists:
            log.info("Admin user '%s' already exists, skipping creation", username)
            return False

        AuthService.register_user(conn, username, password, role=RoleEnum.Admin)
        conn.commit()
    log.info("Admin user '%s' created", username)
    return True
