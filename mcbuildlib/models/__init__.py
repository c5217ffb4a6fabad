# mcbuildlib/models/__init__.py
"""
Import and register all SQLAlchemy models so Base.metadata knows about them
before you call create_all().  Usage:

    from mcbuildlib.db.engine import make_engine, init_db
    init_db(make_engine(DATABASE_URL))
"""

# Named catalog rows
from .catalog import Author, Theme, Color

# Builds and their link tables
from .build import Build, BuildScreenshot, build_authors, build_themes, build_colors

# Accounts
from .user import User, RoleEnum


def register_models():
    return [
        Author,
        Theme,
        Color,
        Build,
        BuildScreenshot,
        User,
    ]


__all__ = [
    "Author",
    "Theme",
    "Color",
    "Build", "BuildScreenshot",
    "build_authors", "build_themes", "build_colors",
    "User", "RoleEnum",
    "register_models",
]
