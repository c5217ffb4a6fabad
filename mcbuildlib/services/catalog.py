# mcbuildlib/services/catalog.py
"""
Shared operations for the three named catalog kinds: authors, themes, colors.

Every function takes an open ``Connection`` and leaves transaction control to
the caller (routes wrap writes in ``conn.begin()``).
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from .errors import (
    Conflict, IN_USE_TEMPLATE, WITH_ID, WITH_NAME, already_exists, not_found,
)
from .validation import validate_name

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class NamedKind:
    label: str        # "Author"
    plural: str       # "authors"; also the table name and URL segment
    link_table: str   # build_authors
    link_column: str  # author_id


AUTHOR = NamedKind("Author", "authors", "build_authors", "author_id")
THEME = NamedKind("Theme", "themes", "build_themes", "theme_id")
COLOR = NamedKind("Color", "colors", "build_colors", "color_id")


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def like_pattern(value: str) -> str:
    """Case-insensitive substring pattern for ``lower(col) LIKE :p ESCAPE '\\'``."""
    return f"%{_escape_like(value.strip().lower())}%"


# ---------- reads ----------
# largest id a BIGINT column (and the sqlite driver) can bind
MAX_ID = 2 ** 63 - 1


def parse_id(identifier: str) -> Optional[int]:
    """ASCII digits are an id; anything else (including "²") is a name."""
    if identifier.isascii() and identifier.isdigit():
        return int(identifier)
    return None


def find_by_id(conn: Connection, kind: NamedKind, entity_id: int) -> Optional[dict]:
    if entity_id > MAX_ID:
        return None
    row = conn.execute(
        text(f"SELECT id, name FROM {kind.plural} WHERE id = :id"),
        {"id": entity_id},
    ).mappings().one_or_none()
    return dict(row) if row else None


def find_by_name(conn: Connection, kind: NamedKind, name: str) -> Optional[dict]:
    row = conn.execute(
        text(f"SELECT id, name FROM {kind.plural} WHERE name = :name"),
        {"name": name},
    ).mappings().one_or_none()
    return dict(row) if row else None


def get(conn: Connection, kind: NamedKind, identifier: str) -> dict:
    """Resolve a path identifier: digits mean an id, anything else is an exact name."""
    identifier = str(identifier)
    entity_id = parse_id(identifier)
    if entity_id is not None:
        row = find_by_id(conn, kind, entity_id)
        if row is None:
            raise not_found(kind.label, WITH_ID, identifier)
    else:
        row = find_by_name(conn, kind, identifier)
        if row is None:
            raise not_found(kind.label, WITH_NAME, identifier)
    return row


def existing_names(conn: Connection, kind: NamedKind, names: Iterable[str]) -> Set[str]:
    names = list(names)
    if not names:
        return set()
    stmt = text(f"SELECT name FROM {kind.plural} WHERE name IN :names").bindparams(
        bindparam("names", expanding=True)
    )
    return {r[0] for r in conn.execute(stmt, {"names": names})}


def related_builds(conn: Connection, kind: NamedKind, ids: Iterable[int]) -> Dict[int, List[dict]]:
    ids = list(ids)
    out: Dict[int, List[dict]] = {i: [] for i in ids}
    if not ids:
        return out
    stmt = text(f"""
        SELECT l.{kind.link_column} AS parent_id, b.id AS id, b.name AS name
        FROM {kind.link_table} AS l
        JOIN builds AS b ON b.id = l.build_id
        WHERE l.{kind.link_column} IN :ids
        ORDER BY b.id
    """).bindparams(bindparam("ids", expanding=True))
    for r in conn.execute(stmt, {"ids": ids}).mappings():
        out[r["parent_id"]].append({"id": r["id"], "name": r["name"]})
    return out


def _with_builds(conn: Connection, kind: NamedKind, rows: List[dict]) -> List[dict]:
    builds = related_builds(conn, kind, [r["id"] for r in rows])
    return [{**r, "builds": builds[r["id"]]} for r in rows]


def list_all(conn: Connection, kind: NamedKind) -> List[dict]:
    rows = conn.execute(
        text(f"SELECT id, name FROM {kind.plural} ORDER BY id ASC")
    ).mappings().all()
    return _with_builds(conn, kind, [dict(r) for r in rows])


def search(conn: Connection, kind: NamedKind, name: Optional[str]) -> List[dict]:
    """Fuzzy name query; a missing or empty name returns everything."""
    if not (name or "").strip():
        return list_all(conn, kind)
    rows = conn.execute(
        text(f"""
            SELECT id, name FROM {kind.plural}
            WHERE lower(name) LIKE :pattern ESCAPE '\\'
            ORDER BY id ASC
        """),
        {"pattern": like_pattern(name)},
    ).mappings().all()
    return _with_builds(conn, kind, [dict(r) for r in rows])


def describe(conn: Connection, kind: NamedKind, identifier: str) -> dict:
    row = get(conn, kind, identifier)
    return _with_builds(conn, kind, [row])[0]


# ---------- writes ----------
def insert(conn: Connection, kind: NamedKind, name: str) -> dict:
    """Plain insert; callers have already checked validity and uniqueness."""
    row = conn.execute(
        text(f"INSERT INTO {kind.plural} (name) VALUES (:name) RETURNING id, name"),
        {"name": name},
    ).mappings().one()
    return dict(row)


def create(conn: Connection, kind: NamedKind, name) -> dict:
    name = validate_name(name)
    if find_by_name(conn, kind, name) is not None:
        raise already_exists(kind.label, name)
    row = insert(conn, kind, name)
    log.info("Created %s: %s", kind.label, row)
    return row


def find_or_create(conn: Connection, kind: NamedKind, name: str) -> dict:
    row = find_by_name(conn, kind, name)
    if row is not None:
        return row
    log.info("%s '%s' not found, creating new.", kind.label, name)
    return insert(conn, kind, name)


def rename(conn: Connection, kind: NamedKind, entity_id: int, new_name) -> dict:
    new_name = validate_name(new_name)
    if find_by_id(conn, kind, entity_id) is None:
        raise not_found(kind.label, WITH_ID, entity_id)
    clash = find_by_name(conn, kind, new_name)
    if clash is not None and clash["id"] != entity_id:
        raise already_exists(kind.label, new_name)
    conn.execute(
        text(f"UPDATE {kind.plural} SET name = :name WHERE id = :id"),
        {"name": new_name, "id": entity_id},
    )
    log.info("Updated %s %s -> %s", kind.label, entity_id, new_name)
    return {"id": entity_id, "name": new_name}


def delete(conn: Connection, kind: NamedKind, identifier: str) -> dict:
    row = get(conn, kind, identifier)
    count = conn.execute(
        text(f"SELECT COUNT(*) FROM {kind.link_table} WHERE {kind.link_column} = :id"),
        {"id": row["id"]},
    ).scalar_one()
    if count:
        raise Conflict(IN_USE_TEMPLATE.format(kind=kind.label, name=row["name"], count=count))
    conn.execute(text(f"DELETE FROM {kind.plural} WHERE id = :id"), {"id": row["id"]})
    log.info("Deleted %s with ID: %s, Name: %s", kind.label, row["id"], row["name"])
    return row
