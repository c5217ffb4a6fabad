# mcbuildlib/services/builds.py
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import bindparam, text
from sqlalchemy.engine import Connection

from . import catalog
from .catalog import AUTHOR, COLOR, MAX_ID, THEME, NamedKind, like_pattern, parse_id
from .errors import BadRequest, NotFound, ValidationFailed, WITH_ID, WITH_NAME, already_exists, not_found
from .validation import BUILD_NAME_RULES, NAME_RULES, first_failure, is_not_blank

log = logging.getLogger(__name__)

BUILD = "Build"
LIST_NOT_EMPTY = "List cannot be empty"
FILE_NOT_EMPTY = "File cannot be empty"
INDEX_NON_NEGATIVE = "Index must be zero or positive"
MAX_SCREENSHOTS = 10
SCREENSHOTS_LIMIT = f"Maximum of {MAX_SCREENSHOTS} screenshots allowed"
SCREENSHOT_NOT_BLANK = "Screenshot URL/identifier cannot be blank"

# (response key, kind) for the three many-to-many relations
_RELATIONS: Tuple[Tuple[str, NamedKind], ...] = (
    ("authors", AUTHOR),
    ("themes", THEME),
    ("colors", COLOR),
)


@dataclass
class BuildInput:
    name: str
    authors: List[str] = field(default_factory=list)
    themes: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    description: Optional[str] = None
    screenshots: List[str] = field(default_factory=list)
    schem_file: Optional[bytes] = None


def _validate(data: BuildInput, require_file: bool) -> BuildInput:
    errors: Dict[str, str] = {}

    msg = first_failure(data.name, BUILD_NAME_RULES)
    if msg:
        errors["name"] = msg
    for key, _kind in _RELATIONS:
        values = getattr(data, key)
        if not values:
            errors[key] = LIST_NOT_EMPTY
        for i, value in enumerate(values):
            msg = first_failure(value, NAME_RULES)
            if msg:
                errors[f"{key}[{i}]"] = msg
    if len(data.screenshots) > MAX_SCREENSHOTS:
        errors["screenshots"] = SCREENSHOTS_LIMIT
    for i, url in enumerate(data.screenshots):
        if not is_not_blank(url):
            errors[f"screenshots[{i}]"] = SCREENSHOT_NOT_BLANK
    if require_file and not data.schem_file:
        errors["schemFile"] = FILE_NOT_EMPTY

    if errors:
        raise ValidationFailed(errors)

    return BuildInput(
        name=data.name.strip(),
        authors=list(dict.fromkeys(a.strip() for a in data.authors)),
        themes=list(dict.fromkeys(t.strip() for t in data.themes)),
        colors=list(dict.fromkeys(c.strip() for c in data.colors)),
        description=(data.description or "").strip() or None,
        screenshots=[s.strip() for s in data.screenshots],
        schem_file=data.schem_file,
    )


# ---------- row assembly ----------
def _attach(conn: Connection, rows: List[dict]) -> List[dict]:
    if not rows:
        return []
    ids = [r["id"] for r in rows]
    out = {r["id"]: {**r, "authors": [], "themes": [], "colors": [], "screenshots": []} for r in rows}

    for key, kind in _RELATIONS:
        stmt = text(f"""
            SELECT l.build_id AS build_id, e.name AS name
            FROM {kind.link_table} AS l
            JOIN {kind.plural} AS e ON e.id = l.{kind.link_column}
            WHERE l.build_id IN :ids
            ORDER BY e.name
        """).bindparams(bindparam("ids", expanding=True))
        for r in conn.execute(stmt, {"ids": ids}).mappings():
            out[r["build_id"]][key].append(r["name"])

    stmt = text("""
        SELECT build_id, url FROM build_screenshots
        WHERE build_id IN :ids
        ORDER BY build_id, position
    """).bindparams(bindparam("ids", expanding=True))
    for r in conn.execute(stmt, {"ids": ids}).mappings():
        out[r["build_id"]]["screenshots"].append(r["url"])

    return [out[i] for i in ids]


_SELECT_BUILD = """
    SELECT id, name, description,
           CASE WHEN schem_file IS NULL THEN 0 ELSE 1 END AS has_schem
    FROM builds
"""


def _fetch(conn: Connection, where: str = "", params: Optional[dict] = None, binds=()) -> List[dict]:
    stmt = text(f"{_SELECT_BUILD} {where} ORDER BY id ASC")
    if binds:
        stmt = stmt.bindparams(*binds)
    rows = conn.execute(stmt, params or {}).mappings().all()
    return _attach(conn, [{**dict(r), "has_schem": bool(r["has_schem"])} for r in rows])


# ---------- reads ----------
def list_all(conn: Connection) -> List[dict]:
    return _fetch(conn)


def find_by_id(conn: Connection, build_id: int) -> Optional[dict]:
    if build_id > MAX_ID:
        return None
    rows = _fetch(conn, "WHERE id = :id", {"id": build_id})
    return rows[0] if rows else None


def find_by_name(conn: Connection, name: str) -> Optional[dict]:
    rows = _fetch(conn, "WHERE name = :name", {"name": name})
    return rows[0] if rows else None


def get(conn: Connection, identifier: str) -> dict:
    identifier = str(identifier)
    build_id = parse_id(identifier)
    if build_id is not None:
        build = find_by_id(conn, build_id)
        if build is None:
            raise not_found(BUILD, WITH_ID, identifier)
    else:
        build = find_by_name(conn, identifier)
        if build is None:
            raise not_found(BUILD, WITH_NAME, identifier)
    return build


def filter_builds(
    conn: Connection,
    author: Optional[str] = None,
    name: Optional[str] = None,
    theme: Optional[str] = None,
    colors: Optional[Iterable[str]] = None,
) -> List[dict]:
    """
    AND across the given filters, any-match within ``colors``.
    author/name/theme: case-insensitive substring; colors: case-insensitive exact.
    Filters that are None or blank match everything.
    """
    clauses: List[str] = []
    params: dict = {}
    binds = []

    if (name or "").strip():
        clauses.append("lower(name) LIKE :name ESCAPE '\\'")
        params["name"] = like_pattern(name)

    for key, value, kind in (("author", author, AUTHOR), ("theme", theme, THEME)):
        if (value or "").strip():
            clauses.append(f"""EXISTS (
                SELECT 1 FROM {kind.link_table} AS l
                JOIN {kind.plural} AS e ON e.id = l.{kind.link_column}
                WHERE l.build_id = builds.id AND lower(e.name) LIKE :{key} ESCAPE '\\'
            )""")
            params[key] = like_pattern(value)

    wanted = sorted({c.strip().lower() for c in (colors or []) if c and c.strip()})
    if wanted:
        clauses.append("""EXISTS (
            SELECT 1 FROM build_colors AS l
            JOIN colors AS e ON e.id = l.color_id
            WHERE l.build_id = builds.id AND lower(e.name) IN :colors
        )""")
        params["colors"] = wanted
        binds.append(bindparam("colors", expanding=True))

    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return _fetch(conn, where, params, binds)


def schem_file(conn: Connection, identifier: str) -> Tuple[str, bytes]:
    build = get(conn, identifier)
    data = conn.execute(
        text("SELECT schem_file FROM builds WHERE id = :id"), {"id": build["id"]}
    ).scalar_one_or_none()
    if not data:
        raise NotFound(f"Schem file for build '{build['name']}' not found")
    return build["name"], bytes(data)


def screenshots(conn: Connection, identifier: str) -> List[str]:
    return get(conn, identifier)["screenshots"]


def screenshot(conn: Connection, identifier: str, index: int) -> str:
    if index < 0:
        raise BadRequest(INDEX_NON_NEGATIVE)
    build = get(conn, identifier)
    shots = build["screenshots"]
    if index >= len(shots):
        raise NotFound(f"Screenshot index {index} for Build {WITH_ID} '{build['id']}' not found")
    return shots[index]


# ---------- writes ----------
def _link(conn: Connection, build_id: int, data: BuildInput) -> None:
    for key, kind in _RELATIONS:
        conn.execute(
            text(f"DELETE FROM {kind.link_table} WHERE build_id = :bid"), {"bid": build_id}
        )
        for entity_name in getattr(data, key):
            row = catalog.find_or_create(conn, kind, entity_name)
            conn.execute(
                text(f"INSERT INTO {kind.link_table} (build_id, {kind.link_column}) VALUES (:bid, :eid)"),
                {"bid": build_id, "eid": row["id"]},
            )

    conn.execute(text("DELETE FROM build_screenshots WHERE build_id = :bid"), {"bid": build_id})
    for pos, url in enumerate(data.screenshots):
        conn.execute(
            text("INSERT INTO build_screenshots (build_id, position, url) VALUES (:bid, :pos, :url)"),
            {"bid": build_id, "pos": pos, "url": url},
        )


def create(conn: Connection, data: BuildInput) -> dict:
    data = _validate(data, require_file=True)
    if conn.execute(text("SELECT 1 FROM builds WHERE name = :name"), {"name": data.name}).scalar():
        raise already_exists(BUILD, data.name)

    build_id = conn.execute(
        text("""
            INSERT INTO builds (name, description, schem_file)
            VALUES (:name, :description, :schem)
            RETURNING id
        """),
        {"name": data.name, "description": data.description, "schem": data.schem_file},
    ).scalar_one()
    _link(conn, build_id, data)
    log.info("Created Build with ID: %s", build_id)
    return find_by_id(conn, build_id)


def update(conn: Connection, build_id: int, data: BuildInput) -> dict:
    if find_by_id(conn, build_id) is None:
        raise not_found(BUILD, WITH_ID, build_id)
    data = _validate(data, require_file=False)

    clash = conn.execute(
        text("SELECT id FROM builds WHERE name = :name"), {"name": data.name}
    ).scalar_one_or_none()
    if clash is not None and clash != build_id:
        raise already_exists(BUILD, data.name)

    sets = ["name = :name", "description = :description"]
    params = {"name": data.name, "description": data.description, "bid": build_id}
    # keep the stored schematic unless a new non-empty one was sent
    if data.schem_file:
        sets.append("schem_file = :schem")
        params["schem"] = data.schem_file
    conn.execute(text(f"UPDATE builds SET {', '.join(sets)} WHERE id = :bid"), params)
    _link(conn, build_id, data)
    log.info("Updated Build with ID: %s", build_id)
    return find_by_id(conn, build_id)


def delete(conn: Connection, build_id: int) -> dict:
    build = find_by_id(conn, build_id)
    if build is None:
        raise not_found(BUILD, WITH_ID, build_id)
    # explicit child deletes; SQLite does not enforce ON DELETE CASCADE by default
    for _key, kind in _RELATIONS:
        conn.execute(text(f"DELETE FROM {kind.link_table} WHERE build_id = :bid"), {"bid": build_id})
    conn.execute(text("DELETE FROM build_screenshots WHERE build_id = :bid"), {"bid": build_id})
    conn.execute(text("DELETE FROM builds WHERE id = :bid"), {"bid": build_id})
    log.info("Deleted Build with ID: %s", build_id)
    return {"id": build_id, "name": build["name"]}
