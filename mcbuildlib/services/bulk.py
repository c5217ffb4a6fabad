# mcbuildlib/services/bulk.py
"""
Bulk create-or-skip for authors, themes and colors.

The whole request is validated before anything is written. After that each
kind is reconciled on its own transaction: names already in the store are
reported as skipped, the rest are inserted and reported as created. A failure
while writing a later kind does not undo the kinds already committed.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from sqlalchemy.engine import Connection

from ..db.engine import begin_tx
from . import catalog
from .catalog import AUTHOR, COLOR, THEME, NamedKind
from .errors import BODY_NOT_OBJECT, ValidationFailed
from .validation import first_failure

log = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 1000

# request field -> kind, in the order they are processed
BULK_FIELDS: Tuple[Tuple[str, NamedKind], ...] = (
    ("authors", AUTHOR),
    ("themes", THEME),
    ("colors", COLOR),
)


@dataclass
class BulkCreationResult:
    created: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def parse_request(payload: Any, max_entries: int = DEFAULT_MAX_ENTRIES) -> Dict[str, List[str]]:
    """
    Validate a bulk body and return the stripped names per field.

    Raises ValidationFailed with every bad field (``authors[2].name`` style
    keys) so nothing is persisted for an invalid request.
    """
    if not isinstance(payload, Mapping):
        raise ValidationFailed({"body": BODY_NOT_OBJECT})

    errors: Dict[str, str] = {}
    names: Dict[str, List[str]] = {}
    for fname, kind in BULK_FIELDS:
        entries = payload.get(fname)
        if entries is None:
            names[fname] = []
            continue
        if not isinstance(entries, list):
            errors[fname] = f"{kind.label} list must be an array"
            continue
        if len(entries) > max_entries:
            errors[fname] = f"{kind.label} list cannot exceed {max_entries} entries"
            continue

        clean: List[str] = []
        for i, entry in enumerate(entries):
            key = f"{fname}[{i}].name"
            value = entry.get("name") if isinstance(entry, Mapping) else None
            message = first_failure(value)
            if message is not None:
                errors[key] = message
            else:
                clean.append(value.strip())
        names[fname] = clean

    if errors:
        raise ValidationFailed(errors)
    return names


def reconcile(conn: Connection, kind: NamedKind, names: Iterable[str]) -> BulkCreationResult:
    """Create the names missing from ``kind``; report the rest as skipped.

    Repeats within ``names`` collapse onto their first occurrence, and both
    output lists keep input order.
    """
    candidates = list(dict.fromkeys(names))
    result = BulkCreationResult()
    if not candidates:
        return result

    with begin_tx(conn):
        existing = catalog.existing_names(conn, kind, candidates)
        for name in candidates:
            if name in existing:
                result.skipped.append(name)
            else:
                catalog.insert(conn, kind, name)
                result.created.append(name)

    log.info(
        "Bulk %s creation: created %d, skipped %d",
        kind.plural, len(result.created), len(result.skipped),
    )
    return result


def bulk_create(conn: Connection, payload: Any, max_entries: int = DEFAULT_MAX_ENTRIES) -> Dict[str, List[str]]:
    names = parse_request(payload, max_entries)
    response: Dict[str, List[str]] = {}
    for fname, kind in BULK_FIELDS:
        result = reconcile(conn, kind, names[fname])
        suffix = fname.capitalize()
        response[f"created{suffix}"] = result.created
        response[f"skipped{suffix}"] = result.skipped
    return response
