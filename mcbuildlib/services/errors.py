"""
Exceptions raised by the service layer.

Each carries the HTTP status and the short ``error`` code the API returns;
``create_app`` registers a handler that turns them into JSON.
"""
from __future__ import annotations
from typing import Dict, Optional

VALIDATION_FAILED_MESSAGE = "Validation failed"
BODY_NOT_OBJECT = "Request body must be a JSON object"
BODY_MALFORMED = "Malformed JSON request body"

# ---- message templates ----
NOT_FOUND_TEMPLATE = "{kind} {ident} '{value}' not found"
ALREADY_EXISTS_TEMPLATE = "A {kind} {ident} '{value}' already exists. Please choose a unique name."
IN_USE_TEMPLATE = "Cannot delete {kind} '{name}' because it is associated with {count} build(s)."
INVALID_QUERY_PARAMETER_TEMPLATE = (
    "Invalid query parameter '{param}' detected. Allowed parameters for this endpoint are: {allowed}."
)

WITH_ID = "with ID"
WITH_NAME = "with name"


class CatalogError(Exception):
    status = 400
    code = "bad_request"

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class BadRequest(CatalogError):
    pass


class ValidationFailed(CatalogError):
    code = "validation_failed"

    def __init__(self, details: Dict[str, str], message: str = VALIDATION_FAILED_MESSAGE):
        super().__init__(message, details)


class NotFound(CatalogError):
    status = 404
    code = "not_found"


class Conflict(CatalogError):
    status = 409
    code = "conflict"


def not_found(kind: str, ident: str, value) -> NotFound:
    return NotFound(NOT_FOUND_TEMPLATE.format(kind=kind, ident=ident, value=value))


def already_exists(kind: str, name: str) -> Conflict:
    return Conflict(ALREADY_EXISTS_TEMPLATE.format(kind=kind, ident=WITH_NAME, value=name))
