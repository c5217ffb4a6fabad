# mcbuildlib/routes/common.py
from flask import request

from ..services.errors import (
    BODY_MALFORMED, BODY_NOT_OBJECT, BadRequest, INVALID_QUERY_PARAMETER_TEMPLATE, ValidationFailed,
)


def check_query_params(allowed: set) -> None:
    for param in request.args.keys():
        if param not in allowed:
            raise BadRequest(INVALID_QUERY_PARAMETER_TEMPLATE.format(
                param=param, allowed=", ".join(sorted(allowed)),
            ))


def json_object() -> dict:
    """
    The request body as a dict. An empty body reads as {}; a body that is
    not valid JSON, or is JSON but not an object, is a validation failure.
    """
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(silent=True)
    if data is None:
        raise ValidationFailed({"body": BODY_MALFORMED})
    if not isinstance(data, dict):
        raise ValidationFailed({"body": BODY_NOT_OBJECT})
    return data
