# mcbuildlib/services/validation.py
"""
Name validation as an ordered pipeline of pure predicates.

A rule is ``(predicate, message)``. For a single field the rules run in
order and stop at the first failure; across fields every failure is
collected, so one response reports all bad fields at once.
"""
from __future__ import annotations
import re
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Tuple

from .errors import ValidationFailed

Rule = Tuple[Callable[[Any], bool], str]

NAME_MIN_LENGTH = 2

NAME_NOT_STRING = "Name must be a string"
NAME_NOT_BLANK = "Name cannot be blank"
NAME_SIZE = f"Name must be at least {NAME_MIN_LENGTH} characters"
NAME_NOT_ONLY_NUMERIC = "Name cannot consist only of numbers"

_PURELY_NUMERIC = re.compile(r"^\d+$")


# ---------- predicates ----------
def is_text(value: Any) -> bool:
    # None is left to is_not_blank so it reports "blank", not "not a string"
    return value is None or isinstance(value, str)


def is_not_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def min_length(n: int) -> Callable[[Any], bool]:
    def _check(value: Any) -> bool:
        return len(value.strip()) >= n
    return _check


def length_between(lo: int, hi: int) -> Callable[[Any], bool]:
    def _check(value: Any) -> bool:
        return lo <= len(value) <= hi
    return _check


def is_not_purely_numeric(value: Any) -> bool:
    return not _PURELY_NUMERIC.fullmatch(value.strip())


NAME_RULES: Tuple[Rule, ...] = (
    (is_text, NAME_NOT_STRING),
    (is_not_blank, NAME_NOT_BLANK),
    (min_length(NAME_MIN_LENGTH), NAME_SIZE),
    (is_not_purely_numeric, NAME_NOT_ONLY_NUMERIC),
)

BUILD_NAME_MIN_LENGTH = 3

BUILD_NAME_RULES: Tuple[Rule, ...] = (
    (is_text, NAME_NOT_STRING),
    (is_not_blank, NAME_NOT_BLANK),
    (min_length(BUILD_NAME_MIN_LENGTH), f"Name must be at least {BUILD_NAME_MIN_LENGTH} characters"),
    (is_not_purely_numeric, NAME_NOT_ONLY_NUMERIC),
)


# ---------- pipeline ----------
def first_failure(value: Any, rules: Iterable[Rule] = NAME_RULES) -> Optional[str]:
    for predicate, message in rules:
        if not predicate(value):
            return message
    return None


def collect_errors(fields: Mapping[str, Any], rules: Iterable[Rule] = NAME_RULES) -> Dict[str, str]:
    rules = tuple(rules)
    errors: Dict[str, str] = {}
    for field, value in fields.items():
        message = first_failure(value, rules)
        if message is not None:
            errors[field] = message
    return errors


def require_valid(fields: Mapping[str, Any], rules: Iterable[Rule] = NAME_RULES) -> None:
    errors = collect_errors(fields, rules)
    if errors:
        raise ValidationFailed(errors)


def validate_name(value: Any, field: str = "name") -> str:
    """Validate one catalog name and return it stripped."""
    require_valid({field: value})
    return value.strip()
