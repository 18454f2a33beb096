"""
Shared request helpers and field validators for API endpoints.

Multipart forms deliver every value as a string, so the validators here accept
both JSON-typed values and their string renditions.
"""

import json
from typing import Any, Optional

from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from core.constants import MAX_STRING_LENGTH
from utils.datetime_utils import parse_datetime_value


def blank_to_none(v: Any) -> Any:
    """Treat empty strings (and the literal 'null'/'undefined' from forms) as missing."""
    if isinstance(v, str) and v.strip() in ("", "null", "undefined"):
        return None
    return v


def parse_datetime_field(v: Any) -> Any:
    """Parse ISO datetimes and YYYY-MM-DD dates into naive local datetimes."""
    return parse_datetime_value(blank_to_none(v))


def parse_json_field(v: Any) -> Any:
    """Decode JSON-looking strings (form submissions of list/object fields)."""
    v = blank_to_none(v)
    if isinstance(v, str) and v.strip()[:1] in ("[", "{"):
        try:
            return json.loads(v)
        except json.JSONDecodeError:
            raise ValueError("Invalid JSON value")
    return v


def validate_required_text(v: Any) -> Any:
    """Trim and require a non-empty string of bounded length."""
    if v is None:
        return v
    v = str(v).strip()
    if not v:
        raise ValueError("Field cannot be empty")
    if len(v) > MAX_STRING_LENGTH:
        raise ValueError("Field is too long")
    return v


def validate_optional_text(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    return str(v).strip()


def validate_body(model: type[BaseModel], data: dict[str, Any]) -> Any:
    """
    Validate a form or JSON body against a request model.

    Raises:
        RequestValidationError: With the pydantic errors, so form bodies
            produce the same 400 response as JSON bodies
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RequestValidationError(e.errors())
