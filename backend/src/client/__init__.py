"""Python client for the case log API."""

from .api_client import ApiError, AuthenticationRequired, CaseLogClient
from .query_cache import QueryCache, make_key

__all__ = [
    "ApiError",
    "AuthenticationRequired",
    "CaseLogClient",
    "QueryCache",
    "make_key",
]
