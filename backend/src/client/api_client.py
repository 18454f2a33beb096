"""
HTTP client for the case log API with cached reads.

Reads go through a :class:`QueryCache`; every successful mutation invalidates
the resource families it affects so the next read refetches. Case writes also
touch patient records (the patient upsert), so they invalidate both
``/api/cases`` and ``/api/patients``.
"""

import json
import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import httpx

from client.query_cache import QueryCache, make_key

logger = logging.getLogger(__name__)

CASES = "/api/cases"
PATIENTS = "/api/patients"
SURGEONS = "/api/surgeons"
PROCEDURES = "/api/procedures"
TEMPLATES = "/api/case-templates"
PREFERENCES = "/api/user-preferences"
CURRENT_USER = "/api/auth/user"
ADMIN = "/api/admin"

CASE_FAMILIES = (CASES, PATIENTS, ADMIN)


class ApiError(Exception):
    """Non-2xx response from the API."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AuthenticationRequired(ApiError):
    """The session is missing or expired; the user must log in again."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(401, message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict):
        return str(body.get("message") or body.get("detail") or response.reason_phrase)
    return response.reason_phrase


class CaseLogClient:
    """
    Cached API client.

    Args:
        http: A configured ``httpx.Client`` (base URL and session cookie or
            bearer header already set)
        cache: Optional shared cache; a fresh one is created otherwise
    """

    def __init__(self, http: httpx.Client, cache: Optional[QueryCache] = None) -> None:
        self.http = http
        self.cache = cache if cache is not None else QueryCache()

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        response = self.http.request(method, path, **kwargs)
        if response.status_code == 401:
            raise AuthenticationRequired(_error_message(response))
        if response.status_code >= 400:
            raise ApiError(response.status_code, _error_message(response))
        return response

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, path: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Cached GET; the first read fetches, repeat reads reuse the result."""
        clean = {k: v for k, v in (params or {}).items() if v is not None}
        return self.cache.get_or_fetch(
            make_key(path, clean),
            lambda: self._decode(self._send("GET", path, params=clean)),
        )

    def mutate(self, method: str, path: str, invalidates: Iterable[str], **kwargs: Any) -> Any:
        """Send a write request and, on success, invalidate the given path prefixes."""
        result = self._decode(self._send(method, path, **kwargs))
        self.cache.invalidate(invalidates)
        return result

    # Current user

    def current_user(self) -> Dict[str, Any]:
        return self.get(CURRENT_USER)

    def update_profile(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("PATCH", CURRENT_USER, [CURRENT_USER, ADMIN], json=data)

    def update_theme(self, theme: str) -> Dict[str, Any]:
        return self.mutate("PATCH", "/api/auth/theme", [CURRENT_USER], json={"theme": theme})

    # Cases

    def list_cases(self, **params: Any) -> Any:
        return self.get(CASES, params)

    def get_case(self, case_id: int) -> Dict[str, Any]:
        return self.get(f"{CASES}/{case_id}")

    def case_stats(self) -> Dict[str, Any]:
        return self.get(f"{CASES}/stats")

    def case_analytics(self, start_date: Optional[str] = None, end_date: Optional[str] = None) -> Dict[str, Any]:
        return self.get(f"{CASES}/analytics", {"startDate": start_date, "endDate": end_date})

    def create_case(
        self,
        data: Dict[str, Any],
        photo: Optional[Tuple[str, bytes, str]] = None,
    ) -> Dict[str, Any]:
        """
        Create a case. With ``photo`` as ``(filename, content, mime_type)`` the
        case is sent as a multipart form with the image under ``casePhoto``.
        """
        if photo is None:
            return self.mutate("POST", CASES, CASE_FAMILIES, json=data)

        form = {
            key: json.dumps(value) if isinstance(value, (dict, list, bool)) else str(value)
            for key, value in data.items()
            if value is not None
        }
        return self.mutate("POST", CASES, CASE_FAMILIES, data=form, files={"casePhoto": photo})

    def update_case(self, case_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("PATCH", f"{CASES}/{case_id}", CASE_FAMILIES, json=data)

    def complete_case(self, case_id: int) -> Dict[str, Any]:
        return self.mutate("PATCH", f"{CASES}/{case_id}/complete", CASE_FAMILIES)

    def delete_case(self, case_id: int) -> None:
        self.mutate("DELETE", f"{CASES}/{case_id}", CASE_FAMILIES)

    def list_case_photos(self, case_id: int) -> Any:
        return self.get(f"{CASES}/{case_id}/photos")

    def upload_case_photo(
        self,
        case_id: int,
        photo: Tuple[str, bytes, str],
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        data = {"description": description} if description else None
        return self.mutate(
            "POST", f"{CASES}/{case_id}/photos", [CASES], data=data, files={"casePhoto": photo}
        )

    def delete_case_photo(self, case_id: int, photo_id: int) -> None:
        self.mutate("DELETE", f"{CASES}/{case_id}/photos/{photo_id}", [CASES])

    # Patients

    def list_patients(self, search: Optional[str] = None, limit: Optional[int] = None) -> Any:
        return self.get(PATIENTS, {"search": search, "limit": limit})

    def get_patient(self, patient_id: str) -> Dict[str, Any]:
        return self.get(f"{PATIENTS}/{patient_id}")

    def create_patient(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("POST", PATIENTS, [PATIENTS], json=data)

    def update_patient(self, patient_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("PATCH", f"{PATIENTS}/{patient_id}", [PATIENTS], json=data)

    def delete_patient(self, patient_id: str) -> None:
        self.mutate("DELETE", f"{PATIENTS}/{patient_id}", [PATIENTS])

    # Surgeons and procedures

    def list_surgeons(self) -> Any:
        return self.get(SURGEONS)

    def create_surgeon(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("POST", SURGEONS, [SURGEONS], json=data)

    def update_surgeon(self, surgeon_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("PATCH", f"{SURGEONS}/{surgeon_id}", [SURGEONS], json=data)

    def delete_surgeon(self, surgeon_id: int) -> None:
        self.mutate("DELETE", f"{SURGEONS}/{surgeon_id}", [SURGEONS])

    def list_procedures(self, limit: Optional[int] = None) -> Any:
        return self.get(PROCEDURES, {"limit": limit})

    def create_procedure(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("POST", PROCEDURES, [PROCEDURES], json=data)

    # Templates and preferences

    def list_templates(self) -> Any:
        return self.get(TEMPLATES)

    def create_template(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("POST", TEMPLATES, [TEMPLATES], json=data)

    def delete_template(self, template_id: int) -> None:
        self.mutate("DELETE", f"{TEMPLATES}/{template_id}", [TEMPLATES])

    def get_preferences(self) -> Dict[str, Any]:
        return self.get(PREFERENCES)

    def save_preferences(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.mutate("PUT", PREFERENCES, [PREFERENCES], json=data)

    # Export

    def export(self, export_format: str, report_type: str, **options: Any) -> bytes:
        """Download an export; never cached."""
        body = {"format": export_format, "type": report_type, **options}
        return self._send("POST", "/api/export", json=body).content
