"""
Typed client for the HealthTrack REST API, used by the portal views.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable
from urllib.parse import quote

import requests
from django.conf import settings

logger = logging.getLogger('healthtrack.portal')


class APIError(Exception):
    """
    Raised for any non-2xx response. ``status_code`` is 0 when the API could
    not be reached at all.
    """

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.payload = payload


def _segment(value: Any) -> str:
    return quote(str(value), safe='')


class HealthTrackAPI:
    """Thin wrapper over the /api endpoints; returns decoded JSON."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error("HealthTrack API request %s %s failed: %s", method, url, exc)
            raise APIError(0, f"Could not reach the HealthTrack API: {exc}") from exc

        if response.status_code == 204:
            return None
        try:
            payload = response.json() if response.content else None
        except ValueError:
            payload = None

        if not 200 <= response.status_code < 300:
            message = None
            if isinstance(payload, dict):
                message = payload.get('error')
            message = message or f"HealthTrack API responded with HTTP {response.status_code}"
            logger.info("HealthTrack API %s %s -> %s: %s", method, path, response.status_code, message)
            raise APIError(response.status_code, message, payload)
        return payload

    # Programs

    def get_programs(self) -> list[dict[str, Any]]:
        return self._request('GET', '/programs')

    def get_program(self, program_id: Any) -> dict[str, Any]:
        return self._request('GET', f"/programs/{_segment(program_id)}")

    def create_program(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request('POST', '/programs', json=data)

    def update_program(self, program_id: Any, data: dict[str, Any]) -> dict[str, Any]:
        return self._request('PUT', f"/programs/{_segment(program_id)}", json=data)

    def delete_program(self, program_id: Any) -> None:
        return self._request('DELETE', f"/programs/{_segment(program_id)}")

    # Clients

    def get_clients(self) -> list[dict[str, Any]]:
        return self._request('GET', '/clients')

    def get_client(self, client_id: Any) -> dict[str, Any]:
        return self._request('GET', f"/clients/{_segment(client_id)}")

    def search_clients(self, name: str) -> list[dict[str, Any]]:
        return self._request('GET', '/clients/search', params={'name': name})

    def create_client(self, data: dict[str, Any]) -> dict[str, Any]:
        return self._request('POST', '/clients', json=data)

    def update_client(self, client_id: Any, data: dict[str, Any]) -> dict[str, Any]:
        return self._request('PUT', f"/clients/{_segment(client_id)}", json=data)

    def delete_client(self, client_id: Any) -> None:
        return self._request('DELETE', f"/clients/{_segment(client_id)}")

    # Enrollments

    def get_enrollments(self) -> list[dict[str, Any]]:
        return self._request('GET', '/enrollments')

    def create_enrollment(self, client_id: Any, program_id: Any) -> dict[str, Any]:
        return self._request(
            'POST', '/enrollments', json={'clientId': str(client_id), 'programId': str(program_id)}
        )

    def create_bulk_enrollments(self, client_id: Any, program_ids: Iterable[Any]) -> list[dict[str, Any]]:
        return self._request(
            'POST',
            '/enrollments/bulk',
            json={'clientId': str(client_id), 'programIds': [str(pid) for pid in program_ids]},
        )

    def delete_enrollment(self, enrollment_id: Any) -> None:
        return self._request('DELETE', f"/enrollments/{_segment(enrollment_id)}")

    def remove_client_from_program(self, client_id: Any, program_id: Any) -> None:
        return self._request(
            'DELETE',
            f"/enrollments/client/{_segment(client_id)}/program/{_segment(program_id)}",
        )


def get_api() -> HealthTrackAPI:
    """Build a client from the HEALTHTRACK_API_* settings."""
    return HealthTrackAPI(settings.HEALTHTRACK_API_URL, timeout=settings.HEALTHTRACK_API_TIMEOUT)
