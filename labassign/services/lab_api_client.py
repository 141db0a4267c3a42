# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Lab-management backend client — inter-service communication.
Wraps the REST API used to read labs/users and write lab memberships.
"""

from typing import Any, Optional

import httpx

from labassign.core.config import settings
from labassign.core.logging import get_logger
from labassign.metrics import BACKEND_REQUEST_LATENCY
from labassign.models.domain import ROLE_CODES, STATUS_CODES
from labassign.services.normalization import unwrap_collection, unwrap_record

logger = get_logger(__name__)


class LabApiError(Exception):
    """The lab-management backend rejected a call or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LabApiClient:
    """Synchronous client for the lab-management REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._base_url = (base_url or settings.LAB_API_URL).rstrip("/")
        self._token = token if token is not None else settings.LAB_API_TOKEN
        self._timeout = timeout or settings.LAB_API_TIMEOUT

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        url = f"{self._base_url}{path}"
        try:
            with BACKEND_REQUEST_LATENCY.labels(method=method).time():
                with httpx.Client(timeout=self._timeout) as client:
                    resp = client.request(method, url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.warning("Lab backend unreachable: %s %s: %s", method, path, exc)
            raise LabApiError(f"{method} {path} failed: {exc}") from exc

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            data = {"raw": resp.text}

        if resp.status_code >= 400:
            logger.warning(
                "Lab backend returned %d for %s %s", resp.status_code, method, path,
            )
            raise LabApiError(
                f"API error ({resp.status_code}) on {method} {path}: {str(data)[:200]}",
                status_code=resp.status_code,
            )
        return data

    # ── Reads ──

    def ping(self) -> None:
        """Raise LabApiError unless the backend answers an authenticated GET."""
        self._request("GET", settings.LAB_API_PING_PATH)

    def list_labs(self) -> list[dict[str, Any]]:
        return unwrap_collection(self._request("GET", "/api/labs"))

    def list_users(self) -> list[dict[str, Any]]:
        return unwrap_collection(self._request("GET", "/api/users"))

    def list_lab_members(self, lab_id: str) -> list[dict[str, Any]]:
        return unwrap_collection(self._request("GET", f"/api/labs/{lab_id}/members"))

    # ── Writes ──

    def add_member(self, lab_id: str, user_id: str) -> dict[str, Any]:
        """Create a membership and return the created record."""
        return unwrap_record(
            self._request("POST", f"/api/labs/{lab_id}/members", {"UserId": user_id})
        )

    def update_member(self, lab_id: str, member_id: str, role: str, status: str) -> dict[str, Any]:
        """Set role and status of an existing membership."""
        payload = {"Role": ROLE_CODES[role], "Status": STATUS_CODES[status]}
        return unwrap_record(
            self._request("PATCH", f"/api/labs/{lab_id}/members/{member_id}", payload)
        )
