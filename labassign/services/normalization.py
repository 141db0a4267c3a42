# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Input normalization at the API boundary.

The lab-management backend answers in either lower-camel or Pascal case
(``id``/``Id``, ``fullname``/``Fullname``...) and wraps collections in a
``Data`` envelope, sometimes paginated under ``items``. Everything below the
boundary works with the typed ``Lab`` / ``LabUser`` / ``LabMembership`` models.
"""

from typing import Any, Optional

from labassign.models.domain import Lab, LabMembership, LabUser

# Numeric status codes used by the backend enums
_LAB_STATUS_CODES = {0: "active", 1: "inactive", 2: "maintenance"}
_USER_STATUS_CODES = {0: "active", 1: "inactive"}


def _pick(raw: dict[str, Any], *keys: str) -> Any:
    """Return the first present, non-empty value among ``keys``."""
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _activity(value: Any, codes: dict[int, str]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bool):
        return "active" if value else "inactive"
    if isinstance(value, int):
        return codes.get(value, "inactive")
    text = str(value).strip().lower()
    if text.isdigit():
        return codes.get(int(text), "inactive")
    return text or None


def unwrap_collection(payload: Any) -> list[dict[str, Any]]:
    """Extract the record list from a bare list or a Data/items envelope."""
    if isinstance(payload, dict):
        if "Data" in payload or "data" in payload:
            payload = payload.get("Data", payload.get("data"))
        if isinstance(payload, dict):
            payload = payload.get("items", payload.get("Items", []))
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of records, got {type(payload).__name__}")
    return payload


def unwrap_record(payload: Any) -> dict[str, Any]:
    """Extract a single record from a Data envelope."""
    if isinstance(payload, dict):
        inner = payload.get("Data", payload.get("data"))
        if isinstance(inner, dict):
            return inner
        return payload
    raise ValueError(f"Expected a record, got {type(payload).__name__}")


def normalize_lab(raw: dict[str, Any]) -> Lab:
    lab_id = _pick(raw, "id", "Id")
    if lab_id is None:
        raise ValueError(f"Lab record without id: {raw!r}")
    return Lab(
        id=str(lab_id),
        name=str(_pick(raw, "name", "Name") or ""),
        activity=_activity(_pick(raw, "status", "Status"), _LAB_STATUS_CODES),
    )


def normalize_user(raw: dict[str, Any]) -> LabUser:
    user_id = _pick(raw, "id", "Id")
    if user_id is None:
        raise ValueError(f"User record without id: {raw!r}")
    name = _pick(raw, "fullname", "Fullname", "username", "Username", "name", "Name")
    return LabUser(
        id=str(user_id),
        name=str(name or ""),
        email=str(_pick(raw, "email", "Email") or ""),
        activity=_activity(_pick(raw, "status", "Status"), _USER_STATUS_CODES),
    )


def normalize_membership(raw: dict[str, Any]) -> LabMembership:
    member_id = _pick(raw, "id", "Id")
    if member_id is None:
        raise ValueError(f"Membership record without id: {raw!r}")
    user_id = _pick(raw, "userId", "UserId")
    return LabMembership(
        id=str(member_id),
        user_id=str(user_id) if user_id is not None else None,
        name=str(_pick(raw, "fullname", "Fullname", "username", "Username") or "Unknown"),
    )


def normalize_labs(records: list[dict[str, Any]]) -> list[Lab]:
    return [normalize_lab(r) for r in records]


def normalize_users(records: list[dict[str, Any]]) -> list[LabUser]:
    return [normalize_user(r) for r in records]
