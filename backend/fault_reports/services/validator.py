from __future__ import annotations

from typing import Any

from ..errors import InvalidField
from ..models.report import ReportSubmission

# (field, minimum length); checked in order, first failure wins.
_TEXT_RULES: tuple[tuple[str, int], ...] = (
    ("ownerName", 2),
    ("phoneNumber", 1),
    ("licensePlate", 3),
    ("faultDescription", 10),
    ("ownerSignature", 1),
    ("technicianSignature", 1),
)


def _check_text(payload: dict[str, Any], field: str, min_length: int) -> str:
    value = payload.get(field)
    if not value:
        raise InvalidField(field, f"{field} is required")
    if not isinstance(value, str):
        raise InvalidField(field, f"{field} must be a string")
    if len(value) < min_length:
        raise InvalidField(field, f"{field} is invalid: must be at least {min_length} characters")
    return value


def validate_submission(payload: Any) -> ReportSubmission:
    if not isinstance(payload, dict):
        raise InvalidField("body", "body must be a JSON object")

    values = {field: _check_text(payload, field, min_length) for field, min_length in _TEXT_RULES}

    photos = payload.get("photos")
    if not isinstance(photos, list):
        photos = []

    return ReportSubmission(
        owner_name=values["ownerName"],
        phone_number=values["phoneNumber"],
        license_plate=values["licensePlate"],
        fault_description=values["faultDescription"],
        location=payload.get("location") or None,
        photos=photos,
        owner_signature=values["ownerSignature"],
        technician_signature=values["technicianSignature"],
    )
