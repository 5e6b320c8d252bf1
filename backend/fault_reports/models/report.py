from __future__ import annotations

from datetime import datetime, UTC
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def now_utc() -> datetime:
    return datetime.now(UTC)


class ReportStatus(str, Enum):
    pending = "pending"
    attended = "attended"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportSubmission(_CamelModel):
    """Validated client submission; attachments are still data URIs here."""

    owner_name: str
    phone_number: str
    license_plate: str
    fault_description: str
    location: Any = None
    photos: list[Any] = Field(default_factory=list)
    owner_signature: str
    technician_signature: str


class ReportDraft(_CamelModel):
    """A submission whose attachments have been written to disk."""

    owner_name: str
    phone_number: str
    license_plate: str
    fault_description: str
    location: Any = None
    photos: list[str] = Field(default_factory=list)
    owner_signature: str
    technician_signature: str


class Report(_CamelModel):
    """A stored report as read back from disk.

    Older records may hold numbers in text fields, lack ``createdAt`` or
    carry keys this model does not know; they are read as-is.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    owner_name: str | None = None
    phone_number: str | None = None
    license_plate: str | None = None
    fault_description: str | None = None
    location: Any = None
    photos: list[Any] = Field(default_factory=list)
    owner_signature: str | None = None
    technician_signature: str | None = None
    created_at: datetime | str | None = None
    status: ReportStatus = ReportStatus.pending

    @field_validator(
        "id",
        "owner_name",
        "phone_number",
        "license_plate",
        "fault_description",
        "owner_signature",
        "technician_signature",
        mode="before",
    )
    @classmethod
    def _scalar_to_str(cls, value):
        if isinstance(value, (bool, int, float)):
            return str(value)
        return value

    @field_validator("photos", mode="before")
    @classmethod
    def _photos_list(cls, value):
        return value if isinstance(value, list) else []

    @field_validator("status", mode="before")
    @classmethod
    def _default_status(cls, value):
        # Records written before status tracking existed carry no status.
        return value or ReportStatus.pending


class ReportCreateResponse(_CamelModel):
    report_id: str


class ReportStatusUpdateRequest(BaseModel):
    status: Any = None
