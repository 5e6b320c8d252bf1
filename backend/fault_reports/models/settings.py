from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_MAX_BODY_MB = 20


class StorageSettings(BaseModel):
    reports_dir: Path
    uploads_dir: Path
    uploads_url_prefix: str = "/uploads"
    max_body_bytes: int = Field(default=DEFAULT_MAX_BODY_MB * 1024 * 1024, gt=0)

    @field_validator("reports_dir", "uploads_dir", mode="after")
    @classmethod
    def _resolve_dir(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @field_validator("uploads_url_prefix", mode="before")
    @classmethod
    def _normalize_prefix(cls, value):
        text = str(value or "").strip().strip("/")
        if not text:
            return "/uploads"
        return f"/{text}"
