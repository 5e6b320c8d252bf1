from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from ..models.settings import DEFAULT_MAX_BODY_MB, StorageSettings
from ..storage.attachments import AttachmentStore
from ..storage.record_store import JsonDirectoryStore
from ..storage.report_store import ReportStore

logger = logging.getLogger(__name__)

# Default storage and storage_config.json live in the backend directory.
_APP_DIR = Path(__file__).resolve().parents[2]

_ENV_OVERRIDES = {
    "reports_dir": "FAULT_REPORTS_DIR",
    "uploads_dir": "FAULT_UPLOADS_DIR",
    "uploads_url_prefix": "FAULT_UPLOADS_URL_PREFIX",
}


def _default_settings_payload(app_dir: Path) -> dict:
    return {
        "reports_dir": str(app_dir / "reports"),
        "uploads_dir": str(app_dir / "uploads"),
        "uploads_url_prefix": "/uploads",
        "max_body_bytes": DEFAULT_MAX_BODY_MB * 1024 * 1024,
    }


def _read_config_file(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        obj = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        logger.warning("ignoring unreadable storage config %s", path)
        return {}
    if not isinstance(obj, dict):
        return {}
    return obj


def load_storage_settings(
    app_dir: Path | None = None,
    environ: dict[str, str] | None = None,
) -> StorageSettings:
    base = app_dir or _APP_DIR
    env = os.environ if environ is None else environ
    defaults = _default_settings_payload(base)

    payload = dict(defaults)
    file_values = _read_config_file(base / "storage_config.json")
    payload.update({k: v for k, v in file_values.items() if k in defaults and v not in (None, "")})

    for field, var in _ENV_OVERRIDES.items():
        value = env.get(var, "").strip()
        if value:
            payload[field] = value
    max_mb = env.get("FAULT_MAX_BODY_MB", "").strip()
    if max_mb:
        try:
            payload["max_body_bytes"] = int(float(max_mb) * 1024 * 1024)
        except ValueError:
            logger.warning("ignoring invalid FAULT_MAX_BODY_MB=%r", max_mb)

    try:
        return StorageSettings.model_validate(payload)
    except ValidationError:
        logger.warning("invalid storage settings, falling back to defaults")
        return StorageSettings.model_validate(defaults)


_settings = load_storage_settings()
_report_store = ReportStore(JsonDirectoryStore(_settings.reports_dir))
_attachment_store = AttachmentStore(_settings.uploads_dir, _settings.uploads_url_prefix)


def get_settings() -> StorageSettings:
    return _settings


def get_report_store() -> ReportStore:
    return _report_store


def get_attachment_store() -> AttachmentStore:
    return _attachment_store
