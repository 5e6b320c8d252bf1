from __future__ import annotations

import logging
import uuid
from typing import Any

from pydantic import ValidationError

from ..errors import InvalidStatus, NotFound, StorageFailure
from ..models.report import Report, ReportDraft, ReportStatus, now_utc
from .record_store import RecordStore

logger = logging.getLogger(__name__)


def parse_status(value: Any) -> ReportStatus:
    try:
        return ReportStatus(value)
    except (TypeError, ValueError):
        raise InvalidStatus("Invalid status") from None


class ReportStore:
    def __init__(self, records: RecordStore):
        self.records = records

    def create(self, draft: ReportDraft) -> str:
        report_id = str(uuid.uuid4())
        report = Report(
            id=report_id,
            created_at=now_utc(),
            status=ReportStatus.pending,
            **draft.model_dump(),
        )
        self.records.create(report_id, report.model_dump(mode="json", by_alias=True))
        logger.info("created report %s (%s)", report_id, report.license_plate)
        return report_id

    def list_all(self) -> list[Report]:
        reports: list[Report] = []
        for raw in self.records.list():
            try:
                reports.append(Report.model_validate(raw))
            except ValidationError:
                logger.warning("skipping invalid report record %r", raw.get("id"))
        return reports

    def get_by_id(self, report_id: str) -> Report:
        if not self.records.exists(report_id):
            raise NotFound("Report not found")
        return self._validate(report_id, self.records.get(report_id))

    def update_status(self, report_id: str, new_status: Any) -> Report:
        status = parse_status(new_status)
        if not self.records.exists(report_id):
            raise NotFound("Report not found")
        changes = {"status": status.value}
        # Checked before writing so a rejected record stays untouched on disk.
        report = self._validate(report_id, {**self.records.get(report_id), **changes})
        self.records.update(report_id, changes)
        logger.info("report %s status -> %s", report_id, status.value)
        return report

    def _validate(self, report_id: str, raw: dict[str, Any]) -> Report:
        try:
            return Report.model_validate(raw)
        except ValidationError as exc:
            logger.error("stored report %s is invalid: %s", report_id, exc)
            raise StorageFailure("Error reading report") from exc
