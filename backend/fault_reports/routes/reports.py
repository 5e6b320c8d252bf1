from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from ..errors import ReportError, StorageFailure
from ..models.report import (
    Report,
    ReportCreateResponse,
    ReportDraft,
    ReportStatusUpdateRequest,
)
from ..services.validator import validate_submission
from ..storage.attachments import AttachmentStore
from ..storage.report_store import ReportStore, parse_status
from .shared import get_attachment_store, get_report_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["reports"])

_LIST_ERROR = "Error reading reports"
_UPDATE_ERROR = "Error updating report status"


def _http_error(exc: ReportError, generic: str | None = None) -> HTTPException:
    detail = generic if isinstance(exc, StorageFailure) and generic else exc.message
    return HTTPException(status_code=exc.status_code, detail=detail)


def submit_report(payload: Any, store: ReportStore, attachments: AttachmentStore) -> str:
    submission = validate_submission(payload)

    attachments.ensure_dir()
    photos = [attachments.decode(photo, "photo") for photo in submission.photos]
    owner_signature = attachments.decode(submission.owner_signature, "ownerSign")
    technician_signature = attachments.decode(submission.technician_signature, "techSign")

    draft = ReportDraft(
        owner_name=submission.owner_name,
        phone_number=submission.phone_number,
        license_plate=submission.license_plate,
        fault_description=submission.fault_description,
        location=submission.location,
        photos=photos,
        owner_signature=owner_signature,
        technician_signature=technician_signature,
    )
    return store.create(draft)


@router.post("", response_model=ReportCreateResponse, status_code=201)
def create_report(
    payload: Any = Body(None),
    store: ReportStore = Depends(get_report_store),
    attachments: AttachmentStore = Depends(get_attachment_store),
) -> ReportCreateResponse:
    try:
        report_id = submit_report(payload, store, attachments)
    except ReportError as exc:
        logger.info("rejected report submission: %s", exc.message)
        # Every create failure is reported as a bad submission.
        raise HTTPException(status_code=400, detail=exc.message) from exc
    return ReportCreateResponse(report_id=report_id)


@router.get("", response_model=list[Report])
def list_reports(store: ReportStore = Depends(get_report_store)) -> list[Report]:
    try:
        return store.list_all()
    except ReportError as exc:
        raise _http_error(exc, _LIST_ERROR) from exc


@router.get("/{report_id}", response_model=Report)
def get_report(report_id: str, store: ReportStore = Depends(get_report_store)) -> Report:
    try:
        return store.get_by_id(report_id)
    except ReportError as exc:
        raise _http_error(exc, _LIST_ERROR) from exc


@router.put("/{report_id}/status", response_model=Report)
def update_report_status(
    report_id: str,
    req: ReportStatusUpdateRequest,
    store: ReportStore = Depends(get_report_store),
) -> Report:
    try:
        status = parse_status(req.status)
        return store.update_status(report_id, status)
    except ReportError as exc:
        raise _http_error(exc, _UPDATE_ERROR) from exc
