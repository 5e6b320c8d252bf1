from __future__ import annotations


class ReportError(Exception):
    """Base class for failures surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class MalformedAttachment(ReportError):
    status_code = 400


class InvalidField(ReportError):
    status_code = 400

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field


class InvalidStatus(ReportError):
    status_code = 400


class NotFound(ReportError):
    status_code = 404


class StorageFailure(ReportError):
    status_code = 500
