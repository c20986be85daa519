from __future__ import annotations


class ErrorResponse(Exception):
    """Error surfaced to the HTTP client as ``{"detail": ...}``."""

    status_code: int = 500

    def __init__(self, detail: str, status_code: int | None = None):
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class InvalidQueryError(ErrorResponse):
    """The list request (or an identifier) failed validation."""

    status_code = 400


class NotFoundError(ErrorResponse):
    status_code = 404
