from __future__ import annotations

from typing import List, Optional


class NoticePackError(Exception):
    """Base error carrying the HTTP status the API layer should answer with."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(NoticePackError):
    status_code = 500


class AuthenticationError(NoticePackError):
    status_code = 401


class NotFoundError(NoticePackError):
    status_code = 404


class RenderError(NoticePackError):
    status_code = 500

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class DraftValidationError(NoticePackError):
    status_code = 422

    def __init__(self, missing: List[str]) -> None:
        super().__init__("Missing required fields: " + ", ".join(missing))
        self.missing = list(missing)
