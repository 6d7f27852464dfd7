"""Error taxonomy shared by the services and the HTTP layer.

Every error carries a short user-facing message. The HTTP layer renders all
of them as ``400 {"error": message}``.
"""

from __future__ import annotations

from typing import Optional


class EnemError(Exception):
    """Base class for every expected failure of a request."""

    error_code: str = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(EnemError):
    """Missing or malformed input, detected before any external call."""

    error_code = "VALIDATION_ERROR"


class QuotaExceededError(EnemError):
    """A free-plan user reached the limit for the current window."""

    error_code = "QUOTA_EXCEEDED"

    def __init__(
        self,
        message: str,
        *,
        activity: str,
        plan: str,
        used: int,
        limit: int,
    ):
        super().__init__(message)
        self.activity = activity
        self.plan = plan
        self.used = used
        self.limit = limit


class UpstreamError(EnemError):
    """The completion endpoint failed or returned a non-success status."""

    error_code = "UPSTREAM_ERROR"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(UpstreamError):
    """The completion endpoint cannot be called because credentials are missing."""

    error_code = "CONFIGURATION_ERROR"


class ParseError(EnemError):
    """The completion reply did not match the expected grading format."""

    error_code = "PARSE_ERROR"


class PersistenceError(EnemError):
    """A datastore write failed."""

    error_code = "PERSISTENCE_ERROR"


class NoQuestionsError(EnemError):
    error_code = "NO_QUESTIONS"


class SessionStateError(EnemError):
    """The exam session is not in a state that accepts the operation."""

    error_code = "INVALID_SESSION_STATE"


class UnansweredQuestionError(EnemError):
    error_code = "QUESTION_NOT_ANSWERED"
