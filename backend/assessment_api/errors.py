"""Domain errors raised by services and the pure kernels.

Each error carries the HTTP status it maps to; `main` renders them as
`{"detail": ..., "field": ...}` JSON bodies.
"""

from typing import Optional


class AssessmentError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(AssessmentError):
    """Unknown assessment or response id."""
    status_code = 404


class ValidationError(AssessmentError, ValueError):
    """Malformed import, answer-count mismatch or out-of-range index.

    `field` names the offending field, e.g. `questions[2].options`.
    """
    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class PersistenceError(AssessmentError):
    """The database rejected or failed a read/write."""
    status_code = 500
