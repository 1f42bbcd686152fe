"""Canonical input error type for the planning engine.

Every contract violation on the public entry points raises
:class:`InvalidInputError`.  It is never retried or swallowed internally.

Standard error codes:
- EMPTY_GOALS: ``goals`` is missing, not a sequence, or empty
- MALFORMED_GOALS: a goal entry failed validation
- INVALID_SESSION_PLAN: ``session_plan`` is not a sequence or holds an invalid session
- INVALID_TIME_FRAME: the periodization time frame is too short for three blocks
"""


class InvalidInputError(ValueError):
    """Raised when a caller passes malformed input.

    Attributes:
        code: Error code (e.g. "EMPTY_GOALS", "INVALID_SESSION_PLAN")
        details: List of error detail strings
    """

    def __init__(self, code: str, details: list[str]):
        self.code = code
        self.details = details
        super().__init__(f"{code}: {details}")
