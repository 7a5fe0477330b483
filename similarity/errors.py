"""
Error types raised by the similarity detector.

Submission-level problems (a front end failing on one submission) are
reported through TokenizationError and never stop a run. Run-level problems
raise ExitError with an ExitCode so callers can react programmatically.
"""
from enum import Enum


class ExitCode(Enum):
    """Reasons a whole detection run is aborted."""
    BAD_PARAMETER = "bad_parameter"
    BAD_LANGUAGE = "bad_language"
    NOT_ENOUGH_SUBMISSIONS = "not_enough_submissions"
    OUT_OF_MEMORY = "out_of_memory"
    PARSE_FAILURE = "parse_failure"


class ExitError(Exception):
    """Fatal error: the run stops and no comparisons are produced."""

    def __init__(self, message: str, code: ExitCode = ExitCode.BAD_PARAMETER):
        super().__init__(message)
        self.message = message
        self.code = code


class TokenizationError(Exception):
    """A front end could not turn a submission into a token stream."""

    def __init__(self, message: str, file: str | None = None):
        super().__init__(message)
        self.file = file
