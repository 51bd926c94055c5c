from __future__ import annotations


class AnalysisError(Exception):
    """Base class for failures of a single /analyze request."""

    status_code = 500
    kind = "internal"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DescriptionTooShortError(AnalysisError):
    status_code = 400
    kind = "validation"

    def __init__(self, min_words: int, actual: int):
        super().__init__(f"Amount of words in the description should be at least {min_words}")
        self.min_words = min_words
        self.actual = actual


class OutputParseError(AnalysisError):
    status_code = 422
    kind = "parse"


class UpstreamError(AnalysisError):
    status_code = 502
    kind = "upstream"


class UpstreamTimeoutError(UpstreamError):
    status_code = 504
    kind = "upstream_timeout"
