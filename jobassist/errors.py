"""Error kinds surfaced by the analysis functions.

Every failure a handler reports is an ``AnalysisError`` (or is wrapped into
the envelope as one). ``kind`` is what callers see in the error envelope,
``retryable`` tells the retry loop whether another attempt makes sense.
"""

from typing import Optional


class AnalysisError(Exception):
    """
    Base class for failures reported through the error envelope.

    Attributes:
        message: Human readable error description
        kind: Stable error kind name reported to callers
        status: HTTP status used for the response
        retryable: Whether the retry loop may attempt the operation again
    """

    kind = "AnalysisError"
    status = 400
    retryable = True

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingParameter(AnalysisError):
    """A required request field is absent or empty."""

    kind = "MissingParameter"
    retryable = False

    def __init__(self, field: str, message: str = "Missing required parameters"):
        self.field = field
        super().__init__(message)

    def __str__(self):
        return f"{self.message}: {self.field}"


class ConfigurationError(AnalysisError):
    kind = "ConfigurationError"
    retryable = False


class UpstreamCallFailure(AnalysisError):
    """The LLM provider call failed (network, rate limit, provider error)."""

    kind = "UpstreamCallFailure"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class UnexpectedResponseShape(AnalysisError):
    """The LLM answered, but not with the content we asked for."""

    kind = "UnexpectedResponseShape"
    retryable = False

    def __init__(self, message: str, content: Optional[str] = None):
        self.content = content
        super().__init__(message)


class RequestTimeout(AnalysisError):
    kind = "RequestTimeout"
    retryable = False


class RequestRejected(AnalysisError):
    """The web layer refused the request (rate limit, wrong method, body too large)."""

    retryable = False

    def __init__(self, message: str, status: int, kind: str):
        self.status = status
        self.kind = kind
        super().__init__(message)

    @classmethod
    def from_http(cls, error) -> "RequestRejected":
        # werkzeug HTTPException: "Too Many Requests" -> "TooManyRequests"
        name = error.name or "Request Rejected"
        return cls(error.description or name, error.code or 400, "".join(name.split()))


def is_retryable(error: BaseException) -> bool:
    """Errors outside the taxonomy are retried blindly."""
    if isinstance(error, AnalysisError):
        return error.retryable
    return True
