class ScanError(Exception):
    pass


class ValidationError(ScanError):
    """Caller input fails a precondition. Never retried."""


class UpstreamError(ScanError):
    """Upstream unreachable or returned an unusable payload."""


class FetchError(UpstreamError):
    """All fetch attempts failed. ``last_error`` is the final underlying failure."""

    def __init__(self, message: str, *, attempts: int, last_error: BaseException | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class ScanCancelledError(ScanError):
    pass
