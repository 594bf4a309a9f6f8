from __future__ import annotations

from typing import Optional


class NewswireError(RuntimeError):
    pass


class UpstreamError(NewswireError):
    """A third-party HTTP backend answered with an error or an unusable body."""

    def __init__(self, message: str, *, status_code: Optional[int] = None, detail: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class SourceFetchError(NewswireError):
    """One feed could not be retrieved or parsed. Absorbed by the aggregator."""

    def __init__(self, source_name: str, message: str):
        super().__init__(f"{source_name}: {message}")
        self.source_name = source_name


class AggregateFetchError(NewswireError):
    pass


class NotFoundError(NewswireError):
    pass


class EnrichmentError(NewswireError):
    pass


class SearchBridgeError(NewswireError):
    pass
