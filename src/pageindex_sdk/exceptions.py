"""Custom exceptions for pageindex-sdk."""


class PageIndexError(Exception):
    """Base exception for pageindex-sdk operations."""


class PageIndexAPIError(PageIndexError):
    """Error returned by the PageIndex API, or a failed request to it."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StreamDecodeError(PageIndexError):
    """Transport failure while reading a streamed completion."""


class LLMError(PageIndexError):
    """Error from the auxiliary LLM call."""
