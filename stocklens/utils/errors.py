"""Exception hierarchy for StockLens.

The analysis core degrades gracefully on data gaps and only raises for
structurally invalid input. Provider-side errors carry enough context for
the retry decorator to decide whether another attempt makes sense.
"""


class StockLensException(Exception):
    """Base exception for all StockLens errors."""


class InvalidSeriesError(StockLensException, ValueError):
    """Raised when a price series is structurally unusable.

    Examples: an empty series passed to the backtester, or dates that are
    not strictly increasing.
    """


class DataProviderException(StockLensException):
    """Raised when a data provider fails to deliver data."""

    def __init__(self, message: str, provider: str | None = None):
        """Initialize provider exception.

        Args:
            message: Error message
            provider: Name of the failing provider
        """
        super().__init__(message)
        self.provider = provider


class DataNotFoundError(DataProviderException):
    """Raised when a provider returns no data for a request."""


class RetryableException(StockLensException):
    """Raised for transient failures that may succeed on retry."""


class RateLimitException(RetryableException):
    """Raised when a provider rate-limits the client."""

    def __init__(self, message: str, provider: str | None = None, retry_after: float | None = None):
        """Initialize rate limit exception.

        Args:
            message: Error message
            provider: Name of the provider that rate-limited the call
            retry_after: Suggested wait in seconds, if the provider sent one
        """
        super().__init__(message)
        self.provider = provider
        self.retry_after = retry_after


def is_retryable_error(error: BaseException) -> bool:
    """Check whether an error is worth retrying.

    Args:
        error: Exception instance

    Returns:
        True if the error is transient
    """
    return isinstance(error, RetryableException)
