"""Yahoo Finance price series provider."""

from datetime import datetime

import yfinance as yf

from stocklens.data.loader import frame_to_prices
from stocklens.data.models import PricePoint
from stocklens.utils.errors import (
    DataNotFoundError,
    DataProviderException,
    InvalidSeriesError,
    RateLimitException,
)
from stocklens.utils.logging import get_logger
from stocklens.utils.resilience import RateLimiter, retry

logger = get_logger(__name__)

PROVIDER_NAME = "yahoo_finance"


class YahooFinanceProvider:
    """Fetch daily OHLCV history through the yfinance library.

    An optional RateLimiter can be injected to throttle calls; the caller owns
    its lifetime.
    """

    def __init__(self, rate_limiter: RateLimiter | None = None):
        """Initialize Yahoo Finance provider.

        Args:
            rate_limiter: Optional token bucket consulted before each request
        """
        self.name = PROVIDER_NAME
        self.rate_limiter = rate_limiter
        logger.debug("Yahoo Finance provider initialized")

    @retry(
        max_attempts=5,
        initial_delay=5.0,
        max_delay=120.0,
        exponential_base=2.5,
    )
    def get_price_series(
        self,
        ticker: str,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        period: str | None = None,
    ) -> list[PricePoint]:
        """Fetch historical daily prices.

        Args:
            ticker: Stock ticker symbol
            start_date: Start date for historical data (ignored if period is set)
            end_date: End date for historical data (ignored if period is set)
            period: Period string like '1mo', '6mo', '1y', '5y' or 'max'.
                    If set, overrides start_date/end_date.

        Returns:
            Price points sorted by date

        Raises:
            DataNotFoundError: If Yahoo returns no rows for the ticker
            RateLimitException: If rate limited by Yahoo (retried with backoff)
            DataProviderException: For any other failure
        """
        if self.rate_limiter:
            self.rate_limiter.wait_if_needed()

        try:
            stock = yf.Ticker(ticker)
            if period:
                logger.debug(f"Fetching prices for {ticker} with period={period}")
                data = stock.history(period=period, auto_adjust=False)
            else:
                logger.debug(f"Fetching prices for {ticker} from {start_date} to {end_date}")
                data = stock.history(start=start_date, end=end_date, auto_adjust=False)
        except Exception as e:
            error_msg = str(e)
            if "rate limit" in error_msg.lower() or "too many requests" in error_msg.lower():
                logger.warning(f"Rate limited by Yahoo Finance for {ticker}, will retry with backoff")
                raise RateLimitException(
                    f"Rate limited by Yahoo Finance: {error_msg}",
                    provider=PROVIDER_NAME,
                ) from e
            logger.error(f"Error fetching prices for {ticker}: {e}")
            raise DataProviderException(
                f"Failed to fetch prices for {ticker}: {e}", provider=PROVIDER_NAME
            ) from e

        if data is None or data.empty:
            raise DataNotFoundError(f"No data found for ticker: {ticker}", provider=PROVIDER_NAME)

        try:
            prices = frame_to_prices(data)
        except InvalidSeriesError as e:
            raise DataProviderException(
                f"Unusable price data for {ticker}: {e}", provider=PROVIDER_NAME
            ) from e

        logger.debug(f"Retrieved {len(prices)} price records for {ticker}")
        return prices
