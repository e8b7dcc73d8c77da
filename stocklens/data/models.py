"""Pydantic models for price series and social posts."""

from datetime import datetime

from pydantic import BaseModel, Field


class PricePoint(BaseModel):
    """Daily OHLCV bar."""

    date: datetime = Field(description="Trading day")
    open: float = Field(ge=0, description="Opening price")
    high: float = Field(ge=0, description="High price")
    low: float = Field(ge=0, description="Low price")
    close: float = Field(gt=0, description="Closing price")
    volume: int = Field(default=0, ge=0, description="Trading volume")


class TweetMetrics(BaseModel):
    """Public engagement counters of a post."""

    retweet_count: int = Field(default=0, ge=0)
    like_count: int = Field(default=0, ge=0)
    reply_count: int = Field(default=0, ge=0)
    quote_count: int = Field(default=0, ge=0)


class Tweet(BaseModel):
    """Social media post about a ticker."""

    id: str = Field(description="Post identifier")
    text: str = Field(description="Post text")
    created_at: datetime = Field(description="Creation timestamp")
    author_id: str | None = Field(default=None, description="Author identifier")
    metrics: TweetMetrics = Field(default_factory=TweetMetrics, description="Engagement counters")

    @property
    def engagement(self) -> int:
        """Retweets, likes and replies combined."""
        return self.metrics.retweet_count + self.metrics.like_count + self.metrics.reply_count
