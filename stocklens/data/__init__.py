"""Price series models, loaders and providers."""

from stocklens.data.loader import frame_to_prices, load_prices_csv, prices_to_frame, save_prices_csv
from stocklens.data.models import PricePoint, Tweet, TweetMetrics

__all__ = [
    "PricePoint",
    "Tweet",
    "TweetMetrics",
    "frame_to_prices",
    "load_prices_csv",
    "prices_to_frame",
    "save_prices_csv",
]
