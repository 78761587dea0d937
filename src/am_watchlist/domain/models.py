"""Watchlist domain models."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class WatchlistEntry:
    auction_id: str
    title: str
    image_url: str | None
    current_price: int
    end_time: datetime
    status: str
    added_at: datetime
