"""Pydantic schemas for am_watchlist."""

import uuid

from pydantic import BaseModel

from src.am_common.money import format_amount
from src.am_watchlist.domain.models import WatchlistEntry


class AddToWatchlistRequest(BaseModel):
    auction_id: uuid.UUID


class WatchlistItem(BaseModel):
    auction_id: str
    title: str
    image_url: str | None
    current_price: int
    current_price_display: str
    end_time: str
    status: str
    added_at: str

    @classmethod
    def from_domain(cls, e: WatchlistEntry) -> "WatchlistItem":
        return cls(
            auction_id=e.auction_id,
            title=e.title,
            image_url=e.image_url,
            current_price=e.current_price,
            current_price_display=format_amount(e.current_price),
            end_time=e.end_time.isoformat(),
            status=e.status,
            added_at=e.added_at.isoformat(),
        )


class WatchlistResponse(BaseModel):
    items: list[WatchlistItem]


class WatchStatus(BaseModel):
    auction_id: str
    watching: bool
