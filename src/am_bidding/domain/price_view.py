"""Price folding for realtime bid events.

The fan-out channel gives no ordering guarantee, so a consumer treats events
as an unordered multiset of price increases and keeps the running maximum:
a late-arriving lower bid never regresses the displayed price.
"""

from src.am_bidding.domain.models import Bid


class PriceView:
    """Locally cached current price of one auction."""

    def __init__(self, auction_id: str, current_price: int) -> None:
        self.auction_id = auction_id
        self.current_price = current_price
        self.leading_bidder_id: str | None = None

    def apply(self, bid: Bid) -> bool:
        """Fold one event in. Returns True when the displayed price changed."""
        if bid.auction_id != self.auction_id or bid.amount <= self.current_price:
            return False
        self.current_price = bid.amount
        self.leading_bidder_id = bid.bidder_id
        return True
