"""Unit tests for realtime price folding (PriceView)."""

from datetime import UTC, datetime

from src.am_bidding.domain.models import Bid
from src.am_bidding.domain.price_view import PriceView

T0 = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)


def _bid(bid_id: int, amount: int, bidder: str = "x", auction_id: str = "auc-1") -> Bid:
    return Bid(id=bid_id, auction_id=auction_id, bidder_id=bidder, amount=amount, bid_time=T0)


class TestPriceView:
    def test_higher_bid_updates_price_and_leader(self) -> None:
        view = PriceView("auc-1", 1000)
        assert view.apply(_bid(1, 1200, bidder="x")) is True
        assert view.current_price == 1200
        assert view.leading_bidder_id == "x"

    def test_late_lower_event_never_regresses(self) -> None:
        view = PriceView("auc-1", 1000)
        view.apply(_bid(2, 1500, bidder="z"))
        assert view.apply(_bid(1, 1200, bidder="x")) is False
        assert view.current_price == 1500
        assert view.leading_bidder_id == "z"

    def test_equal_amount_is_ignored(self) -> None:
        view = PriceView("auc-1", 1000)
        assert view.apply(_bid(1, 1000)) is False

    def test_other_auction_is_ignored(self) -> None:
        view = PriceView("auc-1", 1000)
        assert view.apply(_bid(1, 5000, auction_id="auc-2")) is False
        assert view.current_price == 1000


def test_out_of_order_stream_keeps_running_max() -> None:
    view = PriceView("auc-1", 1000)
    changed = [
        view.current_price
        for bid in (_bid(1, 1200), _bid(3, 1500), _bid(2, 1300), _bid(4, 1600))
        if view.apply(bid)
    ]
    assert changed == [1200, 1500, 1600]
    assert view.current_price == 1600
