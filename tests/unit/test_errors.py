"""Tests for am_common.errors and am_common.response."""

from unittest.mock import MagicMock

from src.am_common.errors import (
    AlreadyDecidedError,
    AppError,
    AuctionNotBiddableError,
    AuctionNotFoundError,
    BidTooLowError,
    ForbiddenError,
    InvalidSignatureError,
    NotFoundError,
    PaymentNotConfirmedError,
    UpstreamProviderError,
)
from src.am_common.response import ApiResponse, error_response, success_response, wrap


class TestAppError:
    def test_base_error(self) -> None:
        err = AppError(code=9002, message="Internal error")
        assert err.code == 9002
        assert err.message == "Internal error"
        assert err.http_status == 500

    def test_is_exception(self) -> None:
        assert isinstance(AppError(code=1001, message="test"), Exception)


class TestSpecificErrors:
    def test_auction_not_found_is_not_found(self) -> None:
        err = AuctionNotFoundError("a-1")
        assert isinstance(err, NotFoundError)
        assert err.code == 2001
        assert err.http_status == 404
        assert "a-1" in err.message

    def test_bid_too_low_carries_prices(self) -> None:
        err = BidTooLowError(1100, 1200)
        assert err.code == 3002
        assert err.http_status == 409
        assert err.amount == 1100
        assert err.current_price == 1200

    def test_not_biddable(self) -> None:
        err = AuctionNotBiddableError("a-1", "auction has ended")
        assert err.code == 3001
        assert err.http_status == 422
        assert "auction has ended" in err.message

    def test_codes_and_statuses(self) -> None:
        assert (ForbiddenError().code, ForbiddenError().http_status) == (1403, 403)
        assert AlreadyDecidedError("a", "approved").http_status == 409
        assert PaymentNotConfirmedError("a").code == 4001
        assert InvalidSignatureError().http_status == 401
        assert UpstreamProviderError("timeout").http_status == 502


class TestApiResponse:
    def test_success_response(self) -> None:
        resp = success_response({"id": "a-1"})
        assert resp.code == 0
        assert resp.message == "success"
        assert resp.data == {"id": "a-1"}
        assert resp.request_id.startswith("req_")

    def test_error_response(self) -> None:
        resp = error_response(3002, "too low")
        assert resp.code == 3002
        assert resp.data is None

    def test_wrap_uses_request_id_from_state(self) -> None:
        request = MagicMock()
        request.state.request_id = "req_abc"
        resp = wrap(request, [1, 2], message="done")
        assert isinstance(resp, ApiResponse)
        assert resp.request_id == "req_abc"
        assert resp.message == "done"
        assert resp.data == [1, 2]
