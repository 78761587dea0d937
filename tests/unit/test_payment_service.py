"""Unit tests for PaymentService (mocked repository and provider client)."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.am_auction.domain.models import Auction
from src.am_common.errors import (
    AuctionNotFoundError,
    ForbiddenError,
    InvalidSignatureError,
    NotFoundError,
    PaymentAlreadyCompletedError,
    UpstreamProviderError,
)
from src.am_payment.application.service import PaymentService
from src.am_payment.domain.models import Payment, ProviderOrder
from src.am_payment.domain.signature import compute_signature

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=UTC)
SECRET = "whsec_test"


def _make_auction(**kwargs) -> Auction:
    defaults = dict(
        id="auc-1", title="Vintage clock", description=None, image_url=None,
        category_id=None, seller_id="seller", starting_price=1000, current_price=1500,
        start_time=NOW - timedelta(days=2), end_time=NOW - timedelta(hours=1),
        status="completed", approval_status="approved", payment_status="unpaid",
        winner_id="user-z", approved_at=None, approved_by=None, rejection_reason=None,
        created_at=NOW - timedelta(days=3), updated_at=NOW,
    )
    defaults.update(kwargs)
    return Auction(**defaults)


def _make_payment(**kwargs) -> Payment:
    defaults = dict(
        id="pay-row-1", auction_id="auc-1", winner_id="user-z", amount=1500,
        amount_minor=150000, currency="INR", status="pending",
        provider_order_id="order_1", provider_payment_id=None, created_at=NOW, paid_at=None,
    )
    defaults.update(kwargs)
    return Payment(**defaults)


@pytest.fixture
def db() -> MagicMock:
    db = MagicMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    return db


@pytest.fixture
def mock_repo() -> MagicMock:
    repo = MagicMock()
    repo.get_by_auction = AsyncMock(return_value=None)
    repo.record_order = AsyncMock()
    repo.upsert_pending = AsyncMock(return_value=_make_payment())
    repo.mark_auction_pending = AsyncMock()
    repo.mark_paid = AsyncMock(return_value="auc-1")
    repo.mark_auction_paid = AsyncMock(return_value=True)
    return repo


@pytest.fixture
def auctions() -> MagicMock:
    auctions = MagicMock()
    auctions.get_by_id = AsyncMock(return_value=_make_auction())
    return auctions


@pytest.fixture
def gateway() -> MagicMock:
    gateway = MagicMock()
    gateway.key_id = "rzp_test_key"
    gateway.create_order = AsyncMock(
        return_value=ProviderOrder(order_id="order_1", amount_minor=150000, currency="INR")
    )
    return gateway


@pytest.fixture
def service(mock_repo, auctions, gateway) -> PaymentService:
    return PaymentService(
        repo=mock_repo, auctions=auctions, gateway=gateway, webhook_secret=SECRET, currency="INR"
    )


class TestCreatePaymentOrder:
    async def test_winner_gets_order_in_minor_units(self, service, db, gateway, mock_repo) -> None:
        resp = await service.create_payment_order(db, "auc-1", "user-z")

        assert resp.order_id == "order_1"
        assert resp.key_id == "rzp_test_key"
        assert resp.amount == 150000
        assert resp.currency == "INR"
        assert gateway.create_order.call_args.args[:2] == (150000, "INR")
        assert gateway.create_order.call_args.kwargs["receipt"] == "auction_auc-1"
        mock_repo.mark_auction_pending.assert_awaited_once_with(db, "auc-1")
        db.commit.assert_awaited_once()

    async def test_non_winner_forbidden(self, service, db, gateway) -> None:
        with pytest.raises(ForbiddenError):
            await service.create_payment_order(db, "auc-1", "user-x")
        gateway.create_order.assert_not_awaited()

    async def test_no_winner_forbidden(self, service, db, auctions) -> None:
        auctions.get_by_id = AsyncMock(return_value=_make_auction(status="active", winner_id=None))
        with pytest.raises(ForbiddenError):
            await service.create_payment_order(db, "auc-1", "user-z")

    async def test_missing_auction(self, service, db, auctions) -> None:
        auctions.get_by_id = AsyncMock(return_value=None)
        with pytest.raises(AuctionNotFoundError):
            await service.create_payment_order(db, "auc-1", "user-z")

    async def test_already_paid(self, service, db, auctions, gateway) -> None:
        auctions.get_by_id = AsyncMock(return_value=_make_auction(payment_status="paid"))
        with pytest.raises(PaymentAlreadyCompletedError):
            await service.create_payment_order(db, "auc-1", "user-z")
        gateway.create_order.assert_not_awaited()

    async def test_upstream_failure_writes_nothing(self, service, db, gateway, mock_repo) -> None:
        gateway.create_order = AsyncMock(side_effect=UpstreamProviderError("timeout"))
        with pytest.raises(UpstreamProviderError):
            await service.create_payment_order(db, "auc-1", "user-z")
        mock_repo.upsert_pending.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_every_issued_order_is_recorded(self, service, db, mock_repo) -> None:
        await service.create_payment_order(db, "auc-1", "user-z")
        mock_repo.record_order.assert_awaited_once_with(db, "auc-1", "order_1", 150000, "INR")

    async def test_reopened_checkout_reuses_pending_order(
        self, service, db, gateway, mock_repo
    ) -> None:
        mock_repo.get_by_auction = AsyncMock(
            return_value=_make_payment(provider_order_id="order_first")
        )

        resp = await service.create_payment_order(db, "auc-1", "user-z")

        assert resp.order_id == "order_first"
        assert resp.amount == 150000
        gateway.create_order.assert_not_awaited()
        mock_repo.upsert_pending.assert_not_awaited()

    async def test_pending_order_at_other_amount_is_replaced(
        self, service, db, gateway, mock_repo
    ) -> None:
        mock_repo.get_by_auction = AsyncMock(
            return_value=_make_payment(provider_order_id="order_old", amount_minor=99900)
        )

        resp = await service.create_payment_order(db, "auc-1", "user-z")

        assert resp.order_id == "order_1"
        gateway.create_order.assert_awaited_once()
        mock_repo.record_order.assert_awaited_once()

    async def test_capture_racing_order_creation(self, service, db, mock_repo) -> None:
        mock_repo.upsert_pending = AsyncMock(return_value=None)
        with pytest.raises(PaymentAlreadyCompletedError):
            await service.create_payment_order(db, "auc-1", "user-z")
        db.rollback.assert_awaited_once()


def _webhook_body(event: str = "payment.captured", order_id: str = "order_1") -> bytes:
    return json.dumps({
        "event": event,
        "payload": {"payment": {"entity": {"id": "pay_9", "order_id": order_id}}},
    }).encode()


class TestHandleWebhook:
    async def test_captured_marks_paid(self, service, db, mock_repo) -> None:
        body = _webhook_body()
        settled = await service.handle_webhook(db, body, compute_signature(body, SECRET))

        assert settled is True
        mock_repo.mark_paid.assert_awaited_once_with(db, "order_1", "pay_9")
        mock_repo.mark_auction_paid.assert_awaited_once_with(db, "auc-1")
        db.commit.assert_awaited_once()

    async def test_duplicate_delivery_is_noop(self, service, db, mock_repo) -> None:
        mock_repo.mark_paid = AsyncMock(return_value=None)  # already paid
        body = _webhook_body()

        settled = await service.handle_webhook(db, body, compute_signature(body, SECRET))

        assert settled is False
        mock_repo.mark_auction_paid.assert_not_awaited()
        db.commit.assert_not_awaited()

    async def test_invalid_signature(self, service, db, mock_repo) -> None:
        with pytest.raises(InvalidSignatureError):
            await service.handle_webhook(db, _webhook_body(), "deadbeef")
        mock_repo.mark_paid.assert_not_awaited()

    async def test_missing_signature(self, service, db) -> None:
        with pytest.raises(InvalidSignatureError):
            await service.handle_webhook(db, _webhook_body(), None)

    async def test_other_event_acknowledged(self, service, db, mock_repo) -> None:
        body = _webhook_body(event="order.paid")
        assert await service.handle_webhook(db, body, compute_signature(body, SECRET)) is False
        mock_repo.mark_paid.assert_not_awaited()

    async def test_malformed_json_acknowledged(self, service, db, mock_repo) -> None:
        body = b"{not json"
        assert await service.handle_webhook(db, body, compute_signature(body, SECRET)) is False
        mock_repo.mark_paid.assert_not_awaited()


class TestGetPayment:
    async def test_winner_and_seller_can_read(self, service, db, mock_repo) -> None:
        mock_repo.get_by_auction = AsyncMock(return_value=_make_payment(status="paid", paid_at=NOW))
        for requester in ("user-z", "seller"):
            resp = await service.get_payment(db, "auc-1", requester)
            assert resp.status == "paid"
            assert resp.auction_id == "auc-1"
            assert resp.paid_at == NOW.isoformat()

    async def test_others_forbidden(self, service, db) -> None:
        with pytest.raises(ForbiddenError):
            await service.get_payment(db, "auc-1", "user-x")

    async def test_no_payment_yet(self, service, db, mock_repo) -> None:
        mock_repo.get_by_auction = AsyncMock(return_value=None)
        with pytest.raises(NotFoundError):
            await service.get_payment(db, "auc-1", "user-z")
