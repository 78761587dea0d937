"""Webhook payload parsing.

Only ``payment.captured`` settles anything; every other event is
acknowledged and ignored.
"""

from typing import Any

from src.am_common.enums import WebhookEvent
from src.am_payment.domain.models import CapturedPayment


def _child(node: Any, key: str) -> Any:
    return node.get(key) if isinstance(node, dict) else None


def parse_captured(payload: Any) -> CapturedPayment | None:
    """CapturedPayment for a payment.captured event carrying an order id, else None."""
    if _child(payload, "event") != WebhookEvent.PAYMENT_CAPTURED:
        return None
    entity = _child(_child(_child(payload, "payload"), "payment"), "entity")
    order_id = _child(entity, "order_id")
    if not order_id:
        return None
    payment_id = _child(entity, "id")
    return CapturedPayment(
        order_id=str(order_id),
        payment_id=str(payment_id) if payment_id else None,
    )
