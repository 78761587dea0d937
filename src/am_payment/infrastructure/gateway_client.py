"""Payment provider client (Razorpay Orders API over httpx).

Only order creation is needed server-side; capture happens in the provider's
checkout and is reported back through the webhook.
"""

import logging

import httpx

from config.settings import settings
from src.am_common.errors import UpstreamProviderError
from src.am_payment.domain.models import ProviderOrder

logger = logging.getLogger("am.payment.provider")


class PaymentGatewayClient:
    def __init__(
        self,
        base_url: str | None = None,
        key_id: str | None = None,
        key_secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.PAYMENT_API_BASE).rstrip("/")
        self.key_id = key_id if key_id is not None else settings.PAYMENT_KEY_ID
        self._key_secret = key_secret if key_secret is not None else settings.PAYMENT_KEY_SECRET
        self.timeout = timeout if timeout is not None else settings.PAYMENT_TIMEOUT_SECONDS
        self._transport = transport

    async def create_order(
        self, amount_minor: int, currency: str, receipt: str, notes: dict[str, str] | None = None
    ) -> ProviderOrder:
        url = f"{self.base_url}/orders"
        body = {
            "amount": amount_minor,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
        }
        logger.info("POST %s receipt=%s amount=%d %s", url, receipt, amount_minor, currency)
        try:
            async with httpx.AsyncClient(
                auth=(self.key_id, self._key_secret),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                resp = await client.post(url, json=body)
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Payment provider rejected order %s: HTTP %d", receipt, exc.response.status_code
            )
            status_code = exc.response.status_code
            raise UpstreamProviderError(f"provider returned HTTP {status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("Payment provider unreachable for order %s: %r", receipt, exc)
            raise UpstreamProviderError(type(exc).__name__) from exc
        except ValueError as exc:
            raise UpstreamProviderError("provider returned a non-JSON body") from exc

        order_id = data.get("id") if isinstance(data, dict) else None
        if not order_id:
            raise UpstreamProviderError("provider response has no order id")
        return ProviderOrder(
            order_id=str(order_id),
            amount_minor=int(data.get("amount", amount_minor)),
            currency=str(data.get("currency", currency)),
        )
