"""
HTTP Settlement Gateway.

Posts the payment to a provider endpoint and reads back a boolean
outcome. Protocol details beyond that are the provider's concern.
"""

import aiohttp

from core.application.interfaces import ISettlementGateway
from core.domain.entities.payment import Payment
from core.infrastructure.logging import get_logger


logger = get_logger(__name__)


class HttpSettlementGateway(ISettlementGateway):
    """
    aiohttp-backed settlement client.

    Expects a JSON response with ``{"approved": true|false}``. Non-2xx
    responses count as declined; transport errors propagate so the caller
    can mark the payment FAILED and report it.
    """

    def __init__(self, url: str, timeout_seconds: float = 10.0):
        if not url:
            raise ValueError("Settlement URL is required for the HTTP gateway")
        self.url = url
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        logger.info(f"HttpSettlementGateway initialized ({url})")

    async def settle(self, payment: Payment) -> bool:
        payload = {
            "payment_id": payment.payment_id,
            "order_id": payment.order_id,
            "amount": str(payment.amount.amount),
            "currency": payment.amount.currency,
            "method": payment.method.value,
        }
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.post(self.url, json=payload) as response:
                if response.status >= 300:
                    error_text = await response.text()
                    logger.error(
                        f"Settlement provider error for {payment.payment_id}: "
                        f"{response.status} - {error_text}"
                    )
                    return False
                body = await response.json()
                return bool(body.get("approved", False))
