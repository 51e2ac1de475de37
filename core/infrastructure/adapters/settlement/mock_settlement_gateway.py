"""
Mock Settlement Gateway.

Simulates a payment provider with a configurable success rate, the way
the storefront's demo automation did. Deterministic when given a seeded
``random.Random``.
"""
import asyncio
import random
from typing import Iterable, Optional

from core.application.interfaces import ISettlementGateway
from core.domain.entities.payment import Payment
from core.infrastructure.logging import get_logger


logger = get_logger(__name__)


class MockSettlementGateway(ISettlementGateway):
    """
    In-process settlement simulator.

    Args:
        success_rate: Probability (0..1) that a settlement succeeds
        rng: Random source (seed it for reproducible runs)
        delay_seconds: Artificial latency per call
        declined_payment_ids: Payments that always fail
    """

    def __init__(
        self,
        success_rate: float = 0.9,
        rng: Optional[random.Random] = None,
        delay_seconds: float = 0.0,
        declined_payment_ids: Iterable[str] = (),
    ):
        if not 0 <= success_rate <= 1:
            raise ValueError(f"success_rate must be between 0 and 1, got: {success_rate}")
        self.success_rate = success_rate
        self.delay_seconds = delay_seconds
        self.declined_payment_ids = set(declined_payment_ids)
        self._rng = rng or random.Random()
        self.calls = []

    async def settle(self, payment: Payment) -> bool:
        self.calls.append(payment.payment_id)
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

        if payment.payment_id in self.declined_payment_ids:
            approved = False
        else:
            approved = self._rng.random() < self.success_rate

        logger.debug(
            f"Mock settlement for payment {payment.payment_id}: "
            f"{'approved' if approved else 'declined'}"
        )
        return approved
