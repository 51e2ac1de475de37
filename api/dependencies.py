"""
FastAPI Dependencies.

Provides dependency injection for application services.
"""
from __future__ import annotations

import logging
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from core.settings import get_app_settings

from core.application.interfaces import Clock, INotificationService, ISettlementGateway
from core.application.services import (
    KitchenApplicationService,
    LockRegistry,
    OrderApplicationService,
    PaymentApplicationService,
    ReportingApplicationService,
)
from core.domain.services.forecasting import RevenueForecaster
from core.infrastructure.adapters.notifications.mock_notification_service import MockNotificationService
from core.infrastructure.adapters.settlement.mock_settlement_gateway import MockSettlementGateway
from core.infrastructure.clock import SystemClock
from core.infrastructure.database.config import get_session_factory
from core.infrastructure.event_bus import get_event_bus

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_clock = None
_locks = None
_notification_service = None
_settlement_gateway = None
_order_service = None
_kitchen_service = None
_payment_service = None
_reporting_service = None


# =============================================================================
# INFRASTRUCTURE
# =============================================================================

def get_clock() -> Clock:
    global _clock
    if _clock is None:
        _clock = SystemClock()
    return _clock


def get_locks() -> LockRegistry:
    """One registry per process, shared by every service that writes orders or payments."""
    global _locks
    if _locks is None:
        _locks = LockRegistry()
    return _locks


def get_notification_service() -> INotificationService:
    global _notification_service

    if _notification_service is None:
        settings = get_app_settings()

        if settings.slack.enabled:
            try:
                from core.infrastructure.adapters.notifications.slack_notification_service import SlackNotificationService
                _notification_service = SlackNotificationService(settings.slack)
                logger.info("Created SlackNotificationService instance")
            except Exception as e:
                logger.warning(f"Failed SlackNotificationService: {e}, fallback to mock")
                _notification_service = MockNotificationService()
        else:
            _notification_service = MockNotificationService()
            logger.info("Using MockNotificationService (notifications disabled)")

    return _notification_service


def get_settlement_gateway() -> ISettlementGateway:
    global _settlement_gateway

    if _settlement_gateway is None:
        settings = get_app_settings().payment
        if settings.settlement_provider == "http":
            from core.infrastructure.adapters.settlement.http_settlement_gateway import HttpSettlementGateway
            _settlement_gateway = HttpSettlementGateway(
                settings.settlement_url,
                timeout_seconds=settings.settlement_timeout_seconds,
            )
            logger.info("Created HttpSettlementGateway instance")
        else:
            _settlement_gateway = MockSettlementGateway(
                success_rate=settings.settlement_success_rate
            )
            logger.info(
                f"Using MockSettlementGateway (success rate {settings.settlement_success_rate})"
            )

    return _settlement_gateway


# =============================================================================
# APPLICATION SERVICES
# =============================================================================

def get_order_service() -> OrderApplicationService:
    global _order_service

    if _order_service is None:
        _order_service = OrderApplicationService(
            session_factory=get_session_factory(),
            clock=get_clock(),
            locks=get_locks(),
            event_bus=get_event_bus(),
            settings=get_app_settings().fulfillment,
        )
        logger.info("Created OrderApplicationService instance")

    return _order_service


def get_kitchen_service() -> KitchenApplicationService:
    global _kitchen_service

    if _kitchen_service is None:
        _kitchen_service = KitchenApplicationService.from_settings(
            get_session_factory(),
            get_clock(),
            get_app_settings().fulfillment,
            sla_tracker=get_order_service().sla_tracker,
        )
        logger.info("Created KitchenApplicationService instance")

    return _kitchen_service


def get_payment_service() -> PaymentApplicationService:
    global _payment_service

    if _payment_service is None:
        _payment_service = PaymentApplicationService.from_settings(
            get_session_factory(),
            get_settlement_gateway(),
            get_notification_service(),
            get_clock(),
            get_app_settings().payment,
            state_machine=get_order_service().state_machine,
            locks=get_locks(),
            event_bus=get_event_bus(),
        )
        logger.info("Created PaymentApplicationService instance")

    return _payment_service


def get_reporting_service() -> ReportingApplicationService:
    global _reporting_service

    if _reporting_service is None:
        settings = get_app_settings()
        _reporting_service = ReportingApplicationService(
            get_session_factory(),
            get_clock(),
            forecaster=RevenueForecaster(
                window_days=settings.payment.forecast_window_days,
                currency=settings.fulfillment.currency,
            ),
        )
        logger.info("Created ReportingApplicationService instance")

    return _reporting_service


# =============================================================================
# RESET (for testing)
# =============================================================================

def reset_dependencies():
    global _clock, _locks, _notification_service, _settlement_gateway
    global _order_service, _kitchen_service, _payment_service, _reporting_service

    _clock = None
    _locks = None
    _notification_service = None
    _settlement_gateway = None
    _order_service = None
    _kitchen_service = None
    _payment_service = None
    _reporting_service = None

    logger.info("Dependencies reset")
