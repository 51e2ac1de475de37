# Settings package
from core.settings.modules import (
    AppSettings,
    FulfillmentSettings,
    IntegrationsSettings,
    PaymentSettings,
    SlackSettings,
    get_app_settings,
)

__all__ = [
    "get_app_settings",
    "AppSettings",
    "FulfillmentSettings",
    "IntegrationsSettings",
    "PaymentSettings",
    "SlackSettings",
]
