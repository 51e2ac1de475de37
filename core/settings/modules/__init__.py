# Settings modules
from .app_settings import AppSettings, get_app_settings, IntegrationsSettings
from .fulfillment_settings import FulfillmentSettings
from .integrations_settings import SlackSettings
from .payment_settings import PaymentSettings

__all__ = [
    "AppSettings",
    "get_app_settings",
    "IntegrationsSettings",
    "FulfillmentSettings",
    "PaymentSettings",
    "SlackSettings",
]
