from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, ConfigDict

from core.settings.modules.fulfillment_settings import FulfillmentSettings
from core.settings.modules.integrations_settings import SlackSettings
from core.settings.modules.payment_settings import PaymentSettings


class IntegrationsSettings(BaseModel):
    """Aggregates integrations settings as nested objects."""

    model_config = ConfigDict(extra="ignore")

    slack: SlackSettings


class AppSettings(BaseModel):
    """Application settings aggregator."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="ignore")

    fulfillment: FulfillmentSettings
    payment: PaymentSettings
    integrations: IntegrationsSettings

    @property
    def slack(self) -> SlackSettings:
        return self.integrations.slack


@lru_cache()
def get_app_settings() -> AppSettings:
    return AppSettings(
        fulfillment=FulfillmentSettings(),
        payment=PaymentSettings(),
        integrations=IntegrationsSettings(
            slack=SlackSettings(),
        ),
    )
