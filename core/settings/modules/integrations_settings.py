from pydantic import Field

from core.settings.base import OrderflowBaseSettings


class SlackSettings(OrderflowBaseSettings):
    """
    Slack integration settings.
    Loaded from .env file with exact variable name matching.
    """

    enabled: bool = Field(default=False, alias="ORDERFLOW_SLACK_ENABLED")
    webhook_url: str = Field(default="", alias="SLACK_WEBHOOK_URL")
    prefix: str = Field(default="[ORDERFLOW]", alias="ORDERFLOW_SLACK_PREFIX")
