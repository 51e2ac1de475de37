# core/settings/base.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrderflowBaseSettings(BaseSettings):
    """
    Base for every settings section.

    Fields bind to explicit environment aliases; populate_by_name lets
    tests and wiring code pass values by field name as well.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
