"""
Test settings loading against .env.example.

Every key documented in .env.example must bind to exactly one settings
field through its alias, and the loaded settings must be fully typed.
"""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path
import re

import pytest

# Import api.dependencies so dotenv loads exactly once (canonical location).
import api.dependencies  # noqa: F401

from core.infrastructure.database.config import DatabaseSettings
from core.settings import FulfillmentSettings, PaymentSettings, SlackSettings, get_app_settings

ENV_EXAMPLE = Path(__file__).resolve().parents[1] / ".env.example"


def _parse_env(env_path: Path) -> dict[str, str]:
    text = env_path.read_text(encoding="utf-8", errors="replace")
    values: dict[str, str] = {}
    for line in text.splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if s.startswith("export "):
            s = s[len("export ") :].strip()
        if "=" not in s:
            continue
        k, v = s.split("=", 1)
        k = k.strip()
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", k):
            continue
        values.setdefault(k, v.strip())
    return values


def _collect_alias_map(model_cls) -> dict[str, str]:
    """
    Return map: ENV_ALIAS -> field_name for a Pydantic settings class.
    """
    alias_map: dict[str, str] = {}
    for field_name, field in model_cls.model_fields.items():
        if field.alias:
            alias_map[field.alias] = field_name
    return alias_map


def test_every_env_key_is_mapped():
    keys = [k for k in _parse_env(ENV_EXAMPLE) if not k.startswith("DB_")]

    modules = {
        "fulfillment": FulfillmentSettings,
        "payment": PaymentSettings,
        "slack": SlackSettings,
    }
    alias_to_locator: dict[str, tuple[str, str]] = {}
    for module_name, model_cls in modules.items():
        for alias, field_name in _collect_alias_map(model_cls).items():
            if alias in alias_to_locator:
                pytest.fail(f"Duplicate env alias mapped twice: {alias}")
            alias_to_locator[alias] = (module_name, field_name)

    missing = [k for k in keys if k not in alias_to_locator]
    assert not missing, f"Unmapped env keys: {missing}"

    undocumented = [alias for alias in alias_to_locator if alias not in keys]
    assert not undocumented, f"Aliases missing from .env.example: {undocumented}"


def test_database_keys_use_prefix():
    fields = DatabaseSettings.model_fields
    for key in _parse_env(ENV_EXAMPLE):
        if key.startswith("DB_"):
            assert key[len("DB_"):].lower() in fields, key


def test_values_from_environment_are_typed(monkeypatch):
    monkeypatch.setenv("FULFILLMENT_DELIVERY_BUFFER_MINUTES", "20")
    monkeypatch.setenv("COURIER_PER_KM_FEE", "0.75")
    monkeypatch.setenv("PAYMENT_SETTLEMENT_PROVIDER", "http")
    monkeypatch.setenv("ORDERFLOW_SLACK_ENABLED", "true")

    assert FulfillmentSettings().delivery_buffer_minutes == 20
    assert FulfillmentSettings().courier_per_km_fee == Decimal("0.75")
    assert PaymentSettings().settlement_provider == "http"
    assert SlackSettings().enabled is True


def test_app_settings_aggregate_loads():
    settings = get_app_settings()

    assert settings.fulfillment.delivery_buffer_minutes >= 0
    assert settings.payment.auto_refund_window_hours >= 0
    assert settings.slack is settings.integrations.slack
