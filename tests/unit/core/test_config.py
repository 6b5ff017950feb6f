"""
Unit Tests for configuration loading
"""

from decimal import Decimal

import pytest

from parcelflow.core.config import LifecycleConfig, ParcelflowConfig, TariffConfig

pytestmark = pytest.mark.unit


class TestTariffConfig:
    """Pricing rates"""

    def test_defaults(self):
        tariff = TariffConfig()

        assert tariff.base_cost == Decimal("5000")
        assert tariff.per_km_rate == Decimal("800")
        assert tariff.service_prices["fragile"] == Decimal("2000")
        assert tariff.minor_unit == Decimal("0.01")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("TARIFF_BASE_COST", "7000")
        monkeypatch.setenv("TARIFF_SERVICE_INSURANCE", "4500.50")
        monkeypatch.setenv("CURRENCY", "USD")

        tariff = TariffConfig.from_env()

        assert tariff.base_cost == Decimal("7000")
        assert tariff.service_prices["insurance"] == Decimal("4500.50")
        assert tariff.currency == "USD"

    def test_malformed_value_falls_back(self, monkeypatch):
        monkeypatch.setenv("TARIFF_PER_KM_RATE", "eight hundred")
        monkeypatch.setenv("CURRENCY_MINOR_DIGITS", "two")

        tariff = TariffConfig.from_env()

        assert tariff.per_km_rate == Decimal("800")
        assert tariff.currency_minor_digits == 2


class TestLifecycleConfig:
    """Lifecycle settings"""

    def test_defaults(self):
        config = LifecycleConfig()

        assert config.payment_authorization_timeout_seconds == 10.0
        assert config.declined_account_suffixes == ["0002"]
        assert config.incident_description_max_length == 500

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("PAYMENT_AUTHORIZATION_TIMEOUT_SECONDS", "2.5")
        monkeypatch.setenv("DECLINED_ACCOUNT_SUFFIXES", "0002, 9999,")
        monkeypatch.setenv("SERVICE_PORT", "9000")

        config = LifecycleConfig.from_env()

        assert config.payment_authorization_timeout_seconds == 2.5
        assert config.declined_account_suffixes == ["0002", "9999"]
        assert config.service_port == 9000


class TestParcelflowConfig:
    """Aggregate settings"""

    def test_from_env_builds_every_section(self):
        config = ParcelflowConfig.from_env()

        assert isinstance(config.tariff, TariffConfig)
        assert isinstance(config.lifecycle, LifecycleConfig)
        assert config.logging.log_format
