"""
Component Test Layer Configuration

Structure:
    tests/component/
    ├── order/       Order state machine
    ├── shipment/    Shipment state machine
    ├── payment/     Payment record manager
    ├── lifecycle/   Saga, cancellation cascade, recovery, HTTP API
    └── mocks/       Mock implementations

Usage:
    pytest tests/component -v
    pytest tests/component/lifecycle -v
"""
import os
import sys

import pytest
import pytest_asyncio

# Set testing environment BEFORE any imports
os.environ["ENV"] = "testing"
os.environ["ENVIRONMENT"] = "testing"

# Add project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from parcelflow.core.config import ParcelflowConfig
from parcelflow.core.entity_locks import EntityLockRegistry
from parcelflow.services.order_service.order_repository import (
    InMemoryInvoiceRepository,
    InMemoryOrderRepository,
)
from parcelflow.services.order_service.order_service import OrderService
from parcelflow.services.lifecycle_service.factory import create_lifecycle_service
from parcelflow.services.pricing_service.pricing_engine import PricingEngine

from tests.component.mocks import (
    MockEventBus,
    MockNotificationSink,
    MockPaymentAuthorizer,
)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom markers"""
    config.addinivalue_line(
        "markers", "component: marks tests as component tests"
    )


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def mock_event_bus() -> MockEventBus:
    """Event bus that only records published events"""
    return MockEventBus()


@pytest.fixture
def mock_sink() -> MockNotificationSink:
    """Notification sink that records notifications"""
    return MockNotificationSink()


@pytest.fixture
def mock_authorizer() -> MockPaymentAuthorizer:
    """Authorizer that approves unless told otherwise"""
    return MockPaymentAuthorizer()


@pytest.fixture
def locks() -> EntityLockRegistry:
    return EntityLockRegistry()


@pytest.fixture
def pricing_engine() -> PricingEngine:
    return PricingEngine()


@pytest.fixture
def order_service(locks, clock, mock_event_bus) -> OrderService:
    """OrderService with in-memory repositories and a recording bus"""
    return OrderService(
        repository=InMemoryOrderRepository(),
        invoice_repository=InMemoryInvoiceRepository(),
        locks=locks,
        clock=clock,
        event_bus=mock_event_bus,
    )


@pytest.fixture
def test_config() -> ParcelflowConfig:
    """Default configuration with a short authorization timeout"""
    config = ParcelflowConfig()
    config.lifecycle.payment_authorization_timeout_seconds = 0.2
    return config


@pytest_asyncio.fixture
async def lifecycle(test_config, clock, mock_sink, mock_authorizer):
    """Fully wired LifecycleService on a real in-memory event bus"""
    service = create_lifecycle_service(
        config=test_config,
        clock=clock,
        notification_sink=mock_sink,
        authorizer=mock_authorizer,
    )
    await service.start()
    return service
