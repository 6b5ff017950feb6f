"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : Component tests (services wired with in-memory repositories)
    - unit/       : Unit tests (pure functions, no I/O)
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ.setdefault("ENV", "testing")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

# Import shared fixtures from tests/fixtures
from tests.fixtures import (
    FixedClock,
    make_address,
    make_package,
    make_timestamp,
    make_user_id,
)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned at 2024-03-01 09:00 UTC"""
    return FixedClock(make_timestamp())


@pytest.fixture
def user_id() -> str:
    return make_user_id()


@pytest.fixture
def origin():
    return make_address()


@pytest.fixture
def destination():
    return make_address(city="Medellin", state="Antioquia", zip_code="050021", street="Carrera 43A #1-50")


@pytest.fixture
def package():
    return make_package()
