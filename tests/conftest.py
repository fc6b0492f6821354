"""
Test Configuration and Fixtures

Central configuration for pytest including:
- In-memory stores and a failing store for error paths
- A ready AuthService with a registered account
- A scriptable biometric probe
- A FastAPI TestClient wired to in-memory services

Usage:
    All fixtures defined here are automatically available to all tests.
"""

import pytest
import pytest_asyncio
from unittest.mock import MagicMock
import os
import sys

# Ensure src is in path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.tools.key_value_store import MemoryStore
from tests.fixtures.account_fixtures import TEST_EMAIL, TEST_PASSWORD, FakeBiometricProbe, make_user


# ==================== Store Fixtures ====================

@pytest.fixture
def secret_store():
    return MemoryStore()


@pytest.fixture
def general_store():
    return MemoryStore()


# ==================== Biometric Fixtures ====================

@pytest.fixture
def biometric_probe():
    return FakeBiometricProbe()


# ==================== User Fixtures ====================

@pytest.fixture
def user():
    return make_user()


# ==================== Service Fixtures ====================

@pytest.fixture
def auth_service(secret_store, general_store, biometric_probe):
    from src.services.auth_service import AuthService
    return AuthService(secret_store, general_store, biometric_probe=biometric_probe)


@pytest_asyncio.fixture
async def registered_auth(auth_service, user):
    """AuthService with TEST_EMAIL registered and the session closed."""
    await auth_service.register(user, TEST_PASSWORD)
    await auth_service.logout()
    return auth_service


# ==================== API Fixtures ====================

@pytest.fixture
def mock_config():
    """Minimal AppConfig stand-in for build_services()."""
    config = MagicMock()
    config.max_attempts = 5
    config.lockout_seconds = 30
    config.notification_limit = 10
    config.storage_backend = "memory"
    return config


@pytest.fixture
def services(mock_config, secret_store, general_store, biometric_probe):
    from src.api.dependencies import build_services
    return build_services(
        mock_config,
        secret_store=secret_store,
        general_store=general_store,
        biometric_probe=biometric_probe,
    )


@pytest.fixture
def test_client(services):
    """TestClient over in-memory services."""
    from fastapi.testclient import TestClient
    from main import create_app

    return TestClient(create_app(services))


@pytest.fixture
def registration_payload():
    return {
        'first_name': 'Jane',
        'last_name': 'Doe',
        'email': TEST_EMAIL,
        'password': TEST_PASSWORD,
        'phone': '+15551234567',
    }
