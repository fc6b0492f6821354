"""
Test Fixtures Package

Reusable fakes for the account stack:
- FailingStore: a MemoryStore whose reads and/or writes raise StorageError
- FakeBiometricProbe: a sensor whose answers are set per test
- make_user: a user record with registration seed values

Usage:
    from tests.fixtures.account_fixtures import FailingStore, make_user
"""

from tests.fixtures.account_fixtures import (
    TEST_EMAIL,
    TEST_PASSWORD,
    FailingStore,
    FakeBiometricProbe,
    make_user,
)

__all__ = ['TEST_EMAIL', 'TEST_PASSWORD', 'FailingStore', 'FakeBiometricProbe', 'make_user']
