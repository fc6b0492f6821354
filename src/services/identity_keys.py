"""
Identity key derivation.

An identity (email) has two storage forms:
- record key: the email unchanged, used to find user records
- secret key: every character outside [A-Za-z0-9] replaced by '_', used for
  confidential-store keys

The two forms are not interchangeable; looking up with the wrong one misses.
"""

import re

_NON_ALNUM = re.compile(r'[^a-zA-Z0-9]')

CREDENTIALS_PREFIX = "credentials"
FAILED_ATTEMPTS_PREFIX = "failed_attempts"
LOCKOUT_TIME_PREFIX = "lockout_time"


def record_key(identity: str) -> str:
    return identity


def secret_key(identity: str) -> str:
    """Sanitize an identity for confidential-store keys. Idempotent."""
    return _NON_ALNUM.sub('_', identity)


def credentials_key(identity: str) -> str:
    return f"{CREDENTIALS_PREFIX}_{secret_key(identity)}"


def failed_attempts_key(account: str) -> str:
    return f"{FAILED_ATTEMPTS_PREFIX}_{secret_key(account)}"


def lockout_time_key(account: str) -> str:
    return f"{LOCKOUT_TIME_PREFIX}_{secret_key(account)}"
