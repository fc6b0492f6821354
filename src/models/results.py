"""
Authentication outcomes.

Login, registration and biometric login return an AuthResult instead of
raising, so callers branch on AuthErrorKind rather than matching messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from src.models.account import User


class AuthErrorKind(str, Enum):
    ACCOUNT_LOCKED = "account_locked"
    INVALID_CREDENTIALS = "invalid_credentials"
    BIOMETRIC_UNAVAILABLE = "biometric_unavailable"
    BIOMETRIC_FAILED = "biometric_failed"
    NO_ACCOUNT_FOUND = "no_account_found"
    STORAGE_WRITE_FAILED = "storage_write_failed"


ERROR_MESSAGES = {
    AuthErrorKind.ACCOUNT_LOCKED: "Account locked due to too many failed attempts",
    # Unknown email and wrong password share one message
    AuthErrorKind.INVALID_CREDENTIALS: "Invalid email or password",
    AuthErrorKind.BIOMETRIC_UNAVAILABLE: "Biometric authentication not available or enrolled",
    AuthErrorKind.BIOMETRIC_FAILED: "Biometric authentication failed",
    AuthErrorKind.NO_ACCOUNT_FOUND: "No user account found for biometric login",
    AuthErrorKind.STORAGE_WRITE_FAILED: "Failed to save account data",
}


@dataclass(frozen=True)
class AuthResult:
    """Ok(user) or Err(kind). A successful login may carry no user."""
    ok: bool
    user: Optional[User] = None
    error: Optional[AuthErrorKind] = None

    @classmethod
    def success(cls, user: Optional[User] = None) -> "AuthResult":
        return cls(ok=True, user=user)

    @classmethod
    def failure(cls, error: AuthErrorKind) -> "AuthResult":
        return cls(ok=False, error=error)

    @property
    def message(self) -> Optional[str]:
        if self.error is None:
            return None
        return ERROR_MESSAGES[self.error]


class StorageWriteFailed(Exception):
    """A credential, profile or draft could not be persisted"""

    def __init__(self, what: str):
        self.what = what
        super().__init__(f"Failed to save {what}")
