"""
Authentication Service - Local account login guard

Handles password and biometric login, failed-attempt lockout, registration
and the current session. Every successful password login also runs the
engagement scoring update for the account.

Usage:
    from src.services.auth_service import AuthService

    auth = AuthService(secret_store, general_store)
    result = await auth.login("jane@example.com", "Secret123")
    if not result.ok:
        print(result.error, result.message)
"""

import json
import logging
from typing import Optional

from pydantic import ValidationError

from src.models.account import Credentials, User
from src.models.results import AuthErrorKind, AuthResult, StorageWriteFailed
from src.services import gamification_service
from src.services.attempt_tracker import AttemptTracker
from src.services.biometric_service import BIOMETRIC_PROMPT, BiometricProbe, NoBiometricHardware
from src.services.identity_keys import credentials_key, secret_key
from src.services.login_throttle import LOCKOUT_SECONDS, MAX_ATTEMPTS, LockoutPolicy
from src.services.session_manager import SessionManager
from src.services.user_repository import UserRepository
from src.tools.key_value_store import GeneralStore, SecretStore, StorageError
from src.utils.structured_logger import get_logger, log_with_context, set_account

logger = get_logger(__name__)

BIOMETRIC_ENABLED_KEY = "biometric_enabled"


class AuthService:
    """Login guard for the single local account"""

    def __init__(
        self,
        secret_store: SecretStore,
        general_store: GeneralStore,
        biometric_probe: Optional[BiometricProbe] = None,
        max_attempts: int = MAX_ATTEMPTS,
        lockout_seconds: int = LOCKOUT_SECONDS,
    ):
        """
        Initialize the login guard.

        Args:
            secret_store: Confidential store (credentials, attempts, session)
            general_store: General store (user records, flags)
            biometric_probe: Sensor access; defaults to a host without one
            max_attempts: Failures allowed before lockout
            lockout_seconds: Lockout window length
        """
        self.secret_store = secret_store
        self.general_store = general_store
        self.biometric_probe = biometric_probe or NoBiometricHardware()
        self.tracker = AttemptTracker(secret_store)
        self.lockout = LockoutPolicy(self.tracker, max_attempts, lockout_seconds)
        self.session = SessionManager(secret_store)
        self.users = UserRepository(general_store)

    # ==================== Credentials & Profiles ====================

    async def save_credentials(self, email: str, password: str) -> None:
        """Store credentials under the sanitized email. Last write wins."""
        payload = Credentials(email=email, password=password).model_dump_json()
        try:
            await self.secret_store.set(credentials_key(email), payload)
        except StorageError as e:
            logger.error(f"Failed to save credentials: {e}")
            raise StorageWriteFailed("credentials") from e

    async def get_credentials(self, email: str) -> Optional[Credentials]:
        try:
            raw = await self.secret_store.get(credentials_key(email))
            return Credentials.model_validate(json.loads(raw)) if raw else None
        except (StorageError, ValueError, ValidationError) as e:
            logger.debug(f"Could not read credentials: {e}")
            return None

    async def save_user_data(self, user: User) -> None:
        await self.users.save(user)

    async def get_user_data(self, email: str) -> Optional[User]:
        return await self.users.get(email)

    # ==================== Password Login ====================

    async def login(self, email: str, password: str) -> AuthResult:
        """
        Authenticate with email/password.

        Args:
            email: Account email
            password: Account password

        Returns:
            AuthResult carrying the updated user record on success. A
            successful login for credentials with no stored profile carries
            no user.
        """
        account = secret_key(email)
        set_account(account)

        if await self.lockout.is_locked(account):
            log_with_context(logger, logging.WARNING, "Login refused: account locked", account=account)
            return AuthResult.failure(AuthErrorKind.ACCOUNT_LOCKED)

        stored = await self.get_credentials(email)
        if stored is None or stored.password != password:
            await self._record_failure(account)
            return AuthResult.failure(AuthErrorKind.INVALID_CREDENTIALS)

        try:
            await self.tracker.reset(account)
        except StorageError as e:
            logger.warning(f"Could not reset failed attempts: {e}")

        user = await self.get_user_data(email)
        try:
            if user is not None:
                user = gamification_service.update_login_stats(user)
                await self.save_user_data(user)
            await self.session.open(email)
        except StorageWriteFailed:
            return AuthResult.failure(AuthErrorKind.STORAGE_WRITE_FAILED)
        except StorageError as e:
            logger.error(f"Failed to open session: {e}")
            return AuthResult.failure(AuthErrorKind.STORAGE_WRITE_FAILED)

        await self._enable_biometrics()

        log_with_context(
            logger, logging.INFO, "Login succeeded",
            account=account,
            streak=user.login_streak if user else None,
            points=user.points if user else None,
        )
        return AuthResult.success(user)

    async def _record_failure(self, account: str) -> None:
        try:
            failures = await self.tracker.increment(account)
            if failures >= self.lockout.max_attempts and await self.tracker.get_lockout_until(account) is None:
                await self.lockout.arm(account)
        except StorageError as e:
            logger.warning(f"Could not record failed attempt: {e}")
            return
        log_with_context(logger, logging.INFO, "Login failed", account=account, failed_attempts=failures)

    async def _enable_biometrics(self) -> None:
        try:
            await self.general_store.set(BIOMETRIC_ENABLED_KEY, "true")
        except StorageError as e:
            logger.warning(f"Could not set biometric flag: {e}")

    async def is_biometric_enabled(self) -> bool:
        try:
            return await self.general_store.get(BIOMETRIC_ENABLED_KEY) == "true"
        except StorageError:
            return False

    # ==================== Lockout Queries ====================

    async def remaining_attempts(self, email: str) -> int:
        return await self.lockout.remaining_attempts(secret_key(email))

    async def seconds_until_unlock(self, email: str) -> int:
        return await self.lockout.seconds_until_unlock(secret_key(email))

    async def reset_failed_attempts(self, email: str) -> None:
        """For countdown UIs: remaining_attempts() alone never clears a lockout."""
        await self.tracker.reset(secret_key(email))

    # ==================== Session ====================

    async def logout(self) -> None:
        try:
            await self.session.close()
        except StorageError as e:
            logger.warning(f"Could not close session: {e}")

    async def is_logged_in(self) -> bool:
        return await self.session.is_active()

    async def get_current_user(self) -> Optional[User]:
        email = await self.session.current_identity()
        if not email:
            return None
        return await self.get_user_data(email)

    # ==================== Registration ====================

    async def register(self, user: User, password: str) -> AuthResult:
        """
        Store credentials and profile, then open a session for the new account.

        Registering an existing email silently overwrites both.
        """
        try:
            await self.save_credentials(user.email, password)
            await self.save_user_data(user)
            await self.session.open(user.email)
        except StorageWriteFailed:
            return AuthResult.failure(AuthErrorKind.STORAGE_WRITE_FAILED)
        except StorageError as e:
            logger.error(f"Failed to open session after registration: {e}")
            return AuthResult.failure(AuthErrorKind.STORAGE_WRITE_FAILED)

        set_account(secret_key(user.email))
        logger.info("Account registered")
        return AuthResult.success(user)

    # ==================== Biometric Login ====================

    async def biometric_login(self) -> AuthResult:
        """
        Log in with the device sensor.

        Resolves the session's user; with no session, falls back to the first
        stored user record and opens a session for it.
        """
        try:
            available = await self.biometric_probe.has_hardware() and await self.biometric_probe.is_enrolled()
            if not available:
                return AuthResult.failure(AuthErrorKind.BIOMETRIC_UNAVAILABLE)
            outcome = await self.biometric_probe.authenticate(BIOMETRIC_PROMPT)
        except Exception as e:
            logger.error(f"Biometric probe error: {e}", exc_info=True)
            return AuthResult.failure(AuthErrorKind.BIOMETRIC_FAILED)

        if not outcome.success:
            logger.info("Biometric authentication failed", extra={"reason": outcome.error})
            return AuthResult.failure(AuthErrorKind.BIOMETRIC_FAILED)

        email = await self.session.current_identity()
        if email:
            user = await self.get_user_data(email)
            if user:
                return AuthResult.success(user)

        # Legacy fallback: first stored record wins
        user = await self.users.first()
        if user is None:
            return AuthResult.failure(AuthErrorKind.NO_ACCOUNT_FOUND)

        try:
            await self.session.open(user.email)
        except StorageError as e:
            logger.error(f"Failed to open session: {e}")
            return AuthResult.failure(AuthErrorKind.STORAGE_WRITE_FAILED)
        return AuthResult.success(user)
