"""
Shared API dependencies.

Services are built once per application from AppConfig and kept on
app.state.services; routes pull them in through Depends().
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request

from config.loader import AppConfig
from src.models.account import User
from src.services.auth_service import AuthService
from src.services.biometric_service import BiometricProbe
from src.services.notification_service import NotificationService
from src.services.registration_service import RegistrationDraftService
from src.tools.key_value_store import GeneralStore, JsonFileStore, MemoryStore, SecretStore

logger = logging.getLogger(__name__)


@dataclass
class AppServices:
    auth: AuthService
    notifications: NotificationService
    drafts: RegistrationDraftService
    general_store: GeneralStore


def build_stores(config: AppConfig):
    """(secret_store, general_store) for the configured backend"""
    if config.storage_backend == "memory":
        logger.warning("Using in-memory storage; accounts are lost on exit")
        return MemoryStore(), MemoryStore()
    secret_store = JsonFileStore(config.secret_store_path, private=True)
    general_store = JsonFileStore(config.general_store_path)
    return secret_store, general_store


def build_services(
    config: AppConfig,
    secret_store: Optional[SecretStore] = None,
    general_store: Optional[GeneralStore] = None,
    biometric_probe: Optional[BiometricProbe] = None,
) -> AppServices:
    if secret_store is None or general_store is None:
        secret_store, general_store = build_stores(config)
    auth = AuthService(
        secret_store,
        general_store,
        biometric_probe=biometric_probe,
        max_attempts=config.max_attempts,
        lockout_seconds=config.lockout_seconds,
    )
    return AppServices(
        auth=auth,
        notifications=NotificationService(general_store, max_items=config.notification_limit),
        drafts=RegistrationDraftService(general_store),
        general_store=general_store,
    )


def get_services(request: Request) -> AppServices:
    return request.app.state.services


def get_auth_service(services: AppServices = Depends(get_services)) -> AuthService:
    return services.auth


def get_notification_service(services: AppServices = Depends(get_services)) -> NotificationService:
    return services.notifications


def get_draft_service(services: AppServices = Depends(get_services)) -> RegistrationDraftService:
    return services.drafts


async def get_current_user(auth: AuthService = Depends(get_auth_service)) -> User:
    """The session's user, or 401"""
    user = await auth.get_current_user()
    if user is None:
        raise HTTPException(status_code=401, detail="Not logged in")
    return user
