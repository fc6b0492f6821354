"""
Authentication API Routes

Endpoints for the local account:
- Password login / logout
- Registration (auto-login)
- Biometric login
- Current user
- Attempt counter and lockout countdown
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr

from src.api.dependencies import AppServices, get_auth_service, get_current_user, get_services
from src.models.account import LoginForm, RegistrationForm, User, build_new_user
from src.services.auth_service import AuthService
from src.utils.error_handler import raise_for_result
from src.utils.response_models import success_response

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])


# ==================== Pydantic Models ====================

class ResetAttemptsRequest(BaseModel):
    email: EmailStr


def _user_payload(user: Optional[User]) -> Optional[dict]:
    return user.model_dump() if user else None


# ==================== Endpoints ====================

@auth_router.post("/login")
async def login(
    form: LoginForm,
    auth: AuthService = Depends(get_auth_service)
):
    """
    Log in with email and password.

    Fails with 423 while the account is locked and 401 for a wrong
    email/password pair.
    """
    result = await auth.login(form.email, form.password)
    raise_for_result(result)
    return success_response(data=_user_payload(result.user), message="Login successful")


@auth_router.post("/register")
async def register(
    form: RegistrationForm,
    services: AppServices = Depends(get_services)
):
    """Create the account, seed its engagement state, and log in."""
    user = build_new_user(form)
    result = await services.auth.register(user, form.password)
    raise_for_result(result)
    await services.drafts.clear_partial()
    return success_response(data=_user_payload(result.user), message="Registration successful")


@auth_router.post("/logout")
async def logout(auth: AuthService = Depends(get_auth_service)):
    await auth.logout()
    return success_response(message="Logged out")


@auth_router.post("/biometric")
async def biometric_login(auth: AuthService = Depends(get_auth_service)):
    result = await auth.biometric_login()
    raise_for_result(result)
    return success_response(data=_user_payload(result.user), message="Login successful")


@auth_router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return success_response(data=_user_payload(user))


@auth_router.get("/attempts")
async def attempts(
    email: EmailStr,
    auth: AuthService = Depends(get_auth_service)
):
    """
    Remaining attempts and lockout countdown for an email.

    Read-only: once the countdown reaches zero the caller must POST
    /attempts/reset, otherwise remaining_attempts keeps reporting 0.
    """
    remaining = await auth.remaining_attempts(email)
    return success_response(data={
        "remaining_attempts": remaining,
        "locked": remaining == 0,
        "seconds_until_unlock": await auth.seconds_until_unlock(email),
    })


@auth_router.post("/attempts/reset")
async def reset_attempts(
    request: ResetAttemptsRequest,
    auth: AuthService = Depends(get_auth_service)
):
    await auth.reset_failed_attempts(request.email)
    return success_response(data={"remaining_attempts": await auth.remaining_attempts(request.email)})
