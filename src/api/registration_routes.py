"""
Registration Draft API Routes

Save, resume and discard the registration wizard's progress.
"""

import logging
from fastapi import APIRouter, Depends

from src.api.dependencies import get_draft_service
from src.models.account import PartialRegistration
from src.models.results import StorageWriteFailed
from src.services.registration_service import RegistrationDraftService
from src.utils.error_handler import log_and_raise
from src.utils.response_models import success_response

logger = logging.getLogger(__name__)

registration_router = APIRouter(prefix="/api/v1/registration", tags=["Registration"])


@registration_router.get("/draft")
async def get_draft(drafts: RegistrationDraftService = Depends(get_draft_service)):
    draft = await drafts.get_partial()
    return success_response(data=draft.model_dump() if draft else None)


@registration_router.put("/draft")
async def save_draft(
    draft: PartialRegistration,
    drafts: RegistrationDraftService = Depends(get_draft_service)
):
    try:
        await drafts.save_partial(draft)
    except StorageWriteFailed as e:
        log_and_raise(500, "saving registration progress", e, logger)
    return success_response(data=draft.model_dump(), message="Draft saved")


@registration_router.delete("/draft")
async def clear_draft(drafts: RegistrationDraftService = Depends(get_draft_service)):
    await drafts.clear_partial()
    return success_response(message="Draft cleared")
