from typing import Annotated

from fastapi import APIRouter, Depends

from dormhub.dependencies import CurrentPrincipal, get_preference_service
from dormhub.schemas.common.response import SuccessResponse
from dormhub.schemas.preference import PreferenceUpdate
from dormhub.services.preference import PreferenceService

router = APIRouter(prefix="/preferences", tags=["Preferences"])

PreferenceServiceDep = Annotated[PreferenceService, Depends(get_preference_service)]


@router.get("", summary="Saved room preferences")
def get_preferences(actor: CurrentPrincipal, service: PreferenceServiceDep) -> SuccessResponse:
    return SuccessResponse.create(data=service.get_preferences(actor))


@router.put("", summary="Save room preferences")
def update_preferences(
    body: PreferenceUpdate,
    actor: CurrentPrincipal,
    service: PreferenceServiceDep,
) -> SuccessResponse:
    preferences = service.update_preferences(actor, body)
    return SuccessResponse.create("Preferences updated successfully", preferences)
