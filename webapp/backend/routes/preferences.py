"""Preferences API routes for Mini App."""

from fastapi import APIRouter, Depends, HTTPException

from mathbot.services.preferences import PreferenceService
from webapp.backend.dependencies import get_preferences
from webapp.backend.schemas import PreferencesResponse, PreferencesUpdate

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("", response_model=PreferencesResponse)
async def get_user_preferences(preferences: PreferenceService = Depends(get_preferences)):
    return PreferencesResponse(
        language=await preferences.get_language(),
        theme=await preferences.get_theme(),
    )


@router.put("", response_model=PreferencesResponse)
async def update_user_preferences(
    update: PreferencesUpdate,
    preferences: PreferenceService = Depends(get_preferences),
):
    """Update language and/or theme."""
    try:
        if update.language is not None:
            await preferences.set_language(update.language)
        if update.theme is not None:
            await preferences.set_theme(update.theme)
    except ValueError as e:
        raise HTTPException(
            status_code=422,
            detail=str(e),
        )

    return PreferencesResponse(
        language=await preferences.get_language(),
        theme=await preferences.get_theme(),
    )
