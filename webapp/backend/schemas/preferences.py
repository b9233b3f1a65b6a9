"""Preference schemas for Mini App API."""

from typing import Optional

from pydantic import BaseModel


class PreferencesResponse(BaseModel):
    language: str
    theme: str


class PreferencesUpdate(BaseModel):
    """Partial update; omitted fields are left unchanged."""

    language: Optional[str] = None
    theme: Optional[str] = None
