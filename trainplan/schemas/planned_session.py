"""Planned session schema shared by periodization and progression."""

from pydantic import BaseModel, Field


class PlannedSession(BaseModel):
    """One session of a phase's weekly template."""

    day: int = Field(..., ge=0)
    modalities: list[str]
    intensity: float = Field(..., ge=0.0, le=1.0)
    primary_focus: str
    session_load: float = Field(..., ge=0.0)
    recovery_focus: str = "general"
