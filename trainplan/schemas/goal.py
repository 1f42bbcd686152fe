"""
Training goal schema.

A goal is a ``(type, priority)`` pair.  The type selects which objective
function scores a scheduler candidate; the priority scales it.  Types the
engine does not know are accepted and simply score 0.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class GoalType(str, Enum):
    """Goal types understood by the objective functions."""

    STRENGTH = "strength"
    ENDURANCE = "endurance"
    BODY_COMPOSITION = "body-composition"
    SPEED = "speed"
    AGILITY = "agility"
    OTHER = "other"


class Goal(BaseModel):
    """A single athlete goal."""

    type: str = Field(..., description="Goal type, e.g. 'strength' or 'body-composition'")
    priority: float = Field(1.0, gt=0.0, description="Relative weight of this goal's objective")

    @field_validator("type")
    @classmethod
    def normalise_type(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def known_type(self) -> GoalType | None:
        """Return the :class:`GoalType` for ``type``, or ``None`` if unknown."""
        try:
            return GoalType(self.type)
        except ValueError:
            return None
