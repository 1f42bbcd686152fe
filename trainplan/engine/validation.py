"""Input coercion shared by the engine entry points."""

from __future__ import annotations

from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError

from trainplan.core.errors import InvalidInputError
from trainplan.schemas.goal import Goal

M = TypeVar("M", bound=BaseModel)


def is_sequence(value: Any) -> bool:
    """Lists and tuples only; strings and mappings do not count."""
    return isinstance(value, (list, tuple))


def coerce_goals(goals: Any) -> list[Goal]:
    """Validate ``goals`` into a non-empty list of :class:`Goal`.

    Raises:
        InvalidInputError: ``EMPTY_GOALS`` if not a non-empty sequence,
            ``MALFORMED_GOALS`` if an entry fails validation.
    """
    if not is_sequence(goals) or len(goals) == 0:
        raise InvalidInputError("EMPTY_GOALS", ["At least one goal is required"])

    validated: list[Goal] = []
    for index, goal in enumerate(goals):
        if isinstance(goal, Goal):
            validated.append(goal)
            continue
        try:
            validated.append(Goal.model_validate(goal))
        except ValidationError as exc:
            raise InvalidInputError(
                "MALFORMED_GOALS", [f"goals[{index}]: {err['msg']}" for err in exc.errors()]
            ) from exc
    return validated


def coerce_model(value: Any, model: Type[M]) -> M:
    """Merge a partial mapping (or ``None``) over ``model``'s defaults.

    Pydantic validation errors propagate unchanged: a malformed constraint
    value is a caller bug, not a recoverable condition.
    """
    if value is None:
        return model()
    if isinstance(value, model):
        return value
    return model.model_validate(value)
