"""
Domain exceptions for meal plans, blocks and items.

Every error raised by the service layer derives from ``MealPlanError`` and
knows how to render its user-visible payload via ``to_dict()``. Validation
and conflict errors carry structured detail; copy, persistence and parse
failures stay opaque so internals do not leak to callers.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MealPlanError(Exception):
    """Base exception for all meal plan errors."""

    public_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(MealPlanError):
    """Malformed input: bad time value, missing required field, bad amount."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message, "details": {self.field: self.message}}


class ConflictError(MealPlanError):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.message}
        if self.details:
            payload["details"] = self.details
        return payload


class BlockOverlapError(ConflictError):
    """
    The candidate interval intersects an existing block of the same plan.

    ``existing_block`` is the conflicting ``MealBlock``; ``candidate`` holds
    the rejected type and interval.
    """

    def __init__(self, existing_block, block_type: str, interval):
        self.existing_block = existing_block
        self.candidate_type = block_type
        self.candidate = interval
        super().__init__(
            "Time interval overlaps an existing block",
            details={
                "existing_block": {
                    "id": existing_block.id,
                    "type": existing_block.type,
                    "time_start": existing_block.time_start,
                    "time_end": existing_block.time_end,
                },
                "new_block": {
                    "type": block_type,
                    "time_start": interval.start,
                    "time_end": interval.end,
                },
            },
        )


class PlanExistsError(ConflictError):
    def __init__(self, user_id: int, day):
        super().__init__(
            "A plan for this date already exists",
            details={"user_id": user_id, "date": str(day)},
        )


class NotFoundError(MealPlanError):
    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class TargetNotFoundError(NotFoundError):
    def __init__(self, plan_id: Any):
        super().__init__("Target plan", plan_id)


class CopyFailedError(MealPlanError):
    public_message = "Failed to copy meal plan"

    def __init__(self):
        super().__init__()


class PersistenceError(MealPlanError):
    public_message = "Storage operation failed"

    def __init__(self):
        super().__init__()


class ParseError(MealPlanError):
    """Persisted data could not be parsed back into its typed form."""

    public_message = "Stored data is malformed"

    def __init__(self, detail: str):
        super().__init__()
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.message}: {self.detail}"
