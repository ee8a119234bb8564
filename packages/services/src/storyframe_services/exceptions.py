"""Service layer exceptions."""

from storyframe_core_schemas.exceptions import (
    GenerationError,
    NotFoundError,
    ServiceError,
    ValidationError,
)


class GenerationInProgressError(ServiceError):
    """A generation run is already active."""

    def __init__(self, run_kind: str):
        self.run_kind = run_kind
        super().__init__(
            f"Cannot start a new run while '{run_kind}' is in progress",
            code="GENERATION_IN_PROGRESS",
        )


__all__ = [
    "GenerationError",
    "GenerationInProgressError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
]
