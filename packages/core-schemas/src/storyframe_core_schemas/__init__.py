"""Core domain models for StoryFrame."""

from storyframe_core_schemas.models import (
    # Constants
    NO_CHARACTER,
    # Enums
    AspectRatio,
    GenerationStatus,
    # Domain Models
    CharacterReference,
    GenerationOptions,
    GenerationResult,
    Scene,
    # Utilities
    new_id,
    scene_label,
)
from storyframe_core_schemas.exceptions import (
    GenerationError,
    NotFoundError,
    ServiceError,
    ValidationError,
)

__all__ = [
    # Constants
    "NO_CHARACTER",
    # Enums
    "AspectRatio",
    "GenerationStatus",
    # Domain Models
    "CharacterReference",
    "GenerationOptions",
    "GenerationResult",
    "Scene",
    # Utilities
    "new_id",
    "scene_label",
    # Exceptions
    "GenerationError",
    "NotFoundError",
    "ServiceError",
    "ValidationError",
]
