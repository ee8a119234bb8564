"""Core data models for StoryFrame."""

import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

NO_CHARACTER = "None"


class AspectRatio(str, Enum):
    """Frame aspect ratio accepted by the image model."""

    SQUARE = "1:1"
    STANDARD = "4:3"
    WIDESCREEN = "16:9"
    PORTRAIT = "9:16"


class GenerationStatus(str, Enum):
    """Status of a single frame generation."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


def new_id() -> str:
    return str(uuid.uuid4())


# === Core Models ===


class Scene(BaseModel):
    """One scene block parsed from a storyboard script."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(gt=0)
    prompt: str
    character_name: str = NO_CHARACTER
    raw_block: str = ""

    @property
    def label(self) -> str:
        return scene_label(self.number)


class CharacterReference(BaseModel):
    """A named character reference image pinned by the user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    name: str
    image_bytes: bytes = Field(repr=False)
    mime_type: str = "image/png"


class GenerationResult(BaseModel):
    """Outcome of generating one storyboard frame.

    ``payload`` is only set while ``status`` is ``succeeded``.
    ``character_ref_id`` is a weak reference: it is looked up against the
    current registry at call time and simply misses if the character was
    deleted.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    prompt: str
    scene_label: str
    scene_script: str = ""
    status: GenerationStatus = GenerationStatus.PENDING
    payload: Optional[bytes] = Field(default=None, repr=False)
    character_ref_id: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is GenerationStatus.SUCCEEDED and self.payload is not None

    def mark(self, status: GenerationStatus, payload: Optional[bytes] = None) -> "GenerationResult":
        """Return a copy in ``status``; payload is dropped unless succeeded."""
        if status is not GenerationStatus.SUCCEEDED:
            payload = None
        return self.model_copy(update={"status": status, "payload": payload})


class GenerationOptions(BaseModel):
    """Per-run inputs shared by every frame of a run."""

    story_context: str = ""
    art_style: str = ""
    aspect_ratio: AspectRatio = AspectRatio.WIDESCREEN
    batch_size: Optional[int] = Field(default=10, gt=0)


def scene_label(number: int) -> str:
    """Display label for a scene number."""
    return f"Scene {number}"
