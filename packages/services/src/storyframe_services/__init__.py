"""StoryFrame Services - generation logic shared by every front-end.

- StoryboardSession: session state and user actions
- GenerationService: sequential, chained frame generation
- CharacterService: character reference registry
"""

from .config import Settings
from .character import CharacterService, resolve_character
from .generation import GenerationService, find_previous_payload
from .run import CancellationToken, GenerationRun, RunKind, RunStatus
from .session import StoryboardSession

__all__ = [
    "Settings",
    "CharacterService",
    "resolve_character",
    "GenerationService",
    "find_previous_payload",
    "CancellationToken",
    "GenerationRun",
    "RunKind",
    "RunStatus",
    "StoryboardSession",
]
