"""Generation pipelines for StoryFrame."""

from .image import FrameGenerator
from .script import (
    DIALOGUE_PLACEHOLDER,
    clean_story_context,
    extract_prompt,
    parse_script,
    replace_prompt,
    scene_number_from_label,
    strip_dialogue,
)

__all__ = [
    "FrameGenerator",
    "DIALOGUE_PLACEHOLDER",
    "clean_story_context",
    "extract_prompt",
    "parse_script",
    "replace_prompt",
    "scene_number_from_label",
    "strip_dialogue",
]
