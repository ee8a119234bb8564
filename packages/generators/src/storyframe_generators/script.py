"""Storyboard script parsing.

A script is plain text made of scene blocks::

    Scene 12: The question
    Location: "in the living room".
    Prompt (English prompt): A close-up on Claire, asking "Is he hurt?..."
    Character: Claire Hartley
    Duration: 5-7 seconds

Each block runs from its ``Scene <N>:`` header to the next header or the end
of the text. Vietnamese markers (``Cảnh <N>:``, ``Nhân vật:``,
``Thời lượng ảnh:``) are recognized as well. Blocks without a usable number
or prompt are skipped.
"""

import re
from typing import Optional

from storyframe_core_schemas import NO_CHARACTER, Scene

DIALOGUE_PLACEHOLDER = "(character is speaking)"

_SCENE_MARKER = r"(?:Scene|Cảnh)"
SCENE_HEADER_RE = re.compile(rf"{_SCENE_MARKER}[ \t]+(\d+):")
SCENE_BLOCK_RE = re.compile(
    rf"{_SCENE_MARKER}[ \t]+\d+:.*?(?={_SCENE_MARKER}[ \t]+\d+:|\Z)",
    re.DOTALL,
)


def _label(names: str) -> str:
    # Field label with an optional parenthetical, e.g. "Prompt (English prompt):"
    return rf"(?:{names})(?:[ \t]*\([^)\n]*\))?[ \t]*:"


_CHARACTER_NAMES = "Character|Nhân vật"
_TERMINATING_NAMES = f"{_CHARACTER_NAMES}|Duration|Thời lượng ảnh|Ken Burns Effect"

PROMPT_RE = re.compile(
    rf"({_label('Prompt')})[ \t]*(.*?)(?=\n[ \t]*{_label(_TERMINATING_NAMES)}|\Z)",
    re.DOTALL,
)
CHARACTER_RE = re.compile(rf"{_label(_CHARACTER_NAMES)}[ \t]*([^\n]*)")
LABEL_NUMBER_RE = re.compile(r"^Scene (\d+)")

_SINGLE_QUOTED_RE = re.compile(r"'[^']{15,}'")
_DOUBLE_QUOTED_RE = re.compile(r'"[^"]{15,}"')


def parse_script(text: str) -> list[Scene]:
    """Parse a script into scenes, in the order the blocks appear.

    Scene numbers are not re-sorted or de-duplicated.
    """
    scenes: list[Scene] = []

    for match in SCENE_BLOCK_RE.finditer(text):
        block = match.group(0)
        number = int(SCENE_HEADER_RE.match(block).group(1))
        prompt = extract_prompt(block)
        if number <= 0 or not prompt:
            continue

        character_match = CHARACTER_RE.search(block)
        character_name = character_match.group(1).strip() if character_match else ""

        scenes.append(
            Scene(
                number=number,
                prompt=prompt,
                character_name=character_name or NO_CHARACTER,
                raw_block=block.strip(),
            )
        )

    return scenes


def extract_prompt(script_text: str) -> Optional[str]:
    """Get the prompt field of a scene block, or None if it is missing or empty."""
    match = PROMPT_RE.search(script_text)
    if not match:
        return None
    return match.group(2).strip() or None


def replace_prompt(script_text: str, new_prompt: str) -> str:
    """Rewrite the prompt field of a scene block, keeping every other field."""
    return PROMPT_RE.sub(
        lambda m: f"{m.group(1)} {new_prompt}",
        script_text,
        count=1,
    )


def clean_story_context(text: str) -> str:
    """Drop any scene blocks pasted into the story context."""
    match = SCENE_HEADER_RE.search(text)
    if match:
        return text[: match.start()].strip()
    return text


def strip_dialogue(prompt: str) -> str:
    """Replace long quoted dialogue so the model does not paint it as text."""
    prompt = _SINGLE_QUOTED_RE.sub(DIALOGUE_PLACEHOLDER, prompt)
    return _DOUBLE_QUOTED_RE.sub(DIALOGUE_PLACEHOLDER, prompt)


def scene_number_from_label(label: str) -> Optional[int]:
    """Recover the scene number from a result label like "Scene 4 (edited)"."""
    match = LABEL_NUMBER_RE.match(label)
    return int(match.group(1)) if match else None
