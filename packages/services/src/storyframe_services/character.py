"""Character reference registry."""

import logging
from pathlib import Path
from typing import Iterable, Optional

from storyframe_core_schemas import CharacterReference
from storyframe_gemini_client import load_reference_image
from .exceptions import NotFoundError

logger = logging.getLogger(__name__)

UNNAMED_CHARACTER = "Unnamed"


def resolve_character(
    character_name: str,
    characters: Iterable[CharacterReference],
) -> Optional[CharacterReference]:
    """Find the first character whose name appears in ``character_name``.

    Matching is a case-insensitive substring test, so "John" matches
    "John Smith". Registry order decides between overlapping names.
    Blank names never match.
    """
    haystack = character_name.lower()
    for character in characters:
        if character.name.strip() and character.name.lower() in haystack:
            return character
    return None


class CharacterService:
    """Service for the session's character references.

    Entries keep insertion order, which is the order used to break ties
    when resolving names.
    """

    def __init__(self, characters: Optional[Iterable[CharacterReference]] = None):
        self._characters: list[CharacterReference] = list(characters or [])

    @property
    def characters(self) -> tuple[CharacterReference, ...]:
        """Snapshot of the registry in insertion order."""
        return tuple(self._characters)

    def list_characters(
        self,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[CharacterReference], int]:
        """List characters with pagination.

        Returns:
            Tuple of (characters, total_count)
        """
        total = len(self._characters)
        return self._characters[offset:offset + limit], total

    def find_character(self, character_id: Optional[str]) -> Optional[CharacterReference]:
        """Look up a character by id, or None if it no longer exists."""
        if not character_id:
            return None
        for character in self._characters:
            if character.id == character_id:
                return character
        return None

    def get_character(self, character_id: str) -> CharacterReference:
        """Get character by ID.

        Raises:
            NotFoundError: If character not found
        """
        character = self.find_character(character_id)
        if not character:
            raise NotFoundError("Character", character_id)
        return character

    def add_character(
        self,
        name: str,
        image_bytes: bytes,
        mime_type: str = "image/png",
    ) -> CharacterReference:
        """Register a new character reference.

        Returns:
            Created character
        """
        character = CharacterReference(
            name=name,
            image_bytes=image_bytes,
            mime_type=mime_type,
        )
        self._characters.append(character)
        logger.info("Added character reference '%s' (%s)", character.name, character.id)
        return character

    def add_from_file(self, path: Path, name: Optional[str] = None) -> CharacterReference:
        """Register a character from an image file, named after the file stem.

        Raises:
            FileNotFoundError: If the image does not exist
        """
        image_bytes, mime_type = load_reference_image(path)
        return self.add_character(name or path.stem or UNNAMED_CHARACTER, image_bytes, mime_type)

    def rename_character(self, character_id: str, name: str) -> CharacterReference:
        """Rename a character.

        Raises:
            NotFoundError: If character not found
        """
        character = self.get_character(character_id)
        renamed = character.model_copy(update={"name": name})
        self._characters[self._characters.index(character)] = renamed
        return renamed

    def delete_character(self, character_id: str) -> bool:
        """Delete a character.

        Results that pointed at it keep the id and simply stop finding it.

        Returns:
            True if deleted, False if not found
        """
        character = self.find_character(character_id)
        if not character:
            return False
        self._characters.remove(character)
        return True

    def resolve(self, character_name: str) -> Optional[CharacterReference]:
        """Match a scene's character name against the registry."""
        return resolve_character(character_name, self._characters)
