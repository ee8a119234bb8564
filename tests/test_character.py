"""
Tests for the character reference registry

Tests for storyframe_services/character.py
"""

import pytest

from storyframe_core_schemas import NotFoundError
from storyframe_services import CharacterService, resolve_character

from conftest import PNG_BYTES


class TestResolveCharacter:
    """Tests for name matching."""

    def test_substring_match(self, characters):
        john = characters.add_character("John", PNG_BYTES)

        assert characters.resolve("John Smith") == john

    def test_case_insensitive(self, characters):
        anna = characters.add_character("anna", PNG_BYTES)

        assert characters.resolve("ANNA, in a red coat") == anna

    def test_first_registered_match_wins(self, characters):
        ann = characters.add_character("Ann", PNG_BYTES)
        characters.add_character("Anna", PNG_BYTES)

        assert characters.resolve("Anna") == ann

    def test_no_match(self, characters):
        characters.add_character("Anna", PNG_BYTES)

        assert characters.resolve("None") is None

    def test_blank_name_never_matches(self, characters):
        characters.add_character("  ", PNG_BYTES)

        assert characters.resolve("Anna") is None

    def test_plain_function_over_iterable(self):
        service = CharacterService()
        bob = service.add_character("Bob", PNG_BYTES)

        assert resolve_character("Uncle Bob", service.characters) == bob
        assert resolve_character("Uncle Bob", []) is None


class TestCharacterService:
    """Tests for registry management."""

    def test_add_from_file(self, characters, tmp_path):
        path = tmp_path / "Claire.jpg"
        path.write_bytes(PNG_BYTES)

        character = characters.add_from_file(path)

        assert character.name == "Claire"
        assert character.mime_type == "image/jpeg"
        assert character.image_bytes == PNG_BYTES

    def test_add_from_file_with_name(self, characters, tmp_path):
        path = tmp_path / "ref.png"
        path.write_bytes(PNG_BYTES)

        character = characters.add_from_file(path, name="Anna")

        assert character.name == "Anna"
        assert character.mime_type == "image/png"

    def test_add_from_missing_file(self, characters, tmp_path):
        with pytest.raises(FileNotFoundError):
            characters.add_from_file(tmp_path / "missing.png")

    def test_rename_keeps_id_and_position(self, characters):
        first = characters.add_character("Ann", PNG_BYTES)
        characters.add_character("Bob", PNG_BYTES)

        renamed = characters.rename_character(first.id, "Anna")

        assert renamed.id == first.id
        assert characters.characters[0].name == "Anna"
        assert characters.resolve("Anna") == renamed

    def test_delete_makes_lookup_miss(self, characters):
        anna = characters.add_character("Anna", PNG_BYTES)

        assert characters.delete_character(anna.id) is True
        assert characters.find_character(anna.id) is None
        assert characters.delete_character(anna.id) is False

    def test_get_character_not_found(self, characters):
        with pytest.raises(NotFoundError):
            characters.get_character("missing")

    def test_find_character_without_id(self, characters):
        assert characters.find_character(None) is None

    def test_list_characters(self, characters):
        for name in ("A", "B", "C"):
            characters.add_character(name, PNG_BYTES)

        page, total = characters.list_characters(limit=2, offset=1)

        assert total == 3
        assert [c.name for c in page] == ["B", "C"]
