"""
Tests for the frame generator

Tests for storyframe_generators/image.py
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from storyframe_core_schemas import AspectRatio, CharacterReference, GenerationError
from storyframe_generators import FrameGenerator

from conftest import PNG_BYTES


@pytest.fixture
def client() -> MagicMock:
    mock = MagicMock()
    mock.generate_image = AsyncMock(return_value=(b"frame", {"model": "test"}))
    return mock


@pytest.fixture
def frame_generator(client) -> FrameGenerator:
    return FrameGenerator(client=client)


@pytest.fixture
def anna() -> CharacterReference:
    return CharacterReference(name="Anna", image_bytes=PNG_BYTES, mime_type="image/jpeg")


class TestBuildPrompt:
    """Tests for prompt templating."""

    def test_includes_style_context_and_prompt(self, frame_generator):
        prompt = frame_generator.build_prompt(
            "A dog runs.", story_context="A rainy town.", art_style=" watercolor "
        )

        assert "**watercolor**" in prompt
        assert "A rainy town." in prompt
        assert prompt.endswith("A dog runs.")

    def test_no_style_rule_without_style(self, frame_generator):
        prompt = frame_generator.build_prompt("A dog runs.")

        assert "MANDATORY ART STYLE" not in prompt
        assert "2. **ABSOLUTELY CLEAN IMAGE:**" in prompt

    def test_variant_drops_progression_rule(self, frame_generator):
        assert "SCENE PROGRESSION" in frame_generator.build_prompt("x")
        assert "SCENE PROGRESSION" not in frame_generator.build_prompt("x", variant=True)

    def test_reference_rules_follow_references(self, frame_generator, anna):
        both = frame_generator.build_prompt("x", character_ref=anna, has_previous=True)
        character_only = frame_generator.build_prompt("x", character_ref=anna)
        previous_only = frame_generator.build_prompt("x", has_previous=True)
        neither = frame_generator.build_prompt("x")

        assert "TWO (2) reference images" in both
        assert "'Anna'" in character_only and "ONE (1)" in character_only
        assert "IMMEDIATELY PRECEDING" in previous_only and "Anna" not in previous_only
        assert "REFERENCE IMAGE" not in neither


class TestGenerate:
    """Tests for the image model call."""

    @pytest.mark.asyncio
    async def test_returns_image_bytes(self, frame_generator, client):
        assert await frame_generator.generate("A dog runs.") == b"frame"

        kwargs = client.generate_image.await_args.kwargs
        assert kwargs["reference_images"] is None
        assert kwargs["aspect_ratio"] == "16:9"

    @pytest.mark.asyncio
    async def test_reference_order(self, frame_generator, client, anna):
        await frame_generator.generate("A dog runs.", character_ref=anna, previous_image=b"prev")

        references = client.generate_image.await_args.kwargs["reference_images"]
        assert [(data, mime) for data, mime, _ in references] == [
            (PNG_BYTES, "image/jpeg"),
            (b"prev", "image/png"),
        ]
        assert "Anna" in references[0][2]

    @pytest.mark.asyncio
    async def test_previous_frame_only(self, frame_generator, client):
        await frame_generator.generate("A dog runs.", previous_image=b"prev")

        references = client.generate_image.await_args.kwargs["reference_images"]
        assert len(references) == 1
        assert references[0][0] == b"prev"

    @pytest.mark.asyncio
    async def test_aspect_ratio(self, frame_generator, client):
        await frame_generator.generate("x", aspect_ratio=AspectRatio.PORTRAIT)

        assert client.generate_image.await_args.kwargs["aspect_ratio"] == "9:16"

    @pytest.mark.asyncio
    async def test_wraps_errors(self, frame_generator, client, anna):
        client.generate_image.side_effect = RuntimeError("No image in response")

        with pytest.raises(GenerationError) as exc_info:
            await frame_generator.generate("x", character_ref=anna)

        assert "No image in response" in exc_info.value.message
        assert exc_info.value.details == {"references": ["character reference for Anna"]}

    @pytest.mark.asyncio
    async def test_generation_error_passes_through(self, frame_generator, client):
        error = GenerationError("quota")
        client.generate_image.side_effect = error

        with pytest.raises(GenerationError) as exc_info:
            await frame_generator.generate("x")

        assert exc_info.value is error
