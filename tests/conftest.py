"""
Pytest Configuration and Fixtures

Shared fixtures for all tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from storyframe_core_schemas import GenerationOptions
from storyframe_services import CharacterService, GenerationService, Settings
from storyframe_storage import ResultStore

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"


@pytest.fixture
def script_text() -> str:
    """Three-scene script in the English format."""
    return """Scene 1: Arrival
Location: "the train station".
Prompt (English prompt): A dog runs across the platform.
Character: Anna
Duration: 5 seconds

Scene 2: Waiting
Prompt (English prompt): A cat sleeps on a bench.
Character: None

Scene 3: Departure
Prompt (English prompt): The train leaves at dusk.
Character: Anna Smith
"""


@pytest.fixture
def generator() -> MagicMock:
    """Frame generator whose generate() returns a distinct image per call."""
    counter = {"n": 0}

    async def fake_generate(prompt, **kwargs):
        counter["n"] += 1
        return f"img-{counter['n']}".encode()

    mock = MagicMock()
    mock.generate = AsyncMock(side_effect=fake_generate)
    return mock


@pytest.fixture
def sleep() -> AsyncMock:
    return AsyncMock(return_value=None)


@pytest.fixture
def characters() -> CharacterService:
    return CharacterService()


@pytest.fixture
def store() -> ResultStore:
    return ResultStore()


@pytest.fixture
def service(store, characters, generator, sleep) -> GenerationService:
    return GenerationService(
        store,
        characters,
        generator=generator,
        settings=Settings(),
        sleep=sleep,
    )


@pytest.fixture
def options() -> GenerationOptions:
    return GenerationOptions(story_context="A rainy town.", art_style="watercolor")
