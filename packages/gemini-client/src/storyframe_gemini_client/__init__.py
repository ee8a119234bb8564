"""Google Gemini API client wrapper for StoryFrame."""

from storyframe_gemini_client.client import (
    GeminiClient,
    ReferenceImage,
    get_client,
    load_reference_image,
)

__all__ = ["GeminiClient", "ReferenceImage", "get_client", "load_reference_image"]
