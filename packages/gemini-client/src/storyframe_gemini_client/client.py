"""Gemini API client wrapper for StoryFrame."""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from google import genai
from google.genai import types

# (image bytes, mime type, role label)
ReferenceImage = tuple[bytes, str, str]

MIME_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}


def load_reference_image(path: Path) -> tuple[bytes, str]:
    """Load an image file as (bytes, mime type).

    Raises:
        FileNotFoundError: If the file does not exist
    """
    with open(path, "rb") as f:
        image_data = f.read()

    mime_type = MIME_TYPES.get(path.suffix.lower(), "image/png")
    return image_data, mime_type


class GeminiClient:
    """Wrapper for the Google Gemini image model."""

    IMAGE_MODEL = "gemini-2.5-flash-image"

    def __init__(
        self,
        api_key: Optional[str] = None,
        image_model: Optional[str] = None,
    ):
        """Initialize Gemini client.

        Args:
            api_key: Google API key (defaults to GOOGLE_API_KEY env var)
            image_model: Model to use for image generation
        """
        # Standardize on GOOGLE_API_KEY (unset GEMINI_API_KEY to avoid SDK warning)
        if "GEMINI_API_KEY" in os.environ:
            del os.environ["GEMINI_API_KEY"]

        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        if not self.api_key:
            raise ValueError(
                "GOOGLE_API_KEY environment variable is required. "
                "Get one at https://aistudio.google.com/apikey"
            )

        self.image_model = image_model or self.IMAGE_MODEL
        self.client = genai.Client(api_key=self.api_key)

    async def generate_image(
        self,
        prompt: str,
        reference_images: Optional[list[ReferenceImage]] = None,
        aspect_ratio: str = "16:9",
    ) -> tuple[bytes, dict]:
        """Generate an image.

        Args:
            prompt: Image generation prompt
            reference_images: Optional list of (data, mime_type, role) tuples.
                Role examples: "character reference", "previous frame"
            aspect_ratio: Aspect ratio (1:1, 4:3, 16:9, 9:16)

        Returns:
            Tuple of (image_data, response_metadata)

        Raises:
            RuntimeError: If the response carries no image
        """
        contents: list[Any] = []

        # Each reference image is preceded by its role label
        for data, mime_type, role in reference_images or []:
            contents.append(f"[{role}]:")
            contents.append(types.Part.from_bytes(data=data, mime_type=mime_type))
        contents.append(prompt)

        config = types.GenerateContentConfig(
            response_modalities=["IMAGE"],
            image_config=types.ImageConfig(aspect_ratio=aspect_ratio),
        )

        response = await self.client.aio.models.generate_content(
            model=self.image_model,
            contents=contents,
            config=config,
        )

        response_metadata: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "input": {
                "model": self.image_model,
                "references": [role for _, _, role in reference_images or []],
                "aspect_ratio": aspect_ratio,
            },
            "output": {},
        }

        if not response.candidates:
            raise RuntimeError(
                "Gemini API response has no candidates. "
                "This may indicate content was blocked or an API error occurred."
            )
        candidate = response.candidates[0]

        if getattr(candidate, "finish_reason", None):
            response_metadata["output"]["finish_reason"] = str(candidate.finish_reason)

        image_data = None
        parts = candidate.content.parts if candidate.content and candidate.content.parts else []
        for part in parts:
            if part.inline_data is not None and part.inline_data.data:
                image_data = part.inline_data.data
                break

        if image_data is None:
            raise RuntimeError("No image data found in API response")

        return image_data, response_metadata


# Singleton instance for convenience
_client: Optional[GeminiClient] = None


def get_client() -> GeminiClient:
    """Get or create the global Gemini client."""
    global _client
    if _client is None:
        _client = GeminiClient()
    return _client

