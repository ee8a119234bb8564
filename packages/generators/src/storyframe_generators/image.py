"""Storyboard frame image generator."""

import logging
from typing import Optional

from storyframe_core_schemas import AspectRatio, CharacterReference, GenerationError
from storyframe_gemini_client import GeminiClient, ReferenceImage
from storyframe_generators.templates import render
from storyframe_generators.templates.frame import FRAME_PROMPT

logger = logging.getLogger(__name__)

# Generated frames come back from the model as PNG
PREVIOUS_FRAME_MIME_TYPE = "image/png"


class FrameGenerator:
    """Generates one storyboard frame per call.

    This is the only boundary to the image model: prompt templating and
    payload shape stay in here, and every failure surfaces as
    ``GenerationError``.
    """

    def __init__(self, client: Optional[GeminiClient] = None, image_model: Optional[str] = None):
        """Initialize the frame generator.

        The client is created on first use so that a missing API key only
        fails the first generation call.

        Args:
            client: Gemini client (uses global client if not provided)
            image_model: Image model for a dedicated client
        """
        self._client = client
        self._image_model = image_model

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            if self._image_model:
                self._client = GeminiClient(image_model=self._image_model)
            else:
                from storyframe_gemini_client import get_client

                self._client = get_client()
        return self._client

    def build_prompt(
        self,
        prompt: str,
        story_context: str = "",
        art_style: str = "",
        character_ref: Optional[CharacterReference] = None,
        has_previous: bool = False,
        variant: bool = False,
    ) -> str:
        """Render the full frame prompt."""
        return render(
            FRAME_PROMPT,
            prompt=prompt,
            story_context=story_context,
            art_style=art_style.strip(),
            character_name=character_ref.name if character_ref else None,
            has_previous=has_previous,
            variant=variant,
        )

    def build_references(
        self,
        character_ref: Optional[CharacterReference] = None,
        previous_image: Optional[bytes] = None,
    ) -> list[ReferenceImage]:
        """Collect reference images: character first, previous frame second."""
        references: list[ReferenceImage] = []
        if character_ref:
            references.append(
                (character_ref.image_bytes, character_ref.mime_type, f"character reference for {character_ref.name}")
            )
        if previous_image:
            references.append((previous_image, PREVIOUS_FRAME_MIME_TYPE, "previous frame for style continuity"))
        return references

    async def generate(
        self,
        prompt: str,
        story_context: str = "",
        art_style: str = "",
        aspect_ratio: AspectRatio = AspectRatio.WIDESCREEN,
        character_ref: Optional[CharacterReference] = None,
        previous_image: Optional[bytes] = None,
        variant: bool = False,
    ) -> bytes:
        """Generate a single frame.

        Args:
            prompt: Scene prompt, already stripped of dialogue
            story_context: Story-wide context
            art_style: Art style applied to every frame
            aspect_ratio: Frame aspect ratio
            character_ref: Character reference image, if any
            previous_image: Previous frame for continuity, if any
            variant: Suppress the "new moment" rule (used by regeneration)

        Returns:
            Image data as bytes

        Raises:
            GenerationError: On any API failure or an empty response
        """
        full_prompt = self.build_prompt(
            prompt,
            story_context=story_context,
            art_style=art_style,
            character_ref=character_ref,
            has_previous=previous_image is not None,
            variant=variant,
        )
        references = self.build_references(character_ref, previous_image)

        try:
            image_data, _ = await self.client.generate_image(
                prompt=full_prompt,
                reference_images=references or None,
                aspect_ratio=AspectRatio(aspect_ratio).value,
            )
        except GenerationError:
            raise
        except Exception as e:
            logger.debug("Image model call failed", exc_info=True)
            raise GenerationError(
                f"Failed to generate image: {e}",
                details={"references": [role for _, _, role in references]},
            ) from e

        return image_data
