"""Storyboard session - the state a front-end works against."""

import asyncio
import logging
from typing import Optional

from storyframe_core_schemas import (
    AspectRatio,
    GenerationOptions,
    GenerationResult,
    GenerationStatus,
    Scene,
    new_id,
)
from storyframe_generators import FrameGenerator, extract_prompt, parse_script
from storyframe_storage import ResultStore
from .character import CharacterService
from .config import Settings
from .exceptions import GenerationInProgressError
from .generation import GenerationService, Sleep
from .run import GenerationRun

logger = logging.getLogger(__name__)

EDITED_SUFFIX = " (edited)"


class StoryboardSession:
    """One user's in-memory storyboard session.

    Holds the text inputs, the character registry and the result store,
    and exposes the user actions of the storyboard screen. Nothing here
    outlives the process.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        generator: Optional[FrameGenerator] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings or Settings()
        self.story_context = ""
        self.art_style = ""
        self.script_text = ""
        self.aspect_ratio: AspectRatio = self.settings.default_aspect_ratio
        self.batch_size: Optional[int] = self.settings.default_batch_size

        self.characters = CharacterService()
        self.store = ResultStore()
        self.generation = GenerationService(
            self.store,
            self.characters,
            generator=generator or FrameGenerator(image_model=self.settings.image_model),
            settings=self.settings,
            sleep=sleep,
        )

    @property
    def options(self) -> GenerationOptions:
        return GenerationOptions(
            story_context=self.story_context,
            art_style=self.art_style,
            aspect_ratio=self.aspect_ratio,
            batch_size=self.batch_size,
        )

    @property
    def results(self) -> tuple[GenerationResult, ...]:
        return self.store.results

    @property
    def is_generating(self) -> bool:
        return self.generation.is_generating

    def parse_scenes(self) -> list[Scene]:
        """Parse the current script."""
        return parse_script(self.script_text)

    async def generate(self) -> GenerationRun:
        """Start a fresh run over the current script."""
        return await self.generation.generate_all(self.parse_scenes(), self.options)

    async def regenerate_all(self) -> Optional[GenerationRun]:
        """Regenerate every frame in place."""
        return await self.generation.regenerate_all(self.options)

    async def regenerate(
        self,
        result_id: str,
        prompt_override: Optional[str] = None,
    ) -> GenerationResult:
        """Regenerate one frame, optionally with a new prompt."""
        return await self.generation.regenerate(
            result_id,
            self.script_text,
            self.options,
            prompt_override=prompt_override,
        )

    async def edit_scene_script(self, result_id: str, new_script: str) -> GenerationResult:
        """Replace a frame's scene script and regenerate it with the new prompt.

        If the new script has no prompt field, the whole text is the prompt.
        """
        self._check_idle()

        new_prompt = extract_prompt(new_script) or new_script
        self.store.update(result_id, scene_script=new_script, prompt=new_prompt)
        return await self.regenerate(result_id, new_prompt)

    def _check_idle(self) -> None:
        # The controller is the only writer while a run is active
        if self.is_generating:
            raise GenerationInProgressError(self.generation.active_run.kind.value)

    def stop(self) -> bool:
        """Ask the active run to stop at the next scene boundary."""
        return self.generation.cancel()

    def save_edit(self, result_id: str, payload: bytes) -> GenerationResult:
        """Replace a frame's image with an edited one."""
        self._check_idle()
        return self.store.update(result_id, payload=payload, status=GenerationStatus.SUCCEEDED)

    def save_as_new(self, result_id: str, payload: bytes) -> GenerationResult:
        """Keep an edited image as an extra frame after the existing ones."""
        self._check_idle()
        source = self.store.get(result_id)
        duplicate = source.model_copy(
            update={
                "id": new_id(),
                "payload": payload,
                "status": GenerationStatus.SUCCEEDED,
                "scene_label": f"{source.scene_label}{EDITED_SUFFIX}",
            }
        )
        logger.info("Saved %s as new frame %s", source.scene_label, duplicate.id)
        return self.store.append(duplicate)
