"""Sequential frame generation service.

Frames are generated strictly one at a time because every frame uses the
previous frame's output as its continuity reference. A failed frame leaves
a gap in the chain: the next frame is generated without a continuity
reference rather than reaching further back.
"""

import asyncio
import logging
import re
from typing import Awaitable, Callable, Iterable, Optional, Sequence

from storyframe_core_schemas import (
    GenerationOptions,
    GenerationResult,
    GenerationStatus,
    Scene,
    scene_label,
)
from storyframe_generators import (
    FrameGenerator,
    clean_story_context,
    parse_script,
    replace_prompt,
    scene_number_from_label,
    strip_dialogue,
)
from storyframe_storage import ResultStore
from .character import CharacterService
from .config import Settings
from .exceptions import GenerationError, GenerationInProgressError, ValidationError
from .run import CancellationToken, GenerationRun, RunKind

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


def find_previous_payload(
    script_text: str,
    results: Iterable[GenerationResult],
    label: str,
) -> Optional[bytes]:
    """Find the continuity reference for a single-frame regeneration.

    The scene preceding ``label`` is taken from a fresh parse of the current
    script, and its image from the most recent succeeded result carrying
    that scene's label.
    """
    number = scene_number_from_label(label)
    if number is None:
        return None

    scenes = parse_script(script_text)
    index = next((i for i, scene in enumerate(scenes) if scene.number == number), -1)
    if index <= 0:
        return None

    # "Scene 1" must not pick up "Scene 12"
    pattern = re.compile(rf"^{re.escape(scene_label(scenes[index - 1].number))}(?!\d)")
    for result in reversed(list(results)):
        if result.succeeded and pattern.match(result.scene_label):
            return result.payload
    return None


class GenerationService:
    """Runs generation over the result store.

    Three procedures share the same retry and chaining rules:
    - generate_all: fresh results for a list of scenes
    - regenerate_all: re-run every existing result in place
    - regenerate: re-run one result, continuity recomputed from the script

    Only one procedure may run at a time.
    """

    def __init__(
        self,
        store: ResultStore,
        characters: CharacterService,
        generator: Optional[FrameGenerator] = None,
        settings: Optional[Settings] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize the service.

        Args:
            store: Result store to publish into
            characters: Character registry used for references
            generator: Frame generator (a default one is created if not provided)
            settings: Retry settings
            sleep: Awaitable used for the pause between attempts
        """
        self.store = store
        self.characters = characters
        self.generator = generator or FrameGenerator()
        self.settings = settings or Settings()
        self._sleep = sleep
        self._active: Optional[GenerationRun] = None
        self._token: Optional[CancellationToken] = None

    @property
    def is_generating(self) -> bool:
        return self._active is not None

    @property
    def active_run(self) -> Optional[GenerationRun]:
        return self._active

    def cancel(self) -> bool:
        """Request the active run to stop at the next scene boundary.

        Returns:
            True if a run was active
        """
        if self._token is None:
            return False
        logger.info("Cancellation requested for %s run", self._active.kind.value)
        self._token.cancel()
        return True

    def _begin(
        self,
        kind: RunKind,
        total: int,
        token: Optional[CancellationToken],
    ) -> tuple[GenerationRun, CancellationToken]:
        run = GenerationRun(kind=kind, total=total)
        self._active = run
        self._token = token or CancellationToken()
        logger.info("Starting %s run %s over %d frame(s)", kind.value, run.id, total)
        return run, self._token

    def _end(self, run: GenerationRun, token: CancellationToken) -> None:
        run.finish(cancelled=token.cancelled)
        self._active = None
        self._token = None
        logger.info(
            "Run %s %s: %d succeeded, %d failed, %d cancelled",
            run.id, run.status.value, run.succeeded, run.failed, run.cancelled,
        )

    def _check_idle(self) -> None:
        if self._active is not None:
            raise GenerationInProgressError(self._active.kind.value)

    async def _generate_with_retry(
        self,
        result: GenerationResult,
        options: GenerationOptions,
        previous_image: Optional[bytes],
        token: CancellationToken,
        variant: bool = False,
        prompt: Optional[str] = None,
    ) -> Optional[bytes]:
        """Call the generator with the retry policy.

        Returns:
            Image data, or None once every attempt failed
        """
        prompt_for_api = strip_dialogue(prompt if prompt is not None else result.prompt)
        story_context = clean_story_context(options.story_context)
        max_attempts = self.settings.max_attempts

        for attempt in range(1, max_attempts + 1):
            # Resolved per attempt so a deleted character stops being sent
            character_ref = self.characters.find_character(result.character_ref_id)
            logger.info(
                "Generating %s, attempt %d/%d", result.scene_label, attempt, max_attempts
            )
            try:
                return await self.generator.generate(
                    prompt_for_api,
                    story_context=story_context,
                    art_style=options.art_style,
                    aspect_ratio=options.aspect_ratio,
                    character_ref=character_ref,
                    previous_image=previous_image,
                    variant=variant,
                )
            except GenerationError as e:
                logger.warning(
                    "Attempt %d/%d failed for %s: %s",
                    attempt, max_attempts, result.scene_label, e,
                )
            if attempt < max_attempts and not token.cancelled:
                await self._sleep(self.settings.retry_delay)
            if token.cancelled:
                break

        return None

    def _cancel_remaining(self, run: GenerationRun, result_ids: Sequence[str]) -> None:
        logger.info("Generation stopped by user; cancelling %d frame(s)", len(result_ids))
        self.store.mark_many(result_ids, GenerationStatus.CANCELLED)
        run.record(GenerationStatus.CANCELLED, len(result_ids))

    async def _run_chain(
        self,
        run: GenerationRun,
        result_ids: list[str],
        chain: list[Optional[bytes]],
        options: GenerationOptions,
        token: CancellationToken,
        variant: bool,
    ) -> None:
        for i, result_id in enumerate(result_ids):
            if token.cancelled:
                self._cancel_remaining(run, result_ids[i:])
                return

            result = self.store.get(result_id)
            previous_image = chain[i - 1] if i > 0 else None

            image_data = await self._generate_with_retry(
                result, options, previous_image, token, variant=variant
            )

            # A result that arrives after a stop request is discarded
            if token.cancelled:
                self._cancel_remaining(run, result_ids[i:])
                return

            chain[i] = image_data
            if image_data is not None:
                self.store.set_status(result_id, GenerationStatus.SUCCEEDED, image_data)
                run.record(GenerationStatus.SUCCEEDED)
            else:
                self.store.set_status(result_id, GenerationStatus.FAILED)
                run.record(GenerationStatus.FAILED)

    def _character_ref_id(self, scene: Scene) -> Optional[str]:
        character = self.characters.resolve(scene.character_name)
        return character.id if character else None

    async def generate_all(
        self,
        scenes: Iterable[Scene],
        options: GenerationOptions,
        token: Optional[CancellationToken] = None,
    ) -> GenerationRun:
        """Generate one frame per scene, replacing the store's contents.

        Args:
            scenes: Parsed scenes in script order
            options: Run options (context, style, aspect ratio, batch size)
            token: Cancellation token (a fresh one is created if not provided)

        Returns:
            Run summary

        Raises:
            ValidationError: If there are no scenes
            GenerationInProgressError: If another run is active
        """
        self._check_idle()

        scenes = list(scenes)
        if options.batch_size:
            scenes = scenes[:options.batch_size]
        if not scenes:
            raise ValidationError(
                "No valid prompts found. Please check the script format.",
                field="script",
            )

        run, token = self._begin(RunKind.GENERATE_ALL, len(scenes), token)
        try:
            results = [
                GenerationResult(
                    prompt=scene.prompt,
                    scene_label=scene.label,
                    scene_script=scene.raw_block,
                    character_ref_id=self._character_ref_id(scene),
                )
                for scene in scenes
            ]
            self.store.replace_all(results)

            await self._run_chain(
                run,
                [r.id for r in results],
                [None] * len(results),
                options,
                token,
                variant=False,
            )
        finally:
            self._end(run, token)

        return run

    async def regenerate_all(
        self,
        options: GenerationOptions,
        token: Optional[CancellationToken] = None,
    ) -> Optional[GenerationRun]:
        """Regenerate every result in place, keeping ids and order.

        Returns:
            Run summary, or None if the store is empty

        Raises:
            GenerationInProgressError: If another run is active
        """
        self._check_idle()

        results = self.store.results
        if not results:
            logger.info("Nothing to regenerate")
            return None

        run, token = self._begin(RunKind.REGENERATE_ALL, len(results), token)
        try:
            chain = [r.payload if r.succeeded else None for r in results]
            result_ids = [r.id for r in results]
            self.store.mark_many(result_ids, GenerationStatus.PENDING)

            await self._run_chain(run, result_ids, chain, options, token, variant=True)
        finally:
            self._end(run, token)

        return run

    async def regenerate(
        self,
        result_id: str,
        script_text: str,
        options: GenerationOptions,
        prompt_override: Optional[str] = None,
        token: Optional[CancellationToken] = None,
    ) -> GenerationResult:
        """Regenerate a single result.

        Args:
            result_id: Result to regenerate
            script_text: Current script, used to find the preceding scene
            options: Run options
            prompt_override: New prompt; on success it also replaces the
                prompt field of the result's scene script
            token: Cancellation token

        Returns:
            The updated result

        Raises:
            NotFoundError: If the result does not exist
            GenerationInProgressError: If another run is active
        """
        self._check_idle()
        target = self.store.get(result_id)

        run, token = self._begin(RunKind.REGENERATE, 1, token)
        try:
            self.store.set_status(result_id, GenerationStatus.PENDING)
            previous_image = find_previous_payload(
                script_text, self.store.results, target.scene_label
            )
            prompt = prompt_override if prompt_override is not None else target.prompt

            image_data = await self._generate_with_retry(
                target, options, previous_image, token, variant=True, prompt=prompt
            )

            if token.cancelled:
                status = GenerationStatus.CANCELLED
                updated = self.store.set_status(result_id, status)
            elif image_data is not None:
                status = GenerationStatus.SUCCEEDED
                changes = {"status": status, "payload": image_data}
                if prompt_override is not None:
                    current = self.store.get(result_id)
                    changes["prompt"] = prompt_override
                    changes["scene_script"] = replace_prompt(current.scene_script, prompt_override)
                updated = self.store.update(result_id, **changes)
            else:
                status = GenerationStatus.FAILED
                updated = self.store.set_status(result_id, status)
            run.record(status)
        finally:
            self._end(run, token)

        return updated
