"""Generation run tracking and cooperative cancellation."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from storyframe_core_schemas import GenerationStatus


class RunKind(str, Enum):
    """Which controller procedure a run belongs to."""

    GENERATE_ALL = "generate_all"
    REGENERATE_ALL = "regenerate_all"
    REGENERATE = "regenerate"


class RunStatus(str, Enum):
    """Run status."""

    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class CancellationToken:
    """Advisory stop flag.

    Setting it never interrupts an in-flight call; the controller polls it
    between scenes.
    """

    def __init__(self):
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


@dataclass
class GenerationRun:
    """Summary of one controller run."""

    kind: RunKind
    total: int = 0
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    status: RunStatus = RunStatus.RUNNING
    succeeded: int = 0
    failed: int = 0
    cancelled: int = 0
    started_at: datetime = field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    @property
    def progress(self) -> int:
        return self.succeeded + self.failed + self.cancelled

    def record(self, status: GenerationStatus, count: int = 1) -> None:
        """Count results that reached a terminal status."""
        if status is GenerationStatus.SUCCEEDED:
            self.succeeded += count
        elif status is GenerationStatus.FAILED:
            self.failed += count
        elif status is GenerationStatus.CANCELLED:
            self.cancelled += count

    def finish(self, cancelled: bool = False) -> None:
        self.status = RunStatus.CANCELLED if cancelled else RunStatus.COMPLETED
        self.completed_at = datetime.now()

