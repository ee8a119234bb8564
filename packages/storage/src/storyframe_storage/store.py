"""In-memory store for generation results.

The store never mutates a published collection: every change builds a new
tuple and hands it to the subscribers, so a reader holding an older
snapshot keeps a consistent view.
"""

import logging
from typing import Callable, Iterable, Iterator, Optional

from storyframe_core_schemas import GenerationResult, GenerationStatus, NotFoundError

logger = logging.getLogger(__name__)

Snapshot = tuple[GenerationResult, ...]
Listener = Callable[[Snapshot], None]


class ResultStore:
    """Ordered collection of generation results, keyed by result id."""

    def __init__(self, results: Optional[Iterable[GenerationResult]] = None):
        self._results: Snapshot = tuple(results or ())
        self._listeners: list[Listener] = []

    @property
    def results(self) -> Snapshot:
        """Current snapshot."""
        return self._results

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[GenerationResult]:
        return iter(self._results)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new snapshot.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, results: Snapshot) -> None:
        self._results = results
        for listener in list(self._listeners):
            listener(results)

    def index_of(self, result_id: str) -> int:
        """Get the position of a result.

        Raises:
            NotFoundError: If no result has this id
        """
        for i, result in enumerate(self._results):
            if result.id == result_id:
                return i
        raise NotFoundError("GenerationResult", result_id)

    def get(self, result_id: str) -> GenerationResult:
        """Get a result by id.

        Raises:
            NotFoundError: If no result has this id
        """
        return self._results[self.index_of(result_id)]

    def replace_all(self, results: Iterable[GenerationResult]) -> Snapshot:
        """Publish a whole new collection at once."""
        self._publish(tuple(results))
        return self._results

    def append(self, result: GenerationResult) -> GenerationResult:
        self._publish(self._results + (result,))
        return result

    def put(self, result: GenerationResult) -> GenerationResult:
        """Replace the record with the same id, leaving every other entry alone.

        Raises:
            NotFoundError: If no result has this id
        """
        index = self.index_of(result.id)
        self._publish(self._results[:index] + (result,) + self._results[index + 1:])
        return result

    def update(self, result_id: str, **changes) -> GenerationResult:
        """Replace a result with a copy carrying ``changes``."""
        return self.put(self.get(result_id).model_copy(update=changes))

    def set_status(
        self,
        result_id: str,
        status: GenerationStatus,
        payload: Optional[bytes] = None,
    ) -> GenerationResult:
        return self.put(self.get(result_id).mark(status, payload))

    def mark_many(self, result_ids: Iterable[str], status: GenerationStatus) -> Snapshot:
        """Move several results to ``status`` in a single publish."""
        targets = set(result_ids)
        self._publish(
            tuple(r.mark(status) if r.id in targets else r for r in self._results)
        )
        return self._results
