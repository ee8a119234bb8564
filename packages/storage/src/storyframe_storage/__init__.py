"""Session storage for StoryFrame."""

from storyframe_storage.store import Listener, ResultStore, Snapshot

__all__ = ["Listener", "ResultStore", "Snapshot"]
