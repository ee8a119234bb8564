"""StoryFrame command line interface."""

from storyframe_cli.cli import app

__all__ = ["app"]
