"""Jinja2 prompt templates for StoryFrame."""

from functools import lru_cache

from jinja2 import BaseLoader, Environment, StrictUndefined, Template

# Undefined variables fail loudly instead of rendering as blanks
env = Environment(
    loader=BaseLoader(),
    trim_blocks=True,
    lstrip_blocks=True,
    undefined=StrictUndefined,
)


@lru_cache(maxsize=None)
def _compile(template_str: str) -> Template:
    return env.from_string(template_str)


def render(template_str: str, **kwargs) -> str:
    """Render a template string with the given context."""
    return _compile(template_str).render(**kwargs)
