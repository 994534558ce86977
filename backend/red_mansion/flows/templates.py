from typing import Any

from jinja2 import Environment, StrictUndefined

# Prompts are plain text, so no autoescaping. StrictUndefined turns a typo in a
# placeholder into an error instead of an empty substitution.
_env = Environment(
    autoescape=False,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_prompt(source: str, fields: dict[str, Any]) -> str:
    """Render a prompt template with request fields.

    Optional fields are passed through as None so `{% if field %}` blocks drop
    out cleanly when the caller omitted them.
    """
    return _env.from_string(source).render(**fields).strip()
