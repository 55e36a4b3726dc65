"""Jinja2 template rendering for generated project documents.

Provides the ``TemplateRenderer`` class which renders the inline templates
used by the materializer (currently the project README) with per-project
context data.
"""

from __future__ import annotations

from typing import Any

from jinja2 import Environment

README_TEMPLATE = """\
# {{ app_name }}

{{ description }}

## How to Run
1. Open `index.html` in your web browser
2. Or use a local server like Live Server in VS Code

## Files
{% for filename in files %}
- `{{ filename }}`
{% endfor %}

Generated on: {{ generated_on }}
"""


class TemplateRenderer:
    """Renders Jinja2 template strings for project documents."""

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)

    def render_readme(self, context: dict[str, Any]) -> str:
        """Render the project README.

        Expects ``app_name``, ``description``, ``files`` and ``generated_on``
        in *context*.
        """
        return self.render_string(README_TEMPLATE, context)
