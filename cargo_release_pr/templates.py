"""PR title and body rendering.

Templates use EJS-style tags on top of Jinja2, so the action's historic
templates keep working:

    <%= crate.name %>            output an expression (not HTML-escaped)
    <% if pr.releaseNotes %>     statements, closed with <% endif %>
    <%# note %>                  comment

Output follows the old EJS rendering: None prints as nothing and booleans
print as true/false.

Template variables are described by TemplateVars.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jinja2

from .actions import debug
from .errors import ConfigurationError, TemplateRenderError
from .models import PRSettings, RenderedPR, TemplateVars

TEMPLATES_DIR = Path(__file__).parent / "templates"
DEFAULT_TEMPLATE = TEMPLATES_DIR / "default-template.md"


def _finalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


_env = jinja2.Environment(
    variable_start_string="<%=",
    variable_end_string="%>",
    block_start_string="<%",
    block_end_string="%>",
    comment_start_string="<%#",
    comment_end_string="%>",
    autoescape=False,
    keep_trailing_newline=True,
    trim_blocks=True,
    undefined=jinja2.StrictUndefined,
    finalize=_finalize,
)


def render(template: str, variables: TemplateVars | Mapping[str, Any]) -> str:
    """Render a template string against the template variables.

    Raises:
        TemplateRenderError: On a syntax error or an undefined variable.
    """
    namespace = (
        variables.namespace() if isinstance(variables, TemplateVars) else dict(variables)
    )
    try:
        return _env.from_string(template).render(namespace)
    except jinja2.TemplateSyntaxError as exc:
        raise TemplateRenderError(f"Template syntax error on line {exc.lineno}: {exc.message}") from exc
    except jinja2.TemplateError as exc:
        raise TemplateRenderError(f"Template rendering failed: {exc}") from exc


def resolve_body_template(
    template: str | None = None, template_file: str | Path | None = None
) -> str:
    """Pick the body template source.

    In order: the template file, the inline template if it is not blank,
    then the bundled default.

    Raises:
        ConfigurationError: If the template file cannot be read.
    """
    if template_file:
        debug(f"reading template from file: {template_file}")
        try:
            return Path(template_file).read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read pr-template-file {template_file}: {exc}") from exc

    if template and template.strip():
        debug("using template from input")
        return template

    debug("using default template")
    return DEFAULT_TEMPLATE.read_text(encoding="utf-8")


def render_pr(pr: PRSettings, variables: TemplateVars) -> RenderedPR:
    """Render the PR title, then the body with the title available as ``title``."""
    debug("rendering PR title template")
    title = render(pr.title, variables)
    debug(f'title rendered to "{title}"')

    template = resolve_body_template(pr.template, pr.template_file)
    debug("rendering PR body template")
    body = render(template, variables.with_title(title))
    return RenderedPR(title=title, body=body)
