"""
Jinja2 templates rendered in a sandbox.

Used for generator sources that need conditionals or loops. Templates see
``config``, ``branches`` and every config key as a top-level name; the
built-in ``indent`` filter lines branch bodies up with surrounding code:

    {% if force %}Remove-Item -Force {{ path }}{% else %}Remove-Item {{ path }}{% endif %}
    {{ branches['true-path'] | indent(4) }}
"""

from collections.abc import Mapping
from typing import Any

from jinja2 import Template
from jinja2.sandbox import SandboxedEnvironment

from lazi.generators.template import stringify

_ENV = SandboxedEnvironment(
    autoescape=False,
    keep_trailing_newline=False,
    finalize=stringify,
)


def compile_sandboxed(source: str) -> Template:
    """
    Parse source once.

    Raises:
        jinja2.TemplateSyntaxError: If the template does not parse
    """
    return _ENV.from_string(source)


def render_sandboxed(
    template: Template,
    config: Mapping[str, Any],
    branches: Mapping[str, str],
) -> str:
    """
    Render with config keys exposed directly.

    Raises:
        jinja2.TemplateError: On undefined-attribute or sandbox violations
    """
    context: dict[str, Any] = dict(config)
    context["config"] = dict(config)
    context["branches"] = dict(branches)
    return template.render(context)
