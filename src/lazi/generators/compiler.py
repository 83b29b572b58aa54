"""
Generator compiler: turns a custom node's generator source into a callable.

Forms, classified in order:
- FUNCTION: ``lambda``/``def`` sources, and arrow-function shapes which
  are recognised only to be reported as unsupported
- SANDBOXED: sources holding a complete ``{% ... %}`` tag (jinja2, sandboxed);
  ``{#`` alone is ordinary shell (``${#items[@]}``) and does not opt in
- TEMPLATE: everything else (plain ``{{placeholder}}`` substitution)

Every failure, at compile time or at call time, becomes ``# Error...``
comment text so one broken node never aborts a whole assembly. A source
that looks like jinja2 but does not parse is rendered as a plain template.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from jinja2 import Template, TemplateError

from lazi.generators.function import (
    FunctionCompileError,
    GeneratorFunction,
    call_function,
    compile_function,
)
from lazi.generators.sandboxed import compile_sandboxed, render_sandboxed
from lazi.generators.template import BRANCH_PREFIX, placeholder_keys, render_template

logger = logging.getLogger(__name__)

ARROW_RE = re.compile(r"^(\(.*?\)|[A-Za-z_$][\w$]*)\s*=>", re.DOTALL)
JS_FUNCTION_RE = re.compile(r"^function\s*\w*\s*\(")
PY_FUNCTION_RE = re.compile(r"^(lambda\b|def\s+\w+\s*\()")
SANDBOX_TAG_RE = re.compile(r"\{%.*?%\}", re.DOTALL)

DISABLED_MESSAGE = (
    "# Error: executable generators are disabled "
    "(enable with --allow-code or LAZI_ALLOW_CODE=1)"
)


class GeneratorForm(Enum):
    TEMPLATE = "template"
    SANDBOXED = "sandboxed"
    FUNCTION = "function"


def classify(source: str) -> GeneratorForm:
    trimmed = source.strip()
    if PY_FUNCTION_RE.match(trimmed) or ARROW_RE.match(trimmed) or JS_FUNCTION_RE.match(trimmed):
        return GeneratorForm.FUNCTION
    if SANDBOX_TAG_RE.search(trimmed):
        return GeneratorForm.SANDBOXED
    return GeneratorForm.TEMPLATE


def error_comment(message: str, prefix: str = "Error") -> str:
    """Collapse message to a single comment line."""
    flat = " ".join(str(message).split()) or "Unknown error"
    return f"# {prefix}: {flat}"


def _branch_reference_re(handle: str) -> re.Pattern[str]:
    # branches.h, branches['h'], branches.get('h'
    h = re.escape(handle)
    return re.compile(
        rf"branches\s*(?:\.\s*{h}(?![\w-])|\[\s*['\"]{h}['\"]\s*\]|\.get\(\s*['\"]{h}['\"])"
    )


@dataclass(frozen=True)
class CompiledGenerator:
    """
    Callable ``(config, branches) -> str`` produced by compile_generator.

    ``error`` is set when compilation failed; calling then returns it.
    """

    form: GeneratorForm
    source: str
    template: Template | None = None
    function: GeneratorFunction | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def references_branch(self, handle: str) -> bool:
        """
        True when the source splices in the branch text of ``handle``.

        Nodes attached to a handle the generator never references stay at
        top level, so a failed or branch-less generator cannot hide them.
        """
        if not self.ok:
            return False
        if self.form is GeneratorForm.TEMPLATE:
            return f"{BRANCH_PREFIX}{handle}" in placeholder_keys(self.source)
        return bool(_branch_reference_re(handle).search(self.source))

    def __call__(
        self,
        config: Mapping[str, Any] | None = None,
        branches: Mapping[str, str] | None = None,
    ) -> str:
        if self.error is not None:
            return self.error
        config = config or {}
        branches = branches or {}
        try:
            if self.function is not None:
                return call_function(self.function, config, branches)
            if self.template is not None:
                return render_sandboxed(self.template, config, branches)
            return render_template(self.source, config, branches)
        except Exception as e:  # generator code is user-authored
            logger.warning("Generator raised %s: %s", type(e).__name__, e)
            return error_comment(str(e) or type(e).__name__)


def compile_generator(source: str, allow_code: bool = False) -> CompiledGenerator:
    """
    Compile a generator source string.

    Args:
        source: Generator text from a custom node definition
        allow_code: Permit FUNCTION sources to be compiled and executed

    Returns:
        A CompiledGenerator; compile failures are carried in its ``error``
    """
    trimmed = source.strip()
    form = classify(trimmed)

    if form is GeneratorForm.FUNCTION:
        if not allow_code:
            return CompiledGenerator(form, trimmed, error=DISABLED_MESSAGE)
        if not PY_FUNCTION_RE.match(trimmed):
            return CompiledGenerator(
                form,
                trimmed,
                error=error_comment(
                    "JavaScript function sources are not supported; use a Python lambda or def",
                    "Error compiling generator",
                ),
            )
        try:
            func = compile_function(trimmed)
        except FunctionCompileError as e:
            logger.warning("Generator compile failed: %s", e)
            return CompiledGenerator(
                form, trimmed, error=error_comment(str(e), "Error compiling generator")
            )
        return CompiledGenerator(form, trimmed, function=func)

    if form is GeneratorForm.SANDBOXED:
        try:
            template = compile_sandboxed(trimmed)
        except TemplateError as e:
            logger.warning(
                "Generator is not a valid jinja2 template (%s); using plain substitution", e
            )
            return CompiledGenerator(GeneratorForm.TEMPLATE, trimmed)
        return CompiledGenerator(form, trimmed, template=template)

    return CompiledGenerator(form, trimmed)
