"""
Generator compiler for custom workflow nodes.

Turns a node's per-script-type generator source into a callable
``(config, branches) -> str``. Pure: no store, filesystem or network access.
"""

from lazi.generators.compiler import (
    CompiledGenerator,
    GeneratorForm,
    classify,
    compile_generator,
    error_comment,
)
from lazi.generators.template import indent_continuation, render_template, stringify

__all__ = [
    "CompiledGenerator",
    "GeneratorForm",
    "classify",
    "compile_generator",
    "error_comment",
    "render_template",
    "indent_continuation",
    "stringify",
]
