"""
Executable generator sources.

A function source is a Python ``lambda`` or a single ``def`` taking
``(config, branches)`` and returning script text:

    lambda config, branches: f"Write-Host '{config['message']}'"

Sources run with a reduced builtins table. That narrows accidents, it is
not a security boundary, which is why these generators are opt-in.
"""

import ast
import builtins
from collections.abc import Callable, Mapping
from typing import Any

GeneratorFunction = Callable[[dict[str, Any], dict[str, str]], Any]

SAFE_BUILTINS = {
    name: getattr(builtins, name)
    for name in (
        "abs",
        "all",
        "any",
        "bool",
        "dict",
        "enumerate",
        "filter",
        "float",
        "int",
        "isinstance",
        "len",
        "list",
        "map",
        "max",
        "min",
        "range",
        "repr",
        "reversed",
        "round",
        "set",
        "sorted",
        "str",
        "sum",
        "tuple",
        "zip",
        "ValueError",
        "KeyError",
        "TypeError",
    )
}


class FunctionCompileError(ValueError):
    """The source is not a usable Python generator function."""


def _check_arity(args: ast.arguments) -> None:
    positional = len(args.posonlyargs) + len(args.args)
    if positional != 2 and args.vararg is None:
        raise FunctionCompileError(
            f"generator must take (config, branches), got {positional} parameter(s)"
        )


def _run(code: Any, namespace: dict[str, Any], mode: str) -> Any:
    # default values and decorators evaluate at definition time
    try:
        if mode == "eval":
            return eval(code, namespace)
        exec(code, namespace)
        return None
    except Exception as e:
        raise FunctionCompileError(f"{type(e).__name__}: {e}") from e


def compile_function(source: str) -> GeneratorFunction:
    """
    Compile a lambda or single-def source to a callable.

    Raises:
        FunctionCompileError: If the source does not parse or is not exactly
            one function of two parameters
    """
    source = source.strip()
    namespace: dict[str, Any] = {"__builtins__": SAFE_BUILTINS}

    if source.startswith("lambda"):
        try:
            tree = ast.parse(source, mode="eval")
        except SyntaxError as e:
            raise FunctionCompileError(f"invalid syntax: {e.msg}") from e
        if not isinstance(tree.body, ast.Lambda):
            raise FunctionCompileError("expected a single lambda expression")
        _check_arity(tree.body.args)
        func = _run(compile(tree, "<generator>", "eval"), namespace, "eval")
        result: GeneratorFunction = func
        return result

    try:
        module = ast.parse(source, mode="exec")
    except SyntaxError as e:
        raise FunctionCompileError(f"invalid syntax: {e.msg}") from e
    defs = [stmt for stmt in module.body if isinstance(stmt, ast.FunctionDef)]
    if len(module.body) != 1 or len(defs) != 1:
        raise FunctionCompileError("expected exactly one function definition")
    _check_arity(defs[0].args)
    _run(compile(module, "<generator>", "exec"), namespace, "exec")
    defined: GeneratorFunction = namespace[defs[0].name]
    return defined


def call_function(
    func: GeneratorFunction,
    config: Mapping[str, Any],
    branches: Mapping[str, str],
) -> str:
    """Invoke with copies of the inputs; None becomes empty text."""
    result = func(dict(config), dict(branches))
    return "" if result is None else str(result)
