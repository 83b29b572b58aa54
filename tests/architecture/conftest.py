"""Shared fixtures for architecture tests."""

import os

import pytest
from pytestarch import (
    EvaluableArchitecture,
    LayeredArchitecture,
    get_evaluable_architecture,
)


@pytest.fixture(scope="session")
def evaluable() -> EvaluableArchitecture:
    """Build evaluable architecture from src/lazi."""
    src_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "..", "src")
    )
    project_path = os.path.join(src_dir, "lazi")
    return get_evaluable_architecture(src_dir, project_path)


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Define the hexagonal layers plus the pure generator package.

    PyTestArch resolves module names relative to the source root,
    so modules appear as 'src.lazi.domain', etc.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules(["src.lazi.domain"])
        .layer("generators")
        .containing_modules(["src.lazi.generators"])
        .layer("application")
        .containing_modules(["src.lazi.application"])
        .layer("infrastructure")
        .containing_modules(["src.lazi.infrastructure"])
        .layer("cli")
        .containing_modules(["src.lazi.cli"])
    )
