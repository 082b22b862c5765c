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
    """Build evaluable architecture from src/phasegate."""
    src_dir = os.path.abspath(
        os.path.join(os.path.dirname(__file__), "..", "..", "src")
    )
    project_path = os.path.join(src_dir, "phasegate")
    return get_evaluable_architecture(src_dir, project_path)


@pytest.fixture(scope="session")
def layers() -> LayeredArchitecture:
    """Define the three DDD layers plus the presentation edge (CLI, rendering).

    PyTestArch resolves module names relative to the source root,
    so modules appear as 'src.phasegate.domain', etc.
    """
    return (
        LayeredArchitecture()
        .layer("domain")
        .containing_modules(["src.phasegate.domain"])
        .layer("application")
        .containing_modules(["src.phasegate.application"])
        .layer("infrastructure")
        .containing_modules(["src.phasegate.infrastructure"])
        .layer("presentation")
        .containing_modules(["src.phasegate.cli", "src.phasegate.visualization"])
    )
