"""Shared fixtures for buildhooks tests."""

import pytest

from buildhooks.config import clear_config_instance
from buildhooks.pipeline.context import DataChannel, ExecutionContext


@pytest.fixture(autouse=True)
def cleanup():
    """Clean up the global config between tests."""
    yield
    clear_config_instance()


def make_context(
    mapped=None,
    unmapped=None,
    rollback_mapped=None,
    rollback_unmapped=None,
    step_id="test-step",
) -> ExecutionContext:
    """Build an ExecutionContext from plain values."""
    return ExecutionContext(
        step_id=step_id,
        data=DataChannel.from_values(mapped=mapped, unmapped=unmapped),
        rollback_data=DataChannel.from_values(mapped=rollback_mapped, unmapped=rollback_unmapped),
    )


@pytest.fixture
def context_factory():
    return make_context
