from __future__ import annotations

import pytest

from tests._fixtures.packages import MemoryResolutionContext, WorkspaceBuilder


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def resolution_context() -> MemoryResolutionContext:
    """Provide an empty in-memory file system."""
    return MemoryResolutionContext()


@pytest.fixture
def workspace(resolution_context: MemoryResolutionContext) -> WorkspaceBuilder:
    """Provide a builder that lays out packages inside the in-memory file system."""
    return WorkspaceBuilder(resolution_context)
