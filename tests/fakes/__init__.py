"""Fake providers for enumerator, scheduler and runtime-version tests (no live network)."""

from .providers import (
    FakeArtifactStore,
    FakeRegistry,
    FakeRegistryAlwaysFail,
    FakeWorkflowClient,
    FakeWorkflowClientFailOnCall,
    make_versions,
)

__all__ = [
    "FakeArtifactStore",
    "FakeRegistry",
    "FakeRegistryAlwaysFail",
    "FakeWorkflowClient",
    "FakeWorkflowClientFailOnCall",
    "make_versions",
]
