"""
Remote services the scheduler talks to.

npm for version histories, Maven for already-published artifacts and GitHub
Actions for build dispatch. Each module wraps one service with requests and
explicit timeouts; only the npm download endpoint retries (on HTTP 429).
"""

from __future__ import annotations

from .base import ArtifactStore, RegistryProbe, VersionInfo, WorkflowClient
from .github import GitHubWorkflowClient
from .maven import MavenArtifactStore, artifact_name, sanitize_package_name
from .npm import NpmRegistry
from .resilience import RetryConfig, get_with_rate_limit_retry

__all__ = [
    "VersionInfo",
    "RegistryProbe",
    "ArtifactStore",
    "WorkflowClient",
    "NpmRegistry",
    "MavenArtifactStore",
    "GitHubWorkflowClient",
    "artifact_name",
    "sanitize_package_name",
    "RetryConfig",
    "get_with_rate_limit_retry",
]
