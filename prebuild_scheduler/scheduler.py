"""
Scheduler driver: walk the library catalog and dispatch every missing build.

Processing is strictly sequential: library -> platform -> override -> candidate.
For each candidate the ledger is checked, the build is dispatched and the ledger
row is written. The number of builds scheduled so far is passed into and
returned from every step; once the dispatcher budget is used up the run stops
where it is.

Registry and dispatch failures end the run after logging what was in progress.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple

from . import config
from .catalog import EffectivePolicy, LibraryPolicy, load_libraries, load_runtime_versions
from .core.errors import DispatchError, RegistryError
from .core.types import BuildCandidate, BuildRecord
from .db.ledger import BuildLedger
from .db.migrations import run_migrations
from .dispatcher import Dispatcher
from .enumerator import CombinationEnumerator
from .platforms import AndroidPlatform, IosPlatform, Platform
from .providers.github import GitHubWorkflowClient
from .providers.maven import MavenArtifactStore
from .providers.npm import NpmRegistry
from .store.sqlite_session import connect

logger = logging.getLogger(__name__)


@dataclass
class SchedulerReport:
    """Outcome of one run."""

    total_scheduled: int = 0
    per_library: Dict[str, int] = field(default_factory=dict)
    budget_exhausted: bool = False


@dataclass
class SchedulerContext:
    """Everything one run needs. Use as context manager or call close()."""

    libraries: Dict[str, LibraryPolicy]
    enumerator: CombinationEnumerator
    ledger: BuildLedger
    dispatcher: Dispatcher
    platforms: Tuple[Platform, ...]
    conn: Optional[sqlite3.Connection] = None
    _closed: bool = field(default=False, repr=False)

    def close(self) -> None:
        """Close the ledger connection. Idempotent."""
        if self._closed or self.conn is None:
            return
        try:
            self.conn.close()
        finally:
            self._closed = True

    def __enter__(self) -> SchedulerContext:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def get_scheduler_context(
    *,
    limit: Optional[int] = None,
    db_path: Optional[str] = None,
    libraries_path: Optional[str] = None,
    runtime_versions_path: Optional[str] = None,
) -> SchedulerContext:
    """
    Build the production context from config.yaml/env: npm, Maven, GitHub, SQLite ledger.
    Use as: with get_scheduler_context(limit=10) as ctx: run_scheduler(ctx)
    """
    npm = config.npm_settings()
    registry = NpmRegistry(
        registry_url=npm["registry_url"],
        downloads_url=npm["downloads_url"],
        timeout_s=float(npm["timeout_s"]),
    )
    maven = config.maven_settings()
    artifact_store = MavenArtifactStore(api_url=maven["api_url"], timeout_s=float(maven["timeout_s"]))
    gh = config.github_settings()
    client = GitHubWorkflowClient(
        owner=gh["owner"],
        repo=gh["repo"],
        token=config.github_token(),
        api_url=gh["api_url"],
        timeout_s=float(gh["timeout_s"]),
    )
    workflows = gh["workflows"]
    platforms: Tuple[Platform, ...] = (
        AndroidPlatform(workflows["android"], artifact_store=artifact_store),
        IosPlatform(workflows["ios"]),
    )

    libraries = load_libraries(libraries_path or config.libraries_path())
    runtime_versions = load_runtime_versions(runtime_versions_path or config.runtime_versions_path())
    enumerator = CombinationEnumerator(
        registry,
        runtime_versions,
        companion_package=config.companion_package(),
        default_weekly_downloads_threshold=config.default_weekly_downloads_threshold(),
    )

    conn = connect(db_path or config.db_path(), config.db_busy_timeout_ms())
    run_migrations(conn)
    return SchedulerContext(
        libraries=libraries,
        enumerator=enumerator,
        ledger=BuildLedger(conn),
        dispatcher=Dispatcher(client, ref=gh["ref"], limit=limit),
        platforms=platforms,
        conn=conn,
    )


def _describe(candidate: BuildCandidate) -> str:
    text = f"{candidate.library} {candidate.version} with React Native {candidate.runtime_version}"
    if candidate.companion_version:
        text += f" and worklets {candidate.companion_version}"
    return text


def schedule_candidate(ctx: SchedulerContext, platform: Platform, candidate: BuildCandidate) -> bool:
    """Ledger check -> dispatch -> ledger write. Returns True if a build was dispatched."""
    if ctx.ledger.exists_scheduled(candidate.key):
        logger.debug(" %s: skipping %s - already scheduled", platform.label, _describe(candidate))
        return False

    logger.info(" %s: scheduling build for %s", platform.label, _describe(candidate))
    try:
        ctx.dispatcher.dispatch(
            candidate.library,
            candidate.version,
            platform,
            candidate.runtime_version,
            candidate.companion_version,
        )
    except DispatchError as exc:
        logger.error(" %s: failed to dispatch %s: %s", platform.label, _describe(candidate), exc)
        raise
    ctx.ledger.upsert(BuildRecord.scheduled(candidate.key))
    return True


def process_candidates(
    ctx: SchedulerContext,
    platform: Platform,
    candidates: Sequence[BuildCandidate],
    scheduled: int,
) -> int:
    for candidate in candidates:
        if not ctx.dispatcher.has_budget(scheduled):
            return scheduled
        if schedule_candidate(ctx, platform, candidate):
            scheduled += 1
    return scheduled


def process_override(
    ctx: SchedulerContext,
    library: str,
    effective: EffectivePolicy,
    platform: Platform,
    scheduled: int,
) -> int:
    try:
        candidates = ctx.enumerator.enumerate_policy(library, effective, platform)
    except RegistryError as exc:
        logger.error(" %s: registry lookup failed for %s: %s", platform.label, library, exc)
        raise
    return process_candidates(ctx, platform, candidates, scheduled)


def process_library(ctx: SchedulerContext, library: str, policy: LibraryPolicy, scheduled: int) -> int:
    """Schedule all missing builds of one library. Returns the updated run-wide count."""
    logger.info("Processing: %s", library)
    start = scheduled
    for platform in ctx.platforms:
        if not platform.is_enabled(policy):
            logger.debug(" %s: disabled for %s", platform.label, library)
            continue
        for effective in ctx.enumerator.effective_policies(policy, platform):
            if not ctx.dispatcher.has_budget(scheduled):
                return scheduled
            scheduled = process_override(ctx, library, effective, platform, scheduled)

    if scheduled == start:
        logger.info(" No builds to schedule for %s", library)
    else:
        logger.info(" Scheduled %d build(s) for %s", scheduled - start, library)
    return scheduled


def run_scheduler(ctx: SchedulerContext) -> SchedulerReport:
    """Process every library in catalog order; stop as soon as the budget is used up."""
    report = SchedulerReport()
    scheduled = 0
    for library, policy in ctx.libraries.items():
        if not ctx.dispatcher.has_budget(scheduled):
            break
        before = scheduled
        scheduled = process_library(ctx, library, policy, scheduled)
        report.per_library[library] = scheduled - before

    report.total_scheduled = scheduled
    report.budget_exhausted = not ctx.dispatcher.has_budget(scheduled)
    if report.budget_exhausted:
        logger.info("Scheduling limit of %d reached, stopping", ctx.dispatcher.limit)
    logger.info("Done! Scheduled %d build(s)", scheduled)
    return report
