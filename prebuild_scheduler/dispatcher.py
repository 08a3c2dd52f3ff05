"""
Build dispatch: one workflow_dispatch per candidate, under a global budget.

The triggered workflow names its run

    Build for <Android|iOS> <library>@<version> RN@<runtime>[ with worklets@<companion>]

and the publishing and reconciliation jobs recover the build parameters by
parsing that name, so run_name and parse_run_name must stay in sync with the
workflow files.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional

from .core.errors import DispatchError
from .platforms import Platform
from .providers.base import WorkflowClient

logger = logging.getLogger(__name__)

_RUN_NAME_RE = re.compile(
    r"^Build for (?P<label>Android|iOS) (?P<library>.+?)@(?P<version>[^@ ]+) RN@(?P<runtime>\S+?)"
    r"(?: with worklets@(?P<companion>\S+?))?(?: \[(?P<configuration>.+?)\])?(?: - snapshot)?$"
)


@dataclass(frozen=True)
class RunName:
    platform_label: str
    library: str
    version: str
    runtime_version: str
    companion_version: Optional[str] = None
    configuration: Optional[str] = None


def run_name(
    platform: Platform,
    library: str,
    version: str,
    runtime_version: str,
    companion_version: Optional[str] = None,
) -> str:
    name = f"Build for {platform.label} {library}@{version} RN@{runtime_version}"
    if companion_version:
        name += f" with worklets@{companion_version}"
    return name


def parse_run_name(name: str) -> Optional[RunName]:
    """Inverse of run_name; also accepts the optional ' [configuration]' and ' - snapshot' suffixes."""
    m = _RUN_NAME_RE.match(name.strip())
    if not m:
        return None
    return RunName(
        platform_label=m.group("label"),
        library=m.group("library"),
        version=m.group("version"),
        runtime_version=m.group("runtime"),
        companion_version=m.group("companion"),
        configuration=m.group("configuration"),
    )


def workflow_inputs(
    library: str,
    version: str,
    runtime_version: str,
    companion_version: Optional[str] = None,
) -> Dict[str, str]:
    inputs = {
        "library_name": library,
        "library_version": version,
        "react_native_version": runtime_version,
    }
    if companion_version:
        inputs["worklets_version"] = companion_version
    return inputs


class Dispatcher:
    """Trigger build workflows. Any failure is a DispatchError and ends the run."""

    def __init__(self, client: WorkflowClient, ref: str = "main", limit: Optional[int] = None) -> None:
        if limit is not None and limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")
        self._client = client
        self._ref = ref
        self.limit = limit

    def has_budget(self, scheduled_count: int) -> bool:
        """False once scheduled_count reached the limit."""
        return self.limit is None or scheduled_count < self.limit

    def dispatch(
        self,
        library: str,
        version: str,
        platform: Platform,
        runtime_version: str,
        companion_version: Optional[str] = None,
    ) -> None:
        inputs = workflow_inputs(library, version, runtime_version, companion_version)
        try:
            self._client.dispatch_workflow(platform.workflow_file, inputs, self._ref)
        except DispatchError:
            raise
        except Exception as exc:
            raise DispatchError(
                f"Failed to dispatch {run_name(platform, library, version, runtime_version, companion_version)}: "
                f"{type(exc).__name__}: {exc}"
            ) from exc
        logger.info("  Workflow dispatched: %s", run_name(platform, library, version, runtime_version, companion_version))
