"""
GitHub Actions workflow trigger.

Uses the REST API (token required):
  POST {api_url}/repos/{owner}/{repo}/actions/workflows/{workflow_id}/dispatches
  body: {"ref": "<branch>", "inputs": {...}}  ->  204 No Content
"""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

import requests

from ..core.errors import DispatchError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"
HTTP_TIMEOUT_S = 30.0


class GitHubWorkflowClient:
    """Trigger workflow_dispatch runs in one repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: Optional[str] = None,
        api_url: str = GITHUB_API_URL,
        timeout_s: float = HTTP_TIMEOUT_S,
    ) -> None:
        self._owner = owner
        self._repo = repo
        self._token = token
        self._api_url = api_url.rstrip("/")
        self._timeout_s = timeout_s

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def dispatch_workflow(self, workflow_id: str, inputs: Mapping[str, str], ref: str = "main") -> None:
        url = f"{self._api_url}/repos/{self._owner}/{self._repo}/actions/workflows/{workflow_id}/dispatches"
        try:
            resp = requests.post(
                url,
                json={"ref": ref, "inputs": dict(inputs)},
                headers=self._headers(),
                timeout=self._timeout_s,
            )
        except requests.RequestException as exc:
            raise DispatchError(f"Error dispatching workflow {workflow_id}: {type(exc).__name__}: {exc}") from exc
        if resp.status_code < 200 or resp.status_code >= 300:
            raise DispatchError(
                f"Error dispatching workflow {workflow_id}: HTTP {resp.status_code} {resp.text[:300]}"
            )
        logger.debug("Dispatched %s on %s/%s@%s with %s", workflow_id, self._owner, self._repo, ref, dict(inputs))
