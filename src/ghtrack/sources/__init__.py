"""Remote sources for gh-tracker.

Sources fetch issue and pull request data from remote services via CLI tools
and hand back validated records from ``ghtrack.core.schema``.
"""

from __future__ import annotations

from ghtrack.sources.github import GitHubClient, GitHubClientError, MissingCredentialError

__all__ = ["GitHubClient", "GitHubClientError", "MissingCredentialError"]
