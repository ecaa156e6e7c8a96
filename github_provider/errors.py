"""GitHub API errors and the rules for which ones a fetch may skip."""

from __future__ import annotations

from typing import Optional

# Returned by the external-groups endpoints for orgs outside an EMU enterprise.
ENTERPRISE_ONLY = "This organization is not part of externally managed enterprise."


class GitHubAPIError(Exception):
    """Raised for any non-2xx response from the GitHub API."""

    def __init__(self, status_code: int, message: str, url: Optional[str] = None) -> None:
        super().__init__(f"GitHub API {status_code} for {url}: {message}")
        self.status_code = status_code
        self.message = message
        self.url = url


def ignore_error(err: BaseException) -> bool:
    """True when the error means "resource not available here" rather than a failure."""
    if not isinstance(err, GitHubAPIError):
        return False
    if err.status_code == 404:
        return True
    return err.message == ENTERPRISE_ONLY
