"""GitHub REST client shared by all resource modules."""

from __future__ import annotations

import logging
from typing import Any, Iterator, Optional

import requests

from github_provider.errors import GitHubAPIError

logger = logging.getLogger("github_provider.client")

DEFAULT_API_BASE_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


class GitHubClient:
    """requests.Session wrapper bound (optionally) to one organisation."""

    def __init__(
        self,
        token: str,
        orgs: list[str],
        base_url: str = DEFAULT_API_BASE_URL,
        per_page: int = 100,
        timeout: float = 30,
        session: Optional[requests.Session] = None,
        org: Optional[str] = None,
    ) -> None:
        self.orgs = list(orgs)
        self.org = org
        self.per_page = per_page
        self.timeout = timeout
        self._token = token
        self._base = base_url.rstrip("/")
        if session is None:
            session = requests.Session()
            session.headers.update({
                "Authorization": f"token {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": API_VERSION,
            })
        self._session = session

    def with_org(self, org: str) -> "GitHubClient":
        return GitHubClient(
            token=self._token,
            orgs=self.orgs,
            base_url=self._base,
            per_page=self.per_page,
            timeout=self.timeout,
            session=self._session,
            org=org,
        )

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base}/{path.lstrip('/')}"

    def _request(self, url: str, params: Optional[dict]) -> requests.Response:
        logger.debug("GET %s params=%s", url, params)
        resp = self._session.get(url, params=params, timeout=self.timeout)
        if resp.status_code >= 400:
            message = resp.reason or ""
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message"):
                message = body["message"]
            raise GitHubAPIError(resp.status_code, message, url)
        return resp

    def get(self, path: str, params: Optional[dict] = None) -> Any:
        """Single request; returns the decoded JSON body."""
        return self._request(self._url(path), params).json()

    def paginate(
        self,
        path: str,
        params: Optional[dict] = None,
        items_key: Optional[str] = None,
    ) -> Iterator[Any]:
        """Yield items from every page, following the Link rel="next" header."""
        url: Optional[str] = self._url(path)
        page_params: Optional[dict] = dict(params or {})
        page_params.setdefault("per_page", self.per_page)

        while url:
            resp = self._request(url, page_params)
            data = resp.json()
            if items_key is not None:
                data = (data or {}).get(items_key) or []
            if isinstance(data, list):
                yield from data
            elif data:
                yield data

            # The next link already carries the query string
            url = resp.links.get("next", {}).get("url")
            page_params = None


def org_multiplex(client: GitHubClient) -> list[GitHubClient]:
    """One client per configured organisation."""
    return [client.with_org(org) for org in client.orgs]


def resolve_org(client: GitHubClient, resource, column) -> Optional[str]:
    return client.org
