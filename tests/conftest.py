"""Shared fixtures: a GitHub client backed by canned HTTP responses."""

import logging
from typing import Any, Optional
from unittest.mock import MagicMock, Mock

import pytest

from github_provider.client import GitHubClient
from github_provider.config import GitHubConfig, ProviderConfig
from github_provider.db import Database
from github_provider.logging_config import ROOT_LOGGER

BASE_URL = "https://api.github.test"


def make_response(
    json_data: Any,
    status: int = 200,
    next_url: Optional[str] = None,
    reason: str = "OK",
) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.reason = reason
    resp.json.return_value = json_data
    resp.links = {"next": {"url": next_url, "rel": "next"}} if next_url else {}
    return resp


class FakeGitHubAPI:
    """Callable standing in for ``requests.Session.get``.

    Routes are keyed by the URL with BASE_URL stripped, e.g.
    "/orgs/testorg/teams" or "/orgs/testorg/teams?page=2".
    Unknown routes answer 404 like the real API.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Mock] = {}
        self.calls: list[tuple[str, Optional[dict]]] = []

    def add(self, path: str, json_data: Any, status: int = 200, next_path: Optional[str] = None):
        next_url = f"{BASE_URL}{next_path}" if next_path else None
        self.routes[path] = make_response(json_data, status=status, next_url=next_url)
        return self

    def add_error(self, path: str, status: int, message: str):
        self.routes[path] = make_response({"message": message}, status=status, reason="Error")
        return self

    def __call__(self, url: str, params: Optional[dict] = None, timeout: Any = None) -> Mock:
        self.calls.append((url, params))
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        if path in self.routes:
            return self.routes[path]
        return make_response({"message": "Not Found"}, status=404, reason="Not Found")

    def paths(self) -> list[str]:
        return [url[len(BASE_URL):] for url, _ in self.calls]


@pytest.fixture
def github_api() -> FakeGitHubAPI:
    return FakeGitHubAPI()


@pytest.fixture
def client(github_api: FakeGitHubAPI) -> GitHubClient:
    session = Mock()
    session.get.side_effect = github_api
    return GitHubClient(token="test-token", orgs=["testorg"], base_url=BASE_URL, session=session)


@pytest.fixture
def provider_config() -> ProviderConfig:
    return ProviderConfig(
        github=GitHubConfig(token="test-token", orgs=["testorg"], api_base_url=BASE_URL),
        batch_size=2,
    )


@pytest.fixture
def mock_db() -> MagicMock:
    db = MagicMock(spec=Database)
    db.upsert_resources.side_effect = lambda cur, table, resources, fetch_date: len(resources)
    db.record_run_start.return_value = "run-1"
    return db


# ----------------------------------------------------------------------
# Sample payloads, trimmed from real API responses
# ----------------------------------------------------------------------

@pytest.fixture
def org_payload() -> dict:
    return {
        "login": "testorg",
        "id": 1001,
        "node_id": "O_kgDOAA",
        "url": f"{BASE_URL}/orgs/testorg",
        "name": "Test Org",
        "description": "An organisation for tests",
        "public_repos": 3,
        "followers": 10,
        "created_at": "2020-01-02T03:04:05Z",
        "updated_at": "2024-05-06T07:08:09Z",
        "type": "Organization",
        "billing_email": "billing@example.com",
        "two_factor_requirement_enabled": True,
        "plan": {"name": "team", "space": 976562499, "private_repos": 999999, "seats": 20, "filled_seats": 7},
        "members_can_create_repositories": False,
    }


@pytest.fixture
def team_payload() -> dict:
    return {
        "id": 42,
        "node_id": "T_kwDOAA",
        "url": f"{BASE_URL}/teams/42",
        "html_url": "https://github.test/orgs/testorg/teams/platform",
        "name": "Platform",
        "slug": "platform",
        "description": "Platform team",
        "privacy": "closed",
        "permission": "pull",
        "members_url": f"{BASE_URL}/organizations/1001/team/42/members{{/member}}",
        "repositories_url": f"{BASE_URL}/organizations/1001/team/42/repos",
        "parent": {"id": 7, "slug": "engineering"},
    }


@pytest.fixture
def user_payload() -> dict:
    return {
        "login": "octocat",
        "id": 583231,
        "node_id": "MDQ6VXNlcjU4MzIzMQ==",
        "avatar_url": "https://avatars.github.test/u/583231",
        "gravatar_id": "",
        "url": f"{BASE_URL}/users/octocat",
        "html_url": "https://github.test/octocat",
        "type": "User",
        "site_admin": False,
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so caplog sees provider records in every test."""
    yield
    root = logging.getLogger(ROOT_LOGGER)
    root.handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
