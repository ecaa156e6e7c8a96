"""Unit tests for GitHubClient pagination, errors and multiplexing."""

from unittest.mock import Mock

import pytest

from github_provider.client import GitHubClient, org_multiplex, resolve_org
from github_provider.errors import GitHubAPIError

from tests.conftest import BASE_URL


class TestGet:

    def test_returns_decoded_json(self, client, github_api, org_payload):
        github_api.add("/orgs/testorg", org_payload)
        assert client.get("/orgs/testorg") == org_payload

    def test_error_uses_body_message(self, client, github_api):
        github_api.add_error("/orgs/testorg", 403, "Must have admin rights")
        with pytest.raises(GitHubAPIError) as exc_info:
            client.get("/orgs/testorg")
        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Must have admin rights"
        assert exc_info.value.url == f"{BASE_URL}/orgs/testorg"

    def test_error_without_json_body_uses_reason(self, client, github_api):
        resp = Mock(status_code=502, reason="Bad Gateway", links={})
        resp.json.side_effect = ValueError("no json")
        github_api.routes["/orgs/testorg"] = resp
        with pytest.raises(GitHubAPIError) as exc_info:
            client.get("/orgs/testorg")
        assert exc_info.value.message == "Bad Gateway"

    def test_absolute_urls_are_not_prefixed(self, client, github_api):
        github_api.add("/orgs/testorg", {"login": "testorg"})
        client.get(f"{BASE_URL}/orgs/testorg")
        assert github_api.paths() == ["/orgs/testorg"]


class TestPaginate:

    def test_follows_next_links_until_absent(self, client, github_api):
        github_api.add("/orgs/testorg/teams", [{"id": 1}, {"id": 2}], next_path="/orgs/testorg/teams?page=2")
        github_api.add("/orgs/testorg/teams?page=2", [{"id": 3}], next_path="/orgs/testorg/teams?page=3")
        github_api.add("/orgs/testorg/teams?page=3", [{"id": 4}])

        items = list(client.paginate("/orgs/testorg/teams"))

        assert [i["id"] for i in items] == [1, 2, 3, 4]
        assert github_api.paths() == [
            "/orgs/testorg/teams",
            "/orgs/testorg/teams?page=2",
            "/orgs/testorg/teams?page=3",
        ]

    def test_per_page_only_sent_on_first_request(self, client, github_api):
        github_api.add("/orgs/testorg/repos", [{"id": 1}], next_path="/orgs/testorg/repos?page=2&type=all")
        github_api.add("/orgs/testorg/repos?page=2&type=all", [])

        list(client.paginate("/orgs/testorg/repos", params={"type": "all"}))

        first_params = github_api.calls[0][1]
        assert first_params == {"type": "all", "per_page": 100}
        assert github_api.calls[1][1] is None

    def test_items_key_unwraps_envelope(self, client, github_api):
        github_api.add("/orgs/testorg/external-groups", {"groups": [{"group_id": 1}, {"group_id": 2}]})
        items = list(client.paginate("/orgs/testorg/external-groups", items_key="groups"))
        assert items == [{"group_id": 1}, {"group_id": 2}]

    def test_missing_envelope_key_yields_nothing(self, client, github_api):
        github_api.add("/orgs/testorg/external-groups", {})
        assert list(client.paginate("/orgs/testorg/external-groups", items_key="groups")) == []

    def test_object_page_is_yielded_whole(self, client, github_api):
        github_api.add("/orgs/testorg", {"login": "testorg"})
        assert list(client.paginate("/orgs/testorg")) == [{"login": "testorg"}]

    def test_error_mid_pagination_raises(self, client, github_api):
        github_api.add("/orgs/testorg/teams", [{"id": 1}], next_path="/orgs/testorg/teams?page=2")
        github_api.add_error("/orgs/testorg/teams?page=2", 500, "Server Error")
        pages = client.paginate("/orgs/testorg/teams")
        assert next(pages) == {"id": 1}
        with pytest.raises(GitHubAPIError):
            next(pages)


class TestOrgBinding:

    def test_default_session_headers(self):
        c = GitHubClient(token="abc", orgs=["a"])
        assert c._session.headers["Authorization"] == "token abc"
        assert c._session.headers["Accept"] == "application/vnd.github+json"

    def test_multiplex_one_client_per_org_sharing_session(self):
        session = Mock()
        c = GitHubClient(token="abc", orgs=["a", "b"], session=session)
        clients = org_multiplex(c)
        assert [x.org for x in clients] == ["a", "b"]
        assert all(x._session is session for x in clients)
        assert all(x.orgs == ["a", "b"] for x in clients)

    def test_resolve_org(self, client):
        assert resolve_org(client.with_org("testorg"), None, None) == "testorg"
        assert resolve_org(client, None, None) is None
