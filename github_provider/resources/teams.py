"""Teams of an organisation, with their members and repositories."""

from __future__ import annotations

from github_provider.client import GitHubClient, org_multiplex, resolve_org
from github_provider.resources.users import user_columns
from github_provider.schema import (
    Column,
    ColumnType,
    Resource,
    Table,
    parent_field_resolver,
    parent_id_resolver,
    path_resolver,
)

TEAMS_TABLE = "github_teams"


def _team_link_columns() -> list[Column]:
    return [
        Column(
            "team_cq_id",
            ColumnType.UUID,
            description="Unique ID of the github_teams row (FK)",
            resolver=parent_id_resolver,
            foreign_key=TEAMS_TABLE,
        ),
        Column(
            "team_id",
            ColumnType.BIGINT,
            description="The id of the team",
            resolver=parent_field_resolver("id"),
        ),
        Column(
            "org",
            ColumnType.STRING,
            description="The GitHub organization of the resource.",
            resolver=resolve_org,
        ),
    ]


def teams() -> Table:
    return Table(
        name=TEAMS_TABLE,
        description="Team represents a team within a GitHub organization",
        resolver=fetch_teams,
        multiplex=org_multiplex,
        primary_keys=["id"],
        columns=[
            Column(
                "org",
                ColumnType.STRING,
                description="The GitHub organization of the resource.",
                resolver=resolve_org,
            ),
            Column("id", ColumnType.BIGINT),
            Column("node_id", ColumnType.STRING),
            Column("name", ColumnType.STRING),
            Column("description", ColumnType.STRING),
            Column("url", ColumnType.STRING),
            Column("slug", ColumnType.STRING),
            Column(
                "permission",
                ColumnType.STRING,
                description="Default permission for repositories owned by the team.",
            ),
            Column(
                "permissions",
                ColumnType.JSON,
                description="Permissions the team has on a given repository",
            ),
            Column(
                "privacy",
                ColumnType.STRING,
                description=(
                    "Level of privacy of the team: secret (visible to org owners and "
                    "team members) or closed (visible to all org members)."
                ),
            ),
            Column("members_count", ColumnType.BIGINT),
            Column("repos_count", ColumnType.BIGINT),
            Column("html_url", ColumnType.STRING),
            Column("members_url", ColumnType.STRING),
            Column("repositories_url", ColumnType.STRING),
            Column(
                "parent",
                ColumnType.BIGINT,
                description="ID of the parent team, if any.",
                resolver=path_resolver("parent.id"),
            ),
            Column(
                "ldapdn",
                ColumnType.STRING,
                description="Only set on GitHub Enterprise when membership is synchronized with LDAP.",
                resolver=path_resolver("ldap_dn"),
            ),
        ],
        relations=[
            Table(
                name="github_team_members",
                description="Users that are members of a team.",
                resolver=fetch_team_members,
                primary_keys=["team_id", "id"],
                columns=_team_link_columns() + user_columns(),
            ),
            Table(
                name="github_team_repositories",
                description="Repositories a team has access to.",
                resolver=fetch_team_repositories,
                primary_keys=["team_id", "id"],
                columns=_team_link_columns() + [
                    Column("id", ColumnType.BIGINT),
                    Column("node_id", ColumnType.STRING),
                    Column("name", ColumnType.STRING),
                    Column("full_name", ColumnType.STRING),
                    Column("private", ColumnType.BOOL),
                    Column("html_url", ColumnType.STRING),
                    Column("permissions", ColumnType.JSON),
                    Column("role_name", ColumnType.STRING),
                ],
            ),
        ],
    )


# ----------------------------------------------------------------------
# Table resolvers
# ----------------------------------------------------------------------

def fetch_teams(client: GitHubClient, parent: Resource):
    yield from client.paginate(f"/orgs/{client.org}/teams")


def fetch_team_members(client: GitHubClient, parent: Resource):
    slug = parent.item["slug"]
    yield from client.paginate(f"/orgs/{client.org}/teams/{slug}/members")


def fetch_team_repositories(client: GitHubClient, parent: Resource):
    slug = parent.item["slug"]
    yield from client.paginate(f"/orgs/{client.org}/teams/{slug}/repos")
