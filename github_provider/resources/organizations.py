"""The configured organisations themselves and their members."""

from __future__ import annotations

from github_provider.client import GitHubClient, org_multiplex, resolve_org
from github_provider.resources.users import user_columns
from github_provider.schema import (
    Column,
    ColumnType,
    Resource,
    Table,
    parent_id_resolver,
    path_resolver,
)

ORGANIZATIONS_TABLE = "github_organizations"


def organizations() -> Table:
    return Table(
        name=ORGANIZATIONS_TABLE,
        description="Organization represents a GitHub organization account.",
        resolver=fetch_organizations,
        multiplex=org_multiplex,
        primary_keys=["id"],
        columns=[
            Column(
                "org",
                ColumnType.STRING,
                description="The GitHub organization of the resource.",
                resolver=resolve_org,
            ),
            Column("login", ColumnType.STRING),
            Column("id", ColumnType.BIGINT),
            Column("node_id", ColumnType.STRING),
            Column("avatar_url", ColumnType.STRING),
            Column("html_url", ColumnType.STRING),
            Column("name", ColumnType.STRING),
            Column("company", ColumnType.STRING),
            Column("blog", ColumnType.STRING),
            Column("location", ColumnType.STRING),
            Column("email", ColumnType.STRING),
            Column("twitter_username", ColumnType.STRING),
            Column("description", ColumnType.STRING),
            Column("public_repos", ColumnType.BIGINT),
            Column("public_gists", ColumnType.BIGINT),
            Column("followers", ColumnType.BIGINT),
            Column("following", ColumnType.BIGINT),
            Column("created_at", ColumnType.TIMESTAMP),
            Column("updated_at", ColumnType.TIMESTAMP),
            Column("total_private_repos", ColumnType.BIGINT),
            Column("owned_private_repos", ColumnType.BIGINT),
            Column("private_gists", ColumnType.BIGINT),
            Column("disk_usage", ColumnType.BIGINT),
            Column("collaborators", ColumnType.BIGINT),
            Column("billing_email", ColumnType.STRING),
            Column("type", ColumnType.STRING),
            Column("plan_name", ColumnType.STRING, resolver=path_resolver("plan.name")),
            Column("plan_space", ColumnType.BIGINT, resolver=path_resolver("plan.space")),
            Column("plan_collaborators", ColumnType.BIGINT, resolver=path_resolver("plan.collaborators")),
            Column("plan_private_repos", ColumnType.BIGINT, resolver=path_resolver("plan.private_repos")),
            Column("plan_filled_seats", ColumnType.BIGINT, resolver=path_resolver("plan.filled_seats")),
            Column("plan_seats", ColumnType.BIGINT, resolver=path_resolver("plan.seats")),
            Column("two_factor_requirement_enabled", ColumnType.BOOL),
            Column("is_verified", ColumnType.BOOL),
            Column("has_organization_projects", ColumnType.BOOL),
            Column("has_repository_projects", ColumnType.BOOL),
            Column(
                "default_repository_permission",
                ColumnType.STRING,
                description="Default permission for members on organization repositories.",
            ),
            Column("members_can_create_repositories", ColumnType.BOOL),
            Column("members_can_create_public_repositories", ColumnType.BOOL),
            Column("members_can_create_private_repositories", ColumnType.BOOL),
            Column("members_can_create_internal_repositories", ColumnType.BOOL),
            Column("members_can_fork_private_repositories", ColumnType.BOOL),
            Column("members_allowed_repository_creation_type", ColumnType.STRING),
            Column("members_can_create_pages", ColumnType.BOOL),
            Column("members_can_create_public_pages", ColumnType.BOOL),
            Column("members_can_create_private_pages", ColumnType.BOOL),
            Column("web_commit_signoff_required", ColumnType.BOOL),
            Column("url", ColumnType.STRING, description="API URLs"),
            Column("events_url", ColumnType.STRING),
            Column("hooks_url", ColumnType.STRING),
            Column("issues_url", ColumnType.STRING),
            Column("members_url", ColumnType.STRING),
            Column("public_members_url", ColumnType.STRING),
            Column("repos_url", ColumnType.STRING),
        ],
        relations=[
            Table(
                name="github_organization_members",
                description="Users that are members of the organization.",
                resolver=fetch_organization_members,
                primary_keys=["org", "id"],
                columns=[
                    Column(
                        "organization_cq_id",
                        ColumnType.UUID,
                        description="Unique ID of the github_organizations row (FK)",
                        resolver=parent_id_resolver,
                        foreign_key=ORGANIZATIONS_TABLE,
                    ),
                    Column(
                        "org",
                        ColumnType.STRING,
                        description="The GitHub organization of the resource.",
                        resolver=resolve_org,
                    ),
                    Column(
                        "membership_role",
                        ColumnType.STRING,
                        description="admin or member",
                        resolver=resolve_membership_field("role"),
                    ),
                    Column(
                        "membership_state",
                        ColumnType.STRING,
                        description="active or pending",
                        resolver=resolve_membership_field("state"),
                    ),
                ] + user_columns(),
            ),
        ],
    )


# ----------------------------------------------------------------------
# Table resolvers
# ----------------------------------------------------------------------

def fetch_organizations(client: GitHubClient, parent: Resource):
    yield client.get(f"/orgs/{client.org}")


def fetch_organization_members(client: GitHubClient, parent: Resource):
    yield from client.paginate(f"/orgs/{client.org}/members")


# ----------------------------------------------------------------------
# Column resolvers
# ----------------------------------------------------------------------

_MEMBERSHIP_CACHE_KEY = "membership"


def resolve_membership_field(field: str):
    """Read one field of the member's org membership, fetched once per member."""

    def resolve(client: GitHubClient, resource: Resource, column: Column):
        if _MEMBERSHIP_CACHE_KEY not in resource.cache:
            # A failed lookup is not retried for the next column.
            resource.cache[_MEMBERSHIP_CACHE_KEY] = None
            resource.cache[_MEMBERSHIP_CACHE_KEY] = client.get(
                f"/orgs/{client.org}/memberships/{resource.item['login']}"
            )
        membership = resource.cache[_MEMBERSHIP_CACHE_KEY] or {}
        return membership.get(field)

    resolve.__name__ = f"resolve_membership_field({field})"
    return resolve
