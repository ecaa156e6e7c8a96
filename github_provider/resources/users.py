"""Columns for GitHub user objects, shared by the member tables."""

from __future__ import annotations

from github_provider.schema import Column, ColumnType, path_resolver


def user_columns() -> list[Column]:
    return [
        Column("login", ColumnType.STRING),
        Column("id", ColumnType.BIGINT),
        Column("node_id", ColumnType.STRING),
        Column("avatar_url", ColumnType.STRING),
        Column("html_url", ColumnType.STRING),
        Column("gravatar_id", ColumnType.STRING),
        Column("name", ColumnType.STRING),
        Column("company", ColumnType.STRING),
        Column("blog", ColumnType.STRING),
        Column("location", ColumnType.STRING),
        Column("email", ColumnType.STRING),
        Column("hireable", ColumnType.BOOL),
        Column("bio", ColumnType.STRING),
        Column("twitter_username", ColumnType.STRING),
        Column("public_repos", ColumnType.BIGINT),
        Column("public_gists", ColumnType.BIGINT),
        Column("followers", ColumnType.BIGINT),
        Column("following", ColumnType.BIGINT),
        Column("created_at_time", ColumnType.TIMESTAMP, resolver=path_resolver("created_at")),
        Column("updated_at_time", ColumnType.TIMESTAMP, resolver=path_resolver("updated_at")),
        Column("suspended_at_time", ColumnType.TIMESTAMP, resolver=path_resolver("suspended_at")),
        Column("type", ColumnType.STRING),
        Column("site_admin", ColumnType.BOOL),
        Column("total_private_repos", ColumnType.BIGINT),
        Column("owned_private_repos", ColumnType.BIGINT),
        Column("private_gists", ColumnType.BIGINT),
        Column("disk_usage", ColumnType.BIGINT),
        Column("collaborators", ColumnType.BIGINT),
        Column("two_factor_authentication", ColumnType.BOOL),
        Column("plan_name", ColumnType.STRING, resolver=path_resolver("plan.name")),
        Column("plan_space", ColumnType.BIGINT, resolver=path_resolver("plan.space")),
        Column("plan_collaborators", ColumnType.BIGINT, resolver=path_resolver("plan.collaborators")),
        Column("plan_private_repos", ColumnType.BIGINT, resolver=path_resolver("plan.private_repos")),
        Column("plan_filled_seats", ColumnType.BIGINT, resolver=path_resolver("plan.filled_seats")),
        Column("plan_seats", ColumnType.BIGINT, resolver=path_resolver("plan.seats")),
        Column("ldap_dn", ColumnType.STRING),
        Column("url", ColumnType.STRING, description="API URLs"),
        Column("events_url", ColumnType.STRING),
        Column("following_url", ColumnType.STRING),
        Column("followers_url", ColumnType.STRING),
        Column("gists_url", ColumnType.STRING),
        Column("organizations_url", ColumnType.STRING),
        Column("received_events_url", ColumnType.STRING),
        Column("repos_url", ColumnType.STRING),
        Column("starred_url", ColumnType.STRING),
        Column("subscriptions_url", ColumnType.STRING),
        Column(
            "text_matches",
            ColumnType.JSON,
            description="Only populated from search results that request text matches.",
        ),
        Column(
            "permissions",
            ColumnType.JSON,
            description="Permissions and role_name identify what a user may do on a given repository.",
        ),
        Column("role_name", ColumnType.STRING),
    ]
