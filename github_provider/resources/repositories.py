"""Repositories owned by an organisation."""

from __future__ import annotations

from github_provider.client import GitHubClient, org_multiplex, resolve_org
from github_provider.schema import Column, ColumnType, Resource, Table, path_resolver


def repositories() -> Table:
    return Table(
        name="github_repositories",
        description="Repository represents a GitHub repository.",
        resolver=fetch_repositories,
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
            Column("owner_login", ColumnType.STRING, resolver=path_resolver("owner.login")),
            Column("owner_id", ColumnType.BIGINT, resolver=path_resolver("owner.id")),
            Column("name", ColumnType.STRING),
            Column("full_name", ColumnType.STRING),
            Column("description", ColumnType.STRING),
            Column("homepage", ColumnType.STRING),
            Column("default_branch", ColumnType.STRING),
            Column("master_branch", ColumnType.STRING),
            Column("created_at", ColumnType.TIMESTAMP),
            Column("pushed_at", ColumnType.TIMESTAMP),
            Column("updated_at", ColumnType.TIMESTAMP),
            Column("html_url", ColumnType.STRING),
            Column("clone_url", ColumnType.STRING),
            Column("git_url", ColumnType.STRING),
            Column("mirror_url", ColumnType.STRING),
            Column("ssh_url", ColumnType.STRING),
            Column("svn_url", ColumnType.STRING),
            Column("language", ColumnType.STRING),
            Column("fork", ColumnType.BOOL),
            Column("forks_count", ColumnType.BIGINT),
            Column("network_count", ColumnType.BIGINT),
            Column("open_issues_count", ColumnType.BIGINT),
            Column("stargazers_count", ColumnType.BIGINT),
            Column("subscribers_count", ColumnType.BIGINT),
            Column("watchers_count", ColumnType.BIGINT),
            Column("size", ColumnType.BIGINT, description="Size in kilobytes."),
            Column("parent_id", ColumnType.BIGINT, resolver=path_resolver("parent.id")),
            Column("source_id", ColumnType.BIGINT, resolver=path_resolver("source.id")),
            Column(
                "template_repository_id",
                ColumnType.BIGINT,
                resolver=path_resolver("template_repository.id"),
            ),
            Column("permissions", ColumnType.JSON),
            Column("allow_rebase_merge", ColumnType.BOOL),
            Column("allow_update_branch", ColumnType.BOOL),
            Column("allow_squash_merge", ColumnType.BOOL),
            Column("allow_merge_commit", ColumnType.BOOL),
            Column("allow_auto_merge", ColumnType.BOOL),
            Column("allow_forking", ColumnType.BOOL),
            Column("delete_branch_on_merge", ColumnType.BOOL),
            Column("use_squash_pr_title_as_default", ColumnType.BOOL),
            Column("topics", ColumnType.STRING_ARRAY),
            Column("archived", ColumnType.BOOL),
            Column("disabled", ColumnType.BOOL),
            Column("license_key", ColumnType.STRING, resolver=path_resolver("license.key")),
            Column("license_name", ColumnType.STRING, resolver=path_resolver("license.name")),
            Column("license_spdx_id", ColumnType.STRING, resolver=path_resolver("license.spdx_id")),
            Column("license_url", ColumnType.STRING, resolver=path_resolver("license.url")),
            Column("private", ColumnType.BOOL),
            Column("has_issues", ColumnType.BOOL),
            Column("has_wiki", ColumnType.BOOL),
            Column("has_pages", ColumnType.BOOL),
            Column("has_projects", ColumnType.BOOL),
            Column("has_downloads", ColumnType.BOOL),
            Column("has_discussions", ColumnType.BOOL),
            Column("is_template", ColumnType.BOOL),
            Column(
                "visibility",
                ColumnType.STRING,
                description="public, private or internal",
            ),
            Column("security_and_analysis", ColumnType.JSON),
            Column("url", ColumnType.STRING, description="API URLs"),
            Column("archive_url", ColumnType.STRING),
            Column("branches_url", ColumnType.STRING),
            Column("collaborators_url", ColumnType.STRING),
            Column("commits_url", ColumnType.STRING),
            Column("contents_url", ColumnType.STRING),
            Column("hooks_url", ColumnType.STRING),
            Column("issues_url", ColumnType.STRING),
            Column("pulls_url", ColumnType.STRING),
            Column("releases_url", ColumnType.STRING),
            Column("teams_url", ColumnType.STRING),
        ],
    )


def fetch_repositories(client: GitHubClient, parent: Resource):
    yield from client.paginate(f"/orgs/{client.org}/repos", params={"type": "all"})
