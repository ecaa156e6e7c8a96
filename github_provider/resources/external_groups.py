"""External (IdP) groups of an Enterprise Managed Users organisation.

Organisations outside an EMU enterprise answer these endpoints with an
error the fetch engine ignores, so the table simply stays empty for them.
"""

from __future__ import annotations

from github_provider.client import GitHubClient, org_multiplex, resolve_org
from github_provider.schema import Column, ColumnType, Resource, Table


def external_groups() -> Table:
    return Table(
        name="github_external_groups",
        description="External group connected to a GitHub organization through an identity provider.",
        resolver=fetch_external_groups,
        multiplex=org_multiplex,
        primary_keys=["org", "group_id"],
        columns=[
            Column(
                "org",
                ColumnType.STRING,
                description="The GitHub organization of the resource.",
                resolver=resolve_org,
            ),
            Column("group_id", ColumnType.BIGINT),
            Column("group_name", ColumnType.STRING),
            Column("updated_at", ColumnType.TIMESTAMP),
            Column("teams", ColumnType.JSON, description="Teams linked to the group."),
            Column("members", ColumnType.JSON, description="Members of the group."),
        ],
    )


def fetch_external_groups(client: GitHubClient, parent: Resource):
    # The list endpoint only carries id, name and updated_at.
    for group in client.paginate(f"/orgs/{client.org}/external-groups", items_key="groups"):
        yield client.get(f"/orgs/{client.org}/external-group/{group['group_id']}")
