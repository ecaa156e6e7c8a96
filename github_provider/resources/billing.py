"""Organisation billing summaries for Actions, shared storage and Packages."""

from __future__ import annotations

from github_provider.client import GitHubClient, org_multiplex, resolve_org
from github_provider.schema import Column, ColumnType, Resource, Table


def _org_column() -> Column:
    return Column(
        "org",
        ColumnType.STRING,
        description="The GitHub organization of the resource.",
        resolver=resolve_org,
    )


def _billing_fetcher(kind: str):
    def fetch(client: GitHubClient, parent: Resource):
        yield client.get(f"/orgs/{client.org}/settings/billing/{kind}")

    fetch.__name__ = f"fetch_billing_{kind.replace('-', '_')}"
    return fetch


fetch_action_billing = _billing_fetcher("actions")
fetch_storage_billing = _billing_fetcher("shared-storage")
fetch_package_billing = _billing_fetcher("packages")


def action_billing() -> Table:
    return Table(
        name="github_billing_action",
        description="Summary of the paid and free GitHub Actions minutes used.",
        resolver=fetch_action_billing,
        multiplex=org_multiplex,
        primary_keys=["org"],
        columns=[
            _org_column(),
            Column("total_minutes_used", ColumnType.FLOAT),
            Column("total_paid_minutes_used", ColumnType.FLOAT),
            Column("included_minutes", ColumnType.FLOAT),
            Column(
                "minutes_used_breakdown",
                ColumnType.JSON,
                description="Minutes used per runner operating system.",
            ),
        ],
    )


def storage_billing() -> Table:
    return Table(
        name="github_billing_storage",
        description="Estimated paid and estimated total storage used for Actions and Packages.",
        resolver=fetch_storage_billing,
        multiplex=org_multiplex,
        primary_keys=["org"],
        columns=[
            _org_column(),
            Column("days_left_in_billing_cycle", ColumnType.BIGINT),
            Column("estimated_paid_storage_for_month", ColumnType.FLOAT),
            Column("estimated_storage_for_month", ColumnType.FLOAT),
        ],
    )


def package_billing() -> Table:
    return Table(
        name="github_billing_package",
        description="Free and paid storage used for GitHub Packages in gigabytes.",
        resolver=fetch_package_billing,
        multiplex=org_multiplex,
        primary_keys=["org"],
        columns=[
            _org_column(),
            Column("total_gigabytes_bandwidth_used", ColumnType.BIGINT),
            Column("total_paid_gigabytes_bandwidth_used", ColumnType.BIGINT),
            Column("included_gigabytes_bandwidth", ColumnType.BIGINT),
        ],
    )
