"""GitHub provider: resource map and the fetch-resolve-upsert walk."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Iterable, Iterator, Optional

from github_provider.base_provider import BaseProvider
from github_provider.client import GitHubClient
from github_provider.config import ALL_TABLES, ProviderConfig
from github_provider.db import Database
from github_provider.errors import GitHubAPIError, ignore_error
from github_provider.resources.billing import action_billing, package_billing, storage_billing
from github_provider.resources.external_groups import external_groups
from github_provider.resources.organizations import organizations
from github_provider.resources.repositories import repositories
from github_provider.resources.teams import teams
from github_provider.schema import Resource, Table, default_resolver

logger = logging.getLogger("github_provider.provider")

RESOURCE_MAP: dict[str, Callable[[], Table]] = {
    "organizations": organizations,
    "repositories": repositories,
    "teams": teams,
    "external_groups": external_groups,
    "billing_action": action_billing,
    "billing_storage": storage_billing,
    "billing_package": package_billing,
}


def select_tables(names: Iterable[str]) -> list[Table]:
    """Build the tables for the given resource names; "*" selects all."""
    names = list(names)
    if not names or ALL_TABLES in names:
        return [factory() for factory in RESOURCE_MAP.values()]
    unknown = [n for n in names if n not in RESOURCE_MAP]
    if unknown:
        raise ValueError(
            f"Unknown tables {unknown}; choose from {sorted(RESOURCE_MAP)}"
        )
    return [RESOURCE_MAP[n]() for n in names]


class GitHubProvider(BaseProvider):
    PROVIDER_NAME = "github"

    def __init__(
        self,
        config: ProviderConfig,
        db: Optional[Database] = None,
        client: Optional[GitHubClient] = None,
    ) -> None:
        super().__init__(config, db)
        gh = config.github
        self.client = client or GitHubClient(
            token=gh.token,
            orgs=gh.orgs,
            base_url=gh.api_base_url,
            per_page=gh.per_page,
            timeout=gh.timeout_s,
        )
        self.tables = select_tables(config.tables)

    def table_names(self) -> list[str]:
        return [t.name for top in self.tables for t in top.walk()]

    def _clients_for(self, table: Table) -> list[GitHubClient]:
        if table.multiplex is None:
            return [self.client]
        return table.multiplex(self.client)

    # ------------------------------------------------------------------
    # Fetching and resolving
    # ------------------------------------------------------------------

    def resolve_resource(
        self,
        table: Table,
        client: GitHubClient,
        item: dict,
        parent: Optional[Resource] = None,
    ) -> Resource:
        resource = Resource(table=table, item=item, parent=parent)
        for column in table.columns:
            resolver = column.resolver or default_resolver
            try:
                value = resolver(client, resource, column)
            except GitHubAPIError as exc:
                if not ignore_error(exc):
                    raise
                logger.warning(
                    "Column %s.%s unavailable: %s",
                    table.name,
                    column.name,
                    exc.message,
                    extra={"table": table.name, "org": client.org},
                )
                value = None
            try:
                resource.set(column.name, value)
            except (TypeError, ValueError) as exc:
                raise ValueError(
                    f"{table.name}.{column.name}: cannot convert {value!r}"
                ) from exc
        resource.compute_id()
        return resource

    def fetch_resources(
        self,
        table: Table,
        client: GitHubClient,
        parent: Optional[Resource] = None,
    ) -> list[Resource]:
        """Resolve every item the table's resolver yields for one client/parent.

        Errors that ignore_error() accepts end the table for this
        client/parent and keep what was already fetched.
        """
        resources: list[Resource] = []
        try:
            for item in table.resolver(client, parent):
                resources.append(self.resolve_resource(table, client, item, parent))
        except GitHubAPIError as exc:
            if not ignore_error(exc):
                raise
            logger.warning(
                "Skipping %s: %s",
                table.name,
                exc.message,
                extra={"table": table.name, "org": client.org},
            )
        return resources

    def fetch(
        self,
        table: Table,
        client: Optional[GitHubClient] = None,
        parent: Optional[Resource] = None,
    ) -> Iterator[Resource]:
        """Yield resources of a table and its relations without touching the DB."""
        clients = [client] if client is not None else self._clients_for(table)
        for c in clients:
            resources = self.fetch_resources(table, c, parent)
            yield from resources
            for rel in table.relations:
                for resource in resources:
                    yield from self.fetch(rel, c, resource)

    # ------------------------------------------------------------------
    # Sync
    # ------------------------------------------------------------------

    def sync(self) -> dict[str, int]:
        if self.db is None:
            raise ValueError("sync requires a database; use fetch() for a dry run")
        counts: dict[str, int] = {}
        fetch_date = datetime.now(timezone.utc)
        for table in self.tables:
            for client in self._clients_for(table):
                self._sync_table(table, client, None, fetch_date, counts)
        return counts

    def _sync_table(
        self,
        table: Table,
        client: GitHubClient,
        parent: Optional[Resource],
        fetch_date: datetime,
        counts: dict[str, int],
    ) -> None:
        started = time.monotonic()
        resources = self.fetch_resources(table, client, parent)

        upserted = 0
        for batch in self._batch_rows(resources):
            with self.db.transaction() as cur:
                upserted += self.db.upsert_resources(cur, table, batch, fetch_date)
        counts[table.name] = counts.get(table.name, 0) + upserted

        if parent is None:
            logger.info(
                "Fetched %s",
                table.name,
                extra={
                    "table": table.name,
                    "org": client.org,
                    "records": upserted,
                    "duration_s": round(time.monotonic() - started, 3),
                },
            )

        # Parents are committed before children so FK references resolve.
        for rel in table.relations:
            for resource in resources:
                self._sync_table(rel, client, resource, fetch_date, counts)
