"""Abstract base class for providers: run tracking and batching."""

from __future__ import annotations

import logging
import time
import traceback
from abc import ABC, abstractmethod
from typing import Any, Optional

from github_provider.config import ProviderConfig
from github_provider.db import Database

logger = logging.getLogger("github_provider.provider")


class BaseProvider(ABC):
    """Each provider overrides sync() and declares PROVIDER_NAME."""

    PROVIDER_NAME: str = ""

    def __init__(self, config: ProviderConfig, db: Optional[Database] = None) -> None:
        self.config = config
        self.db = db
        self.batch_size = config.batch_size

    @abstractmethod
    def sync(self) -> dict[str, int]:
        """Run the provider sync. Returns {table_name: rows_upserted}."""

    def table_names(self) -> list[str]:
        return []

    def sync_with_tracking(self) -> dict[str, int]:
        """Wrap sync() with a fetch_runs row recording the outcome."""
        if self.db is None:
            raise ValueError("sync_with_tracking requires a database")
        run_id = self.db.record_run_start(
            provider=self.PROVIDER_NAME,
            tables=self.table_names(),
        )
        started = time.monotonic()
        try:
            results = self.sync()
        except Exception as exc:
            self.db.record_run_end(
                run_id=run_id,
                status="FAILED",
                error_message=str(exc)[:1000],
                error_detail={"traceback": traceback.format_exc()},
            )
            logger.error(
                "Sync failed: %s",
                exc,
                extra={"run_id": run_id},
            )
            raise

        total = sum(results.values())
        self.db.record_run_end(
            run_id=run_id,
            status="SUCCESS",
            records_upserted=total,
        )
        logger.info(
            "Sync complete",
            extra={
                "records": total,
                "run_id": run_id,
                "duration_s": round(time.monotonic() - started, 3),
            },
        )
        return results

    def _batch_rows(self, rows: list[Any], size: Optional[int] = None) -> list[list[Any]]:
        """Split rows into batches of the configured size."""
        size = size or self.batch_size
        return [rows[i : i + size] for i in range(0, len(rows), size)]
