"""Configuration via environment variables with cloud-native secret support.

Supports:
  - Environment variables (local dev) and .env files
  - AWS Secrets Manager (aws-secret://name#key)
  - GCP Secret Manager (gcp-secret://name)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from github_provider.client import DEFAULT_API_BASE_URL
from github_provider.secrets import resolve_database_url, resolve_secret

ALL_TABLES = "*"


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    min_connections: int = 2
    max_connections: int = 10


@dataclass(frozen=True)
class GitHubConfig:
    token: str
    orgs: list[str] = field(default_factory=list)
    api_base_url: str = DEFAULT_API_BASE_URL
    per_page: int = 100
    timeout_s: float = 30


@dataclass(frozen=True)
class SchedulerConfig:
    sync_interval_min: int = 30
    misfire_grace_time: int = 300
    max_retries: int = 3


@dataclass(frozen=True)
class ProviderConfig:
    github: GitHubConfig
    database: Optional[DatabaseConfig] = None
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    # Resource map keys to fetch; ("*",) means all of them.
    tables: tuple[str, ...] = (ALL_TABLES,)
    batch_size: int = 500


def _split(raw: str) -> list[str]:
    return [s.strip() for s in raw.split(",") if s.strip()]


def load_config(require_database: bool = True) -> ProviderConfig:
    """Load configuration from environment variables.

    GITHUB_TOKEN and DATABASE_URL may be secret-manager references; they
    are resolved here so the rest of the code only sees plaintext.
    """
    load_dotenv()

    token_raw = os.environ.get("GITHUB_TOKEN", "")
    if not token_raw:
        raise ValueError("GITHUB_TOKEN environment variable is required")
    orgs = _split(os.environ.get("GITHUB_ORGS", ""))
    if not orgs:
        raise ValueError("GITHUB_ORGS environment variable is required")

    github = GitHubConfig(
        token=resolve_secret(token_raw),
        orgs=orgs,
        api_base_url=os.environ.get("GITHUB_API_BASE_URL", DEFAULT_API_BASE_URL),
        per_page=int(os.environ.get("GITHUB_PER_PAGE", "100")),
        timeout_s=float(os.environ.get("GITHUB_TIMEOUT_S", "30")),
    )

    database = None
    if require_database:
        database = DatabaseConfig(
            url=resolve_database_url(),
            min_connections=int(os.environ.get("DB_MIN_CONNECTIONS", "2")),
            max_connections=int(os.environ.get("DB_MAX_CONNECTIONS", "10")),
        )

    scheduler = SchedulerConfig(
        sync_interval_min=int(os.environ.get("GITHUB_SYNC_INTERVAL_MIN", "30")),
        misfire_grace_time=int(os.environ.get("SCHEDULER_MISFIRE_GRACE_S", "300")),
        max_retries=int(os.environ.get("SCHEDULER_MAX_RETRIES", "3")),
    )

    tables = tuple(_split(os.environ.get("GITHUB_TABLES", ALL_TABLES))) or (ALL_TABLES,)

    return ProviderConfig(
        github=github,
        database=database,
        scheduler=scheduler,
        tables=tables,
        batch_size=int(os.environ.get("INGESTION_BATCH_SIZE", "500")),
    )
