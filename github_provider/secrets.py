"""Secret references for the GitHub token and database password.

A config value may point at a secret manager instead of holding the
plaintext; anything without a known prefix is used verbatim.
"""

from __future__ import annotations

import json
import logging
import os

import requests

logger = logging.getLogger("github_provider.secrets")

AWS_PREFIX = "aws-secret://"
GCP_PREFIX = "gcp-secret://"

_GCP_METADATA_PROJECT_URL = (
    "http://metadata.google.internal/computeMetadata/v1/project/project-id"
)


def resolve_secret(value: str) -> str:
    """Resolve a secret reference to its plaintext value.

      - "aws-secret://name"           -> AWS Secrets Manager
      - "aws-secret://name#key"       -> JSON key inside an AWS secret
      - "gcp-secret://name"           -> latest version in the current project
      - "gcp-secret://projects/..."   -> fully qualified GCP version name
    """
    if value.startswith(AWS_PREFIX):
        return _resolve_aws_secret(value[len(AWS_PREFIX):])
    if value.startswith(GCP_PREFIX):
        return _resolve_gcp_secret(value[len(GCP_PREFIX):])
    return value


def _resolve_aws_secret(ref: str) -> str:
    import boto3

    secret_name, _, json_key = ref.partition("#")
    region = os.environ.get("AWS_REGION", "us-east-1")
    client = boto3.client("secretsmanager", region_name=region)

    logger.debug("Reading AWS secret %s", secret_name)
    secret_string = client.get_secret_value(SecretId=secret_name)["SecretString"]
    if json_key:
        return str(json.loads(secret_string)[json_key])
    return secret_string


def _resolve_gcp_secret(ref: str) -> str:
    from google.cloud import secretmanager

    if ref.startswith("projects/"):
        name = ref
    else:
        project = os.environ.get("GCP_PROJECT_ID") or _gcp_project_from_metadata()
        name = f"projects/{project}/secrets/{ref}/versions/latest"

    logger.debug("Reading GCP secret %s", name)
    client = secretmanager.SecretManagerServiceClient()
    response = client.access_secret_version(request={"name": name})
    return response.payload.data.decode("UTF-8")


def _gcp_project_from_metadata() -> str:
    try:
        resp = requests.get(
            _GCP_METADATA_PROJECT_URL,
            headers={"Metadata-Flavor": "Google"},
            timeout=2,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        raise RuntimeError(
            "Cannot determine GCP project ID. Set GCP_PROJECT_ID env var."
        ) from exc
    return resp.text


def resolve_database_url() -> str:
    """DATABASE_URL if set, otherwise assembled from PG_* variables."""
    url = os.environ.get("DATABASE_URL", "")
    if url:
        return resolve_secret(url)

    host = os.environ.get("PG_HOST", "localhost")
    port = os.environ.get("PG_PORT", "5432")
    user = os.environ.get("PG_USER", "github")
    password = resolve_secret(os.environ.get("PG_PASSWORD", ""))
    database = os.environ.get("PG_DATABASE", "github")

    auth = f"{user}:{password}" if password else user
    return f"postgresql://{auth}@{host}:{port}/{database}"
