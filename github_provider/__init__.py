"""GitHub organisation data provider.

Queries the GitHub REST API for organisations, members, repositories,
teams, external groups and billing metrics, flattens each response into
table rows and upserts them into PostgreSQL.
"""

__version__ = "0.1.0"
