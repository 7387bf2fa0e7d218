"""
Storage abstractions for the schedule services.

Provides async clients for:
- PostgreSQL (schedule events, teams, owners)
"""

from .postgres import PostgresClient, PostgresConfig

__all__ = [
    "PostgresClient",
    "PostgresConfig",
]
