"""
Schedule Service package.

Serves read-only views of team scheduling events. Every response is
built from one projecting query, so event, team and owner fields
arrive together and nothing is resolved after the query returns.

Subpackages:
- queries: Projection queries over the schedule store
- apis: HTTP endpoints for event lookups
"""

__all__ = [
    "__doc__",
]
