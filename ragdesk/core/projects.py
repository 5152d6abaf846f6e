"""
Project registry: maps known project ids to the vector index filter token.

Unknown ids are a hard failure; no default project is assumed.
"""

from types import MappingProxyType
from uuid import UUID

from ragdesk.core.result import Result

# Known projects; adding a tenant means adding an entry to _FILTERS.
TESLA_MOTORS_ID = UUID("0a52b428-e00b-4f16-af14-98404f17fab7")

# Sentinel used when the caller sends no project id.
UNKNOWN_PROJECT_ID = UUID(int=0)

_FILTERS = MappingProxyType({
    TESLA_MOTORS_ID: "tesla_motors",
})


def to_filter_value(project_id: UUID | None) -> Result[str]:
    """Return the filter token for project_id, or a failure for unknown/absent ids."""
    pid = project_id if project_id is not None else UNKNOWN_PROJECT_ID
    token = _FILTERS.get(pid)
    if token is None:
        return Result.failure(f"Unknown project ID: {pid}")
    return Result.success(token)
