"""Portal API client.

Usage:
    from api import create_client

    client = create_client()
    project = client.get_project(42)
    docs = client.list_documents(project.id)
"""

from typing import Optional

from .base import (
    APIError,
    Document,
    Project,
    Task,
    StaffMember,
    Notification,
    PriceQuote,
    STORAGE_LOCATIONS,
    DOC_CATEGORIES,
    DOC_STATUSES,
    TASK_STATUSES,
)
from .client import PortalClient


def create_client(base_url: Optional[str] = None, local: bool = False) -> PortalClient:
    """Create a client for the given base URL.

    Args:
        base_url: Explicit base URL; when omitted it is resolved from
            KEYVEVE_API_URL, then --local, then the deployed default
        local: Prefer the development server when no URL is configured

    Returns:
        PortalClient instance
    """
    from keyveve import resolve_api_url
    return PortalClient(base_url or resolve_api_url(local))


__all__ = [
    'APIError',
    'Document',
    'Project',
    'Task',
    'StaffMember',
    'Notification',
    'PriceQuote',
    'STORAGE_LOCATIONS',
    'DOC_CATEGORIES',
    'DOC_STATUSES',
    'TASK_STATUSES',
    'PortalClient',
    'create_client',
]
