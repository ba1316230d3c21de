"""Records and errors for the portal REST API.

All records are owned by the server. The client only keeps copies of what the
project and document endpoints return.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class APIError(Exception):
    """Base exception for portal API calls."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# Where a document's file lives
STORAGE_LOCATIONS = ("cloud", "sharepoint", "cch", "keyveve")

# Who a document belongs to
DOC_CATEGORIES = ("client", "internal", "permanent")

# Document lifecycle; any status may be set from any other
DOC_STATUSES = ("awaiting_review", "reviewed", "signed", "filed")

TASK_STATUSES = ("pending", "in_progress", "blocked", "completed")


@dataclass
class Document:
    """A project document as returned by the API.

    Attributes:
        doc_id: Server identifier
        original_name: File name at upload time
        doc_type: Declared document type (free-text label)
        extracted_data: Opaque text/summary from server-side extraction
        storage_location: One of STORAGE_LOCATIONS
        doc_category: One of DOC_CATEGORIES
        status: One of DOC_STATUSES
        suggested_name: AI-suggested title, if any
        final_name: Accepted name, if the user has chosen one
        folder: Display folder computed client-side, never sent back
    """
    doc_id: str
    original_name: str = ""
    doc_type: str = ""
    extracted_data: str = ""
    storage_location: str = "cloud"
    doc_category: str = "client"
    status: str = "awaiting_review"
    stored_name: Optional[str] = None
    suggested_name: Optional[str] = None
    final_name: Optional[str] = None
    folder: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        return cls(
            doc_id=str(data.get('doc_id', '')),
            original_name=data.get('original_name') or "",
            doc_type=data.get('doc_type') or "",
            extracted_data=data.get('extracted_data') or "",
            storage_location=data.get('storage_location') or "cloud",
            doc_category=data.get('doc_category') or "client",
            status=data.get('status') or "awaiting_review",
            stored_name=data.get('stored_name'),
            suggested_name=data.get('suggested_name'),
            final_name=data.get('final_name'),
            folder=data.get('folder'),
        )

    @property
    def display_name(self) -> str:
        """Accepted name if there is one, otherwise the uploaded name."""
        return self.final_name or self.original_name or self.doc_id

    @property
    def has_pending_suggestion(self) -> bool:
        return bool(self.suggested_name) and not self.final_name


@dataclass
class Task:
    id: str
    title: str
    description: Optional[str] = None
    status: str = "pending"
    deadline: Optional[str] = None
    assigned_to: List[str] = field(default_factory=list)
    related_docs: List[str] = field(default_factory=list)
    scheduled_start: Optional[str] = None
    scheduled_end: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        return cls(
            id=str(data.get('id', '')),
            title=data.get('title') or "",
            description=data.get('description'),
            status=data.get('status') or "pending",
            deadline=data.get('deadline'),
            assigned_to=list(data.get('assigned_to') or []),
            related_docs=list(data.get('related_docs') or []),
            scheduled_start=data.get('scheduled_start'),
            scheduled_end=data.get('scheduled_end'),
        )


@dataclass
class StaffMember:
    id: str
    name: str
    email: str = ""
    role: str = ""
    avatar_url: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StaffMember":
        return cls(
            id=str(data.get('id', '')),
            name=data.get('name') or "",
            email=data.get('email') or "",
            role=data.get('role') or "",
            avatar_url=data.get('avatar_url'),
        )


@dataclass
class Notification:
    id: str
    project_id: Optional[int]
    type: str
    message: str
    created_at: str = ""
    read: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Notification":
        return cls(
            id=str(data.get('id', '')),
            project_id=data.get('project_id'),
            type=data.get('type') or "info",
            message=data.get('message') or "",
            created_at=data.get('created_at') or "",
            read=bool(data.get('read', False)),
        )


@dataclass
class PriceQuote:
    project_id: int
    suggested_price: float
    explanation: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PriceQuote":
        return cls(
            project_id=int(data.get('project_id', 0)),
            suggested_price=float(data.get('suggested_price', 0.0)),
            explanation=data.get('explanation') or "",
        )


@dataclass
class Project:
    """A client engagement.

    Attributes:
        id: Server identifier
        client_name: Client display name
        status: Free-text workflow status (e.g. "Awaiting Signature")
        service_type: Service category, drives the folder taxonomy
        docs: Documents attached to the project
        tasks: Workflow tasks
    """
    id: int
    client_name: str
    status: str = ""
    service_type: Optional[str] = None
    workflow_template: Optional[str] = None
    docs: List[Document] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    messages: List[Dict[str, Any]] = field(default_factory=list)
    assigned_staff: List[str] = field(default_factory=list)
    staff_roles: Dict[str, str] = field(default_factory=dict)
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Project":
        return cls(
            id=int(data['id']),
            client_name=data.get('client_name') or "",
            status=data.get('status') or "",
            service_type=data.get('service_type'),
            workflow_template=data.get('workflow_template'),
            docs=[Document.from_dict(d) for d in data.get('docs') or []],
            tasks=[Task.from_dict(t) for t in data.get('tasks') or []],
            messages=list(data.get('messages') or []),
            assigned_staff=[str(s) for s in data.get('assigned_staff') or []],
            staff_roles=dict(data.get('staff_roles') or {}),
            created_at=data.get('created_at') or "",
            updated_at=data.get('updated_at') or "",
        )
