"""Staff dashboard: project list, project actions and workflow progress."""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, TYPE_CHECKING

from keyveve import Keyveve
from api import APIError

if TYPE_CHECKING:
    from api import PortalClient, PriceQuote, Project, Task


TABS = ("all", "active-projects", "awaiting-signature", "completed-projects")


def _parse_date(value: Optional[str]) -> Optional[date]:
    """Parse an ISO date or datetime string; None if missing or malformed."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
    except ValueError:
        return None


@dataclass
class WorkflowProgress:
    """Task completion summary for one project."""
    completed: int
    total: int
    percent: int
    next_deadline: Optional[date]

    def __str__(self) -> str:
        text = f"{self.completed}/{self.total} tasks complete"
        if self.next_deadline:
            text += f" (due {self.next_deadline.isoformat()})"
        return text


def workflow_progress(tasks: Iterable["Task"]) -> Optional[WorkflowProgress]:
    """Summarize task completion.

    Returns:
        None for a project without tasks, otherwise the completed count,
        rounded percentage and the earliest deadline among open tasks
    """
    tasks = list(tasks)
    if not tasks:
        return None

    completed = sum(1 for t in tasks if t.status == "completed")
    deadlines = [
        d for d in (_parse_date(t.deadline) for t in tasks if t.status != "completed")
        if d is not None
    ]
    return WorkflowProgress(
        completed=completed,
        total=len(tasks),
        percent=round(completed / len(tasks) * 100),
        next_deadline=min(deadlines) if deadlines else None,
    )


def filter_engagements(rows: Iterable[Dict[str, Any]], q: Optional[str] = None,
                       service: Optional[str] = None, partner: Optional[str] = None,
                       status: Optional[str] = None, referral: Optional[str] = None,
                       due_from: Optional[str] = None, due_to: Optional[str] = None,
                       late_only: bool = False,
                       today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Filter engagement rows the way the engagement table does.

    Text search looks at clientName and businessName. Rows without a due date
    pass the date window but never count as late. A missing referral matches
    the "—" placeholder; an empty one does not.
    """
    today = today or date.today()
    needle = q.lower() if q else None
    start = _parse_date(due_from)
    end = _parse_date(due_to)

    result = []
    for row in rows:
        if needle:
            haystack = f"{row.get('clientName', '')} {row.get('businessName') or ''}".lower()
            if needle not in haystack:
                continue
        if service and row.get('service') != service:
            continue
        if partner and row.get('partner') != partner:
            continue
        if status and row.get('status') != status:
            continue
        if referral:
            row_referral = row.get('referral')
            if (row_referral if row_referral is not None else "—") != referral:
                continue

        if start or end or late_only:
            due = _parse_date(row.get('dueDate'))
            if due is None:
                if late_only:
                    continue
            else:
                if start and due < start:
                    continue
                if end and due > end:
                    continue
                # Due at midnight, so a row due today is already late
                if late_only and today < due:
                    continue

        result.append(row)
    return result


class ProjectBoard:
    """Project list with the actions staff run from the dashboard.

    Every action is a single request. Mutations refresh the list afterwards;
    failures are reported and leave the last loaded list in place.
    """

    def __init__(self, client: "PortalClient") -> None:
        self.client = client
        self.projects: List["Project"] = []
        self.status: Optional[str] = None
        self.service_type: Optional[str] = None
        self.staff_id: Optional[str] = None
        self.limit = 100

    def load(self, status: Optional[str] = None, service_type: Optional[str] = None,
             staff_id: Optional[str] = None, limit: int = 100) -> bool:
        """Fetch projects with the given filters and remember them for refreshes."""
        self.status, self.service_type, self.staff_id, self.limit = (
            status, service_type, staff_id, limit
        )
        return self.refresh()

    def refresh(self) -> bool:
        try:
            self.projects = self.client.list_projects(
                limit=self.limit, status=self.status,
                service_type=self.service_type, staff_id=self.staff_id,
            )
        except APIError as e:
            Keyveve.print_right(f"[red]Error fetching projects: {e}[/red]")
            Keyveve.notify("Error loading projects",
                           "Could not load projects. Please try again.",
                           variant="destructive")
            return False
        Keyveve.print_right(f"Loaded {len(self.projects)} projects")
        return True

    def filter_by_tab(self, tab: str = "all") -> List["Project"]:
        """Projects shown on a dashboard tab.

        Raises:
            ValueError: If tab is not one of TABS
        """
        if tab == "active-projects":
            return [p for p in self.projects if p.status != "Completed"]
        if tab == "awaiting-signature":
            return [p for p in self.projects if p.status == "Awaiting Signature"]
        if tab == "completed-projects":
            return [p for p in self.projects if p.status == "Completed"]
        if tab == "all":
            return list(self.projects)
        raise ValueError(f"Unknown tab: {tab}. Must be one of: {', '.join(TABS)}")

    def _mutate(self, error_title: str, action, *args, **kwargs) -> Optional[Any]:
        """Run one mutating call; refresh on success, report on failure."""
        try:
            result = action(*args, **kwargs)
        except APIError as e:
            Keyveve.print_right(f"[red]{error_title}: {e}[/red]")
            Keyveve.notify(error_title, "Please try again.", variant="destructive")
            return None
        self.refresh()
        # Callers distinguish success from failure, not the payload
        return result if result is not None else True

    def create_project(self, client_name: str, service_type: Optional[str] = None,
                       assigned_staff: Optional[List[str]] = None,
                       staff_roles: Optional[Dict[str, str]] = None) -> bool:
        if not client_name.strip():
            Keyveve.notify("Client name required",
                           "Please enter a client name to create a project.",
                           variant="destructive")
            return False

        result = self._mutate("Error creating project", self.client.create_project,
                              client_name, service_type=service_type,
                              assigned_staff=assigned_staff, staff_roles=staff_roles)
        if result is None:
            return False
        Keyveve.notify("Project created", f"Created a new project for {client_name}.")
        return True

    def change_status(self, project_id: int, new_status: str) -> bool:
        if self._mutate("Error updating status", self.client.update_project_status,
                        project_id, new_status) is None:
            return False
        Keyveve.notify("Status updated", f"Project status changed to {new_status}.")
        return True

    def assign_staff(self, project_id: int, staff_ids: List[str],
                     staff_roles: Optional[Dict[str, str]] = None) -> bool:
        # Staff without an explicit role default to plain staff
        roles = {sid: (staff_roles or {}).get(sid, "staff") for sid in staff_ids}
        if self._mutate("Error assigning staff", self.client.assign_staff,
                        project_id, staff_ids, roles) is None:
            return False
        Keyveve.notify("Staff assigned", "Assignments updated.")
        return True

    def import_csv(self, csv_content: str) -> int:
        """Import projects from CSV text; returns the number imported."""
        if not csv_content.strip():
            Keyveve.notify("CSV content required", "Please enter CSV content to import.",
                           variant="destructive")
            return 0
        result = self._mutate("Error importing CSV", self.client.import_csv, csv_content)
        if result is None:
            return 0
        count = int(result.get('imported_count', 0))
        Keyveve.notify("CSV import successful", f"Imported {count} projects from CSV.")
        return count

    def import_pms(self) -> int:
        """Import projects from the practice management system."""
        result = self._mutate("Error importing from PMS", self.client.import_pms)
        if result is None:
            return 0
        count = int(result.get('imported_count', 0))
        Keyveve.notify("PMS import successful",
                       f"Imported {count} projects from practice management software.")
        return count

    def toggle_integration(self, integration_type: str) -> bool:
        """Connect an integration, or disconnect it if already connected."""
        try:
            integrations = self.client.list_integrations()
            connected = bool(integrations.get(integration_type, {}).get('connected'))
            self.client.connect_integration(
                integration_type, action="disconnect" if connected else "connect"
            )
        except APIError as e:
            Keyveve.print_right(f"[red]Error with integration: {e}[/red]")
            Keyveve.notify("Error with integration",
                           "Could not connect/disconnect integration. Please try again.",
                           variant="destructive")
            return False
        Keyveve.notify("Integration disconnected" if connected else "Integration connected",
                       integration_type)
        return True

    def send_engagement_letter(self, project_id: int) -> bool:
        if self._mutate("Error sending engagement letter",
                        self.client.send_engagement_letter, project_id) is None:
            return False
        Keyveve.notify("Data Sent", "Client data sent to engagement letter software.")
        return True

    def request_price(self, project_id: int,
                      complexity_factors: Optional[Dict[str, float]] = None) -> Optional["PriceQuote"]:
        try:
            quote = self.client.request_price(project_id, complexity_factors)
        except APIError as e:
            Keyveve.print_right(f"[red]Error calculating price: {e}[/red]")
            Keyveve.notify("Error calculating price", str(e), variant="destructive")
            return None
        Keyveve.print_right(f"Suggested price: ${quote.suggested_price:,.2f}")
        return quote

    def ask_question(self, question: str, project_id: Optional[int] = None) -> Optional[str]:
        if not question.strip():
            return None
        try:
            return self.client.ask_question(question, project_id=project_id)
        except APIError as e:
            Keyveve.print_right(f"[red]Error asking question: {e}[/red]")
            Keyveve.notify("Error", "Couldn't process question.", variant="destructive")
            return None

    def schedule_task(self, task_id: str, staff_id: str, start: datetime,
                      end: Optional[datetime] = None,
                      sync_to_calendar: Optional[str] = None) -> bool:
        """Schedule a task; end defaults to start."""
        fmt = "%Y-%m-%dT%H:%M:%S"
        try:
            self.client.schedule_task(
                task_id, staff_id,
                scheduled_start=start.strftime(fmt),
                scheduled_end=(end or start).strftime(fmt),
                sync_to_calendar=sync_to_calendar,
            )
        except APIError as e:
            Keyveve.print_right(f"[red]Error scheduling task: {e}[/red]")
            Keyveve.notify("Error scheduling task", str(e), variant="destructive")
            return False
        Keyveve.notify("Task scheduled", f"Task {task_id} scheduled for {start.strftime(fmt)}.")
        return True
