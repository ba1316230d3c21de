"""Periodic refresh of project details and notifications.

A Poller runs its callback on a fixed interval from one background thread, so
ticks never overlap each other. Stopping the poller is the teardown: the
timer is cleared, but a request already in flight runs to completion.
"""

import threading
from typing import Callable, List, Optional, TYPE_CHECKING

from keyveve import Keyveve, DEFAULT_POLL_INTERVAL
from api import APIError

if TYPE_CHECKING:
    from api import Notification, PortalClient, Project
    from .documents import DocumentWorkspace


class Poller:
    """Repeating timer around a callback."""

    def __init__(self, callback: Callable[[], None],
                 interval: float = DEFAULT_POLL_INTERVAL,
                 name: str = "poller") -> None:
        if interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {interval}")
        self.callback = callback
        self.interval = interval
        self.name = name
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def poll_once(self) -> None:
        """Run the callback once; errors are logged, never raised."""
        try:
            self.callback()
        except Exception as e:
            Keyveve.print_right(f"[red]{self.name} failed: {e}[/red]")

    def _loop(self) -> None:
        while not self._stop.wait(self.interval):
            self.poll_once()

    def start(self, immediate: bool = True) -> None:
        """Start polling.

        Args:
            immediate: Run the callback once right away before the first wait
        """
        if self.running:
            return
        self._stop.clear()
        if immediate:
            self.poll_once()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


class NotificationFeed:
    """Unread notifications for the signed-in firm."""

    def __init__(self, client: "PortalClient", limit: int = 20) -> None:
        self.client = client
        self.limit = limit
        self.notifications: List["Notification"] = []

    @property
    def unread_count(self) -> int:
        return len(self.notifications)

    def refresh(self) -> bool:
        """Fetch unread notifications; keeps the previous list on failure."""
        try:
            notifications = self.client.list_notifications(unread_only=True, limit=self.limit)
        except APIError as e:
            Keyveve.print_right(f"Error fetching notifications: {e}")
            return False

        seen = {n.id for n in self.notifications}
        for notification in notifications:
            if notification.id not in seen:
                Keyveve.print_left(f"[bold]{notification.type}[/bold]", notification.message)
        self.notifications = notifications
        return True

    def mark_read(self, notification_id: str) -> bool:
        try:
            self.client.mark_notification_read(notification_id)
        except APIError as e:
            Keyveve.print_right(f"Error marking notification as read: {e}")
            return False
        return self.refresh()


class ProjectWatcher:
    """Keeps one project record (and its document workspace) fresh."""

    def __init__(self, client: "PortalClient", project_id: int,
                 workspace: Optional["DocumentWorkspace"] = None) -> None:
        self.client = client
        self.project_id = project_id
        self.workspace = workspace
        self.project: Optional["Project"] = workspace.project if workspace else None

    def refresh(self) -> bool:
        """Fetch the project; stale data stays on display if the call fails."""
        try:
            project = self.client.get_project(self.project_id)
        except APIError as e:
            Keyveve.print_right(f"Error loading project {self.project_id}: {e}")
            return False

        self.project = project
        if self.workspace is not None:
            self.workspace.replace_project(project)
        return True
