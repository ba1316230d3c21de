"""Keyveve - Application state and configuration."""

import os
import re
from typing import Optional, Any, TYPE_CHECKING

if TYPE_CHECKING:
    import argparse
    from api import PortalClient

__version__ = "0.1.0"

DEFAULT_API_URL = "https://keyveve-accounting-demo-backend.onrender.com"
LOCAL_API_URL = "http://localhost:8000"
DEFAULT_POLL_INTERVAL = 30.0


def _strip_rich_markup(text: str) -> str:
    """Remove Rich markup tags like [red], [/red], [bold], etc."""
    return re.sub(r'\[/?[a-zA-Z_ ]+\]', '', text)


def resolve_api_url(local: bool = False) -> str:
    """Pick the API base URL.

    KEYVEVE_API_URL wins over everything; otherwise --local selects the
    development server and the deployed backend is the default.
    """
    url = os.environ.get('KEYVEVE_API_URL')
    if not url:
        url = LOCAL_API_URL if local else DEFAULT_API_URL
    return url.rstrip('/')


class Keyveve:
    """Central configuration and state for the portal client."""

    # CLI config options
    api_url: str = DEFAULT_API_URL
    project_id: Optional[int] = None
    poll_interval: float = DEFAULT_POLL_INTERVAL

    # Global resources
    client: Optional["PortalClient"] = None

    # UI app reference (None = CLI mode)
    _app: Optional[Any] = None

    @classmethod
    def configure(cls, args: "argparse.Namespace",
                  client: Optional["PortalClient"] = None) -> None:
        """Initialize configuration from parsed CLI args."""
        cls.api_url = resolve_api_url(getattr(args, 'local', False))

        project = getattr(args, 'project', None) or os.environ.get('KEYVEVE_PROJECT')
        cls.project_id = int(project) if project else None

        cls.poll_interval = float(
            os.environ.get('KEYVEVE_POLL_INTERVAL', DEFAULT_POLL_INTERVAL)
        )
        cls.client = client

    @classmethod
    def init_client(cls) -> "PortalClient":
        """Create the API client for the configured base URL."""
        from api import PortalClient
        cls.client = PortalClient(cls.api_url)
        return cls.client

    @classmethod
    def close(cls) -> None:
        """Cleanup resources."""
        if cls.client:
            cls.client.close()
            cls.client = None

    @classmethod
    def set_app(cls, app: Any) -> None:
        """Set the Textual app reference for UI updates."""
        cls._app = app

    @classmethod
    def print_left(cls, line1: str, line2: str = "") -> None:
        """Add entry to the notification log (left panel in TUI, stdout in CLI)."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.add_notification, line1, line2)
        else:
            print(_strip_rich_markup(line1))
            if line2:
                print(_strip_rich_markup(line2))

    @classmethod
    def print_right(cls, message: str) -> None:
        """Add line to activity log (right panel in TUI, stdout in CLI)."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.add_debug, message)
        else:
            print(_strip_rich_markup(message))

    @classmethod
    def notify(cls, title: str, description: str = "",
               variant: str = "default") -> None:
        """Raise a transient user-visible notification.

        Args:
            title: Short headline
            description: Optional detail line
            variant: "default" or "destructive" (errors)
        """
        if variant == "destructive":
            cls.print_left(f"[red]✗ {title}[/red]", description)
        else:
            cls.print_left(f"[green]✓ {title}[/green]", description)

    @classmethod
    def set_stage(cls, stage: str, progress: int) -> None:
        """Update progress bar and stage label."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.set_stage, stage, progress)

    @classmethod
    def show_folders(cls, organized: dict) -> None:
        """Render a folder -> documents grouping."""
        if cls._app is not None:
            cls._app.call_from_thread(cls._app.show_folders, organized)
            return
        for folder, docs in organized.items():
            print(f"{folder} ({len(docs)})")
            for doc in docs:
                print(f"  - {doc.display_name} [{doc.status}]")
