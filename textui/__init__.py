"""TextUI - Textual-based terminal UI for the portal client."""

import threading
from typing import Callable, Dict, List, Optional

from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Header, Footer, Static, RichLog, ProgressBar, Label
from textual.binding import Binding

from keyveve import Keyveve, __version__
from workflows import STAGE_LABELS, get_folder_icon


class HeaderInfo(Static):
    """Header widget showing the client and service line."""

    def __init__(self, client_name: str = "", service: str = "", **kwargs) -> None:
        super().__init__(**kwargs)
        self.client_name = client_name
        self.service = service

    def compose(self) -> ComposeResult:
        yield Static(f"Client: {self.client_name}", id="client-line")
        yield Static(f"Service: {self.service}", id="service-line")

    def update_info(self, client_name: str, service: str) -> None:
        """Update client and service display."""
        self.client_name = client_name
        self.service = service
        self.query_one("#client-line", Static).update(f"Client: {client_name}")
        self.query_one("#service-line", Static).update(f"Service: {service}")


class PortalApp(App):
    """Textual app with folder, notification and activity panes."""

    CSS = """
    Screen {
        layout: grid;
        grid-size: 1;
        grid-rows: auto 1fr auto;
    }

    #header-info {
        height: auto;
        padding: 0 1;
        background: $surface;
        border-bottom: solid $primary;
    }

    #main-content {
        height: 1fr;
    }

    #left-panel {
        width: 1fr;
        border-right: solid $primary;
    }

    #right-panel {
        width: 1fr;
    }

    .panel-title {
        height: 1;
        background: $primary;
        color: $text;
        text-align: center;
        text-style: bold;
    }

    .log-panel {
        height: 1fr;
    }

    #footer-bar {
        height: 3;
        padding: 0 1;
        background: $surface;
        border-top: solid $primary;
    }

    #progress-container {
        height: 1;
        margin-top: 1;
    }

    #progress-bar {
        width: 1fr;
    }

    #stage-label {
        width: auto;
        min-width: 30;
        text-align: right;
        margin-left: 1;
    }
    """

    BINDINGS = [
        Binding("a", "analyze", "Analyze"),
        Binding("r", "refresh", "Refresh"),
        Binding("q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit"),
    ]

    def __init__(self, client_name: str = "", service: str = "",
                 analyze_func: Optional[Callable[[], bool]] = None,
                 refresh_func: Optional[Callable[[], None]] = None,
                 startup_func: Optional[Callable[[], None]] = None,
                 shutdown_func: Optional[Callable[[], None]] = None) -> None:
        super().__init__()
        self.client_name = client_name
        self.service = service
        self._analyze_func = analyze_func
        self._refresh_func = refresh_func
        self._startup_func = startup_func
        self._shutdown_func = shutdown_func

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield HeaderInfo(self.client_name, self.service, id="header-info")

        with Horizontal(id="main-content"):
            with Vertical(id="left-panel"):
                yield Static("FOLDERS", classes="panel-title")
                yield RichLog(id="folder-log", classes="log-panel", highlight=True, markup=True)
                yield Static("NOTIFICATIONS", classes="panel-title")
                yield RichLog(id="notification-log", classes="log-panel", highlight=True, markup=True)

            with Vertical(id="right-panel"):
                yield Static("ACTIVITY LOG", classes="panel-title")
                yield RichLog(id="debug-log", classes="log-panel", highlight=True, markup=True)

        with Horizontal(id="footer-bar"):
            with Horizontal(id="progress-container"):
                yield ProgressBar(id="progress-bar", total=100, show_eta=False)
                yield Label(STAGE_LABELS["idle"], id="stage-label")

        yield Footer()

    def on_mount(self) -> None:
        """Wire up Keyveve UI references and start background work."""
        self.title = f"Keyveve Portal v{__version__}"
        self.theme = "textual-light"

        Keyveve.set_app(self)

        if self._startup_func:
            thread = threading.Thread(target=self._startup_func, daemon=True)
            thread.start()

    def on_unmount(self) -> None:
        """Stop background work and clear Keyveve UI references."""
        if self._shutdown_func:
            self._shutdown_func()
        Keyveve.set_app(None)

    def action_analyze(self) -> None:
        """Start an analysis run; the run itself refuses re-entry."""
        if self._analyze_func:
            thread = threading.Thread(target=self._analyze_func, daemon=True)
            thread.start()

    def action_refresh(self) -> None:
        if self._refresh_func:
            thread = threading.Thread(target=self._refresh_func, daemon=True)
            thread.start()

    def add_notification(self, line1: str, line2: str = "") -> None:
        """Add a notification entry to the left log."""
        log = self.query_one("#notification-log", RichLog)
        log.write(f"{line1}\n{line2}" if line2 else line1)

    def add_debug(self, message: str) -> None:
        """Add a message to the activity log."""
        log = self.query_one("#debug-log", RichLog)
        log.write(message)

    def set_stage(self, stage: str, progress: int) -> None:
        """Update the progress bar and stage label."""
        bar = self.query_one("#progress-bar", ProgressBar)
        bar.update(total=100, progress=progress)
        self.query_one("#stage-label", Label).update(STAGE_LABELS.get(stage, stage))

    def show_folders(self, organized: Dict[str, List]) -> None:
        """Redraw the folder pane from a folder -> documents grouping."""
        log = self.query_one("#folder-log", RichLog)
        log.clear()
        for folder, docs in organized.items():
            icon = get_folder_icon(folder)
            log.write(f"[bold]{folder}[/bold] [dim]({icon})[/dim] {len(docs)}")
            for doc in docs:
                log.write(f"    {doc.display_name} [dim]{doc.status}[/dim]")

    def update_header(self, client_name: str, service: str) -> None:
        """Update the header info."""
        self.query_one("#header-info", HeaderInfo).update_info(client_name, service)
