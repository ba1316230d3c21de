"""Staged document analysis run.

The stages shown to the user (scanning, classifying, ...) are timed progress
feedback only. The real work happens once at the end: the server is asked to
organize the project's documents, the refreshed records are classified into
display folders, and the grouping is stored.
"""

import threading
import time
from typing import Callable, Dict, List, Optional, Tuple, TYPE_CHECKING

from keyveve import Keyveve
from api import APIError
from .classifier import assign_folders, organize_documents

if TYPE_CHECKING:
    from api import PortalClient, Document


IDLE = "idle"
PREPARING = "preparing"
SCANNING = "scanning"
CLASSIFYING = "classifying"
ORGANIZING = "organizing"
RENAMING = "renaming"
COMPLETE = "complete"

STAGES = (IDLE, PREPARING, SCANNING, CLASSIFYING, ORGANIZING, RENAMING, COMPLETE)

# (stage, progress percent, seconds after start)
STAGE_SCHEDULE: List[Tuple[str, int, float]] = [
    (SCANNING, 15, 1.2),
    (CLASSIFYING, 45, 3.8),
    (ORGANIZING, 70, 6.8),
    (RENAMING, 85, 8.8),
]
COMPLETION_OFFSET = 10.8

STAGE_LABELS: Dict[str, str] = {
    IDLE: "Ready",
    PREPARING: "Preparing documents",
    SCANNING: "Scanning documents",
    CLASSIFYING: "Classifying document types",
    ORGANIZING: "Organizing into folders",
    RENAMING: "Generating document titles",
    COMPLETE: "Analysis complete",
}

Listener = Callable[[str, int], None]


class AnalysisSimulator:
    """Linear, single-shot analysis run for one project.

    idle -> preparing -> scanning -> classifying -> organizing -> renaming -> complete

    Only one run may be in flight, and a completed simulator refuses further
    runs. A failed final step drops back to idle so the user can try again.
    """

    def __init__(self, client: "PortalClient", project_id: int,
                 service_category: Optional[str],
                 schedule: Optional[List[Tuple[str, int, float]]] = None,
                 completion_offset: float = COMPLETION_OFFSET,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        self.client = client
        self.project_id = project_id
        self.service_category = service_category
        self.schedule = schedule if schedule is not None else STAGE_SCHEDULE
        self.completion_offset = completion_offset
        self._sleep = sleep

        self.stage = IDLE
        self.progress = 0
        self.documents: List["Document"] = []
        self.organized: Dict[str, List["Document"]] = {}

        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self.stage not in (IDLE, COMPLETE)

    @property
    def is_complete(self) -> bool:
        return self.stage == COMPLETE

    @property
    def can_start(self) -> bool:
        return self.stage == IDLE

    def subscribe(self, listener: Listener) -> None:
        """Register a callback(stage, progress) fired on every transition."""
        self._listeners.append(listener)

    def _set_stage(self, stage: str, progress: int) -> None:
        self.stage = stage
        self.progress = progress
        Keyveve.set_stage(stage, progress)
        for listener in self._listeners:
            listener(stage, progress)

    def _claim(self) -> bool:
        """Move idle -> preparing atomically; False if a run is active or done."""
        with self._lock:
            if not self.can_start:
                return False
            self._set_stage(PREPARING, 0)
            return True

    def start(self) -> bool:
        """Start a run on a background thread.

        Returns:
            True if a run was started, False if one is in progress or the
            analysis has already completed
        """
        if not self._claim():
            Keyveve.print_right("Analysis already running or complete")
            return False

        self._thread = threading.Thread(target=self._run_schedule, daemon=True)
        self._thread.start()
        return True

    def run(self) -> bool:
        """Run the whole analysis on the calling thread.

        Returns:
            True if the analysis completed, False if it was refused or the
            final step failed
        """
        if not self._claim():
            Keyveve.print_right("Analysis already running or complete")
            return False
        return self._run_schedule()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run_schedule(self) -> bool:
        elapsed = 0.0
        for stage, progress, offset in self.schedule:
            self._sleep(max(offset - elapsed, 0.0))
            elapsed = max(offset, elapsed)
            self._set_stage(stage, progress)

        self._sleep(max(self.completion_offset - elapsed, 0.0))
        return self._finish()

    def _finish(self) -> bool:
        """Organize on the server, refetch and classify."""
        try:
            self.client.organize_documents(self.project_id)
            documents = self.client.list_documents(self.project_id)
        except APIError as e:
            Keyveve.print_right(f"[red]Analysis failed: {e}[/red]")
            Keyveve.notify("Error during analysis", str(e), variant="destructive")
            self._set_stage(IDLE, 0)
            return False

        assign_folders(documents, self.service_category)
        self.documents = documents
        self.organized = organize_documents(documents, self.service_category)

        self._set_stage(COMPLETE, 100)
        Keyveve.notify(
            "Analysis complete",
            f"{len(documents)} documents classified and organized for "
            f"{self.service_category or 'general'} workflow.",
        )
        return True
