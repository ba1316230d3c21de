"""Workflow layer for the portal client.

Contains the client-side logic behind the portal screens:
- Taxonomy: service-specific folder sets
- Classification: document -> folder rules
- Analysis: staged analyze run with live progress
- Documents: per-project document cache and actions
- Projects: staff dashboard actions and workflow progress
- Polling: periodic refresh of projects and notifications
"""

from .taxonomy import (
    Folder,
    COMMON_FOLDERS,
    DEFAULT_FOLDER,
    get_folders,
    get_folder_icon,
    get_folder_entries,
    resolve_service_line,
    is_recognized_category,
)
from .classifier import (
    classify,
    classify_by_score,
    score_folders,
    get_rules,
    assign_folders,
    organize_documents,
)
from .analysis import AnalysisSimulator, STAGES, STAGE_LABELS
from .documents import DocumentWorkspace
from .projects import (
    ProjectBoard,
    TABS,
    WorkflowProgress,
    workflow_progress,
    filter_engagements,
)
from .polling import Poller, NotificationFeed, ProjectWatcher


__all__ = [
    # Taxonomy
    'Folder',
    'COMMON_FOLDERS',
    'DEFAULT_FOLDER',
    'get_folders',
    'get_folder_icon',
    'get_folder_entries',
    'resolve_service_line',
    'is_recognized_category',

    # Classification
    'classify',
    'classify_by_score',
    'score_folders',
    'get_rules',
    'assign_folders',
    'organize_documents',

    # Analysis
    'AnalysisSimulator',
    'STAGES',
    'STAGE_LABELS',

    # Documents
    'DocumentWorkspace',

    # Projects
    'ProjectBoard',
    'TABS',
    'WorkflowProgress',
    'workflow_progress',
    'filter_engagements',

    # Polling
    'Poller',
    'NotificationFeed',
    'ProjectWatcher',
]
