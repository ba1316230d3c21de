#!/usr/bin/env python3
"""Keyveve Portal - terminal client for the accounting portal."""

import argparse
import os
import sys
import time
from typing import Optional, Tuple

from keyveve import Keyveve, __version__
from api import APIError, DOC_CATEGORIES, DOC_STATUSES, STORAGE_LOCATIONS
from workflows import (
    AnalysisSimulator,
    DocumentWorkspace,
    NotificationFeed,
    Poller,
    ProjectBoard,
    ProjectWatcher,
    STAGE_LABELS,
    TABS,
    classify,
    get_folder_entries,
    workflow_progress,
)


def require_project() -> Optional[int]:
    """Return the configured project id, or print how to set one."""
    if Keyveve.project_id is None:
        print("Error: no project selected")
        print("Use --project or set KEYVEVE_PROJECT")
        print("Example: --project=42 or KEYVEVE_PROJECT=42")
    return Keyveve.project_id


def load_workspace(project_id: int) -> Optional[DocumentWorkspace]:
    """Fetch a project and wrap its documents in a workspace."""
    try:
        project = Keyveve.client.get_project(project_id)
    except APIError as e:
        Keyveve.notify("Error loading project", str(e), variant="destructive")
        return None

    Keyveve.print_right(f"Project: {project.client_name} ({project.service_type or 'no service'})")
    Keyveve.print_right(f"Status: {project.status}")
    progress = workflow_progress(project.tasks)
    if progress:
        Keyveve.print_right(f"Workflow: {progress}")
    return DocumentWorkspace(Keyveve.client, project)


def show_folders(service: Optional[str]) -> None:
    """Print the folder taxonomy for a service category."""
    print(f"Service: {service or '(unrecognized)'}")
    for folder in get_folder_entries(service):
        print(f"  - {folder.name} ({folder.icon})")


def run_analysis(workspace: DocumentWorkspace) -> bool:
    """Run the staged analysis in the foreground (CLI mode)."""
    simulator = AnalysisSimulator(
        Keyveve.client, workspace.project.id, workspace.service_category
    )
    simulator.subscribe(
        lambda stage, progress: Keyveve.print_right(f"[{progress:3}%] {STAGE_LABELS[stage]}")
    )
    if not simulator.run():
        return False

    workspace.docs = simulator.documents
    Keyveve.show_folders(simulator.organized)
    return True


def parse_status_arg(value: str) -> Tuple[str, str]:
    """Split a DOC_ID=STATUS argument."""
    doc_id, sep, status = value.partition('=')
    if not sep or not doc_id or not status:
        raise argparse.ArgumentTypeError(f"Expected DOC_ID=STATUS, got '{value}'")
    if status not in DOC_STATUSES:
        raise argparse.ArgumentTypeError(
            f"Unknown status '{status}'. Must be one of: {', '.join(DOC_STATUSES)}"
        )
    return doc_id, status


def list_projects(tab: str, service: Optional[str]) -> None:
    board = ProjectBoard(Keyveve.client)
    if not board.load(service_type=service):
        return
    for project in board.filter_by_tab(tab):
        progress = workflow_progress(project.tasks)
        suffix = f" - {progress}" if progress else ""
        print(f"#{project.id:<5} {project.client_name:<30} {project.service_type or '':<25} "
              f"{project.status}{suffix}")


def run_watch(project_id: Optional[int]) -> None:
    """Poll notifications (and the project, if selected) until interrupted."""
    feed = NotificationFeed(Keyveve.client)
    pollers = [Poller(feed.refresh, Keyveve.poll_interval, name="notifications")]

    if project_id is not None:
        watcher = ProjectWatcher(Keyveve.client, project_id)

        def refresh_project():
            if watcher.refresh():
                Keyveve.print_right(
                    f"Project {watcher.project.client_name}: {watcher.project.status}"
                )

        pollers.append(Poller(refresh_project, Keyveve.poll_interval, name="project"))

    Keyveve.print_right(f"Polling every {Keyveve.poll_interval:.0f}s (Ctrl+C to stop)")
    for poller in pollers:
        poller.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        pass
    finally:
        for poller in pollers:
            poller.stop()


def main_tui(project_id: int) -> None:
    """Interactive mode: folder view, live analysis progress and polling."""
    from textui import PortalApp

    workspace = load_workspace(project_id)
    if workspace is None:
        return

    simulator = AnalysisSimulator(Keyveve.client, project_id, workspace.service_category)
    feed = NotificationFeed(Keyveve.client)
    watcher = ProjectWatcher(Keyveve.client, project_id, workspace)

    def render():
        if simulator.is_complete:
            Keyveve.show_folders(workspace.organized())

    def analyze():
        if simulator.run():
            workspace.docs = simulator.documents
            render()

    def refresh():
        if watcher.refresh():
            render()
        feed.refresh()

    poller = Poller(refresh, Keyveve.poll_interval, name="refresh")

    def startup():
        Keyveve.print_right(f"API: {Keyveve.api_url}")
        Keyveve.print_right(f"{len(workspace.docs)} documents. Press 'a' to analyze.")
        poller.start()

    app = PortalApp(
        client_name=workspace.project.client_name,
        service=workspace.service_category or "",
        analyze_func=analyze,
        refresh_func=refresh,
        startup_func=startup,
        shutdown_func=lambda: poller.stop(timeout=0),
    )
    app.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Accounting portal client")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--project", type=int,
                        help="Project id (overrides KEYVEVE_PROJECT)")
    parser.add_argument("--local", action="store_true",
                        help="Use the development API at localhost:8000")
    parser.add_argument("--service", type=str,
                        help="Service category for --showfolders, --classify or --projects")
    parser.add_argument("--showfolders", action="store_true",
                        help="Print the folder taxonomy for the service category")
    parser.add_argument("--classify", type=str, metavar="FILENAME",
                        help="Show which folder a file name would be filed under")
    parser.add_argument("--doc-type", type=str, default="",
                        help="Declared document type (use with --classify)")
    parser.add_argument("--analyze", action="store_true",
                        help="Run document analysis for the project")
    parser.add_argument("--upload", type=str, metavar="PATH",
                        help="Upload a file, or every file in a folder, to the project")
    parser.add_argument("--storage", choices=STORAGE_LOCATIONS, default="keyveve",
                        help="Storage location for --upload")
    parser.add_argument("--category", choices=DOC_CATEGORIES, default="client",
                        help="Document category for --upload")
    parser.add_argument("--status", type=parse_status_arg, metavar="DOC_ID=STATUS",
                        help="Set a document's status")
    parser.add_argument("--accept", type=str, metavar="DOC_ID",
                        help="Accept the suggested title of a document")
    parser.add_argument("--dismiss", type=str, metavar="DOC_ID",
                        help="Dismiss the suggested title of a document")
    parser.add_argument("--projects", nargs="?", const="all", choices=TABS,
                        help="List projects (optionally one dashboard tab)")
    parser.add_argument("--notifications", action="store_true",
                        help="Show unread notifications")
    parser.add_argument("--ask", type=str, metavar="QUESTION",
                        help="Ask a question about the project")
    parser.add_argument("--watch", action="store_true",
                        help="Poll notifications and project status")
    parser.add_argument("--cli", action="store_true",
                        help="Use CLI output instead of TextUI (default is TextUI)")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()

    Keyveve.configure(args)

    # Offline commands first (don't need the API)
    if args.showfolders:
        show_folders(args.service)
        sys.exit(0)

    if args.classify:
        doc = {'original_name': args.classify, 'doc_type': args.doc_type}
        print(classify(doc, args.service))
        sys.exit(0)

    Keyveve.init_client()
    try:
        if args.projects:
            list_projects(args.projects, args.service)

        elif args.notifications:
            feed = NotificationFeed(Keyveve.client)
            if feed.refresh() and not feed.notifications:
                print("No unread notifications")

        elif args.watch:
            run_watch(Keyveve.project_id)

        elif args.ask:
            answer = ProjectBoard(Keyveve.client).ask_question(args.ask, Keyveve.project_id)
            if answer:
                print(answer)

        elif require_project() is None:
            pass

        elif args.upload or args.status or args.accept or args.dismiss or args.analyze:
            workspace = load_workspace(Keyveve.project_id)
            if workspace is not None:
                if args.upload:
                    if os.path.isdir(args.upload):
                        workspace.upload_folder(args.upload, args.storage, args.category)
                    else:
                        workspace.upload(args.upload, args.storage, args.category)
                if args.status:
                    workspace.set_status(*args.status)
                if args.accept:
                    workspace.choose_title(args.accept, accept=True)
                if args.dismiss:
                    workspace.choose_title(args.dismiss, accept=False)
                if args.analyze:
                    run_analysis(workspace)

        elif args.cli:
            workspace = load_workspace(Keyveve.project_id)
            if workspace is not None:
                Keyveve.show_folders(workspace.organized())

        else:
            # TUI mode (default)
            main_tui(Keyveve.project_id)
    finally:
        Keyveve.close()
