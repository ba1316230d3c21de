"""Tests for Keyveve configuration and output routing."""

import argparse

from api import Document
from keyveve import Keyveve, LOCAL_API_URL, _strip_rich_markup


class FakeApp:
    """Captures the calls Keyveve marshals onto the UI thread."""

    def __init__(self):
        self.calls = []

    def call_from_thread(self, func, *args):
        func(*args)

    def add_notification(self, line1, line2=""):
        self.calls.append(("notification", line1, line2))

    def add_debug(self, message):
        self.calls.append(("debug", message))

    def set_stage(self, stage, progress):
        self.calls.append(("stage", stage, progress))

    def show_folders(self, organized):
        self.calls.append(("folders", list(organized)))


class TestConfigure:
    """Tests for Keyveve.configure()."""

    def test_project_from_args(self, monkeypatch):
        monkeypatch.setenv("KEYVEVE_PROJECT", "5")
        Keyveve.configure(argparse.Namespace(project=8, local=False))
        assert Keyveve.project_id == 8

    def test_project_from_env(self, monkeypatch):
        monkeypatch.setenv("KEYVEVE_PROJECT", "5")
        Keyveve.configure(argparse.Namespace(project=None, local=False))
        assert Keyveve.project_id == 5

    def test_local_and_poll_interval(self, monkeypatch):
        monkeypatch.delenv("KEYVEVE_API_URL", raising=False)
        monkeypatch.delenv("KEYVEVE_PROJECT", raising=False)
        monkeypatch.setenv("KEYVEVE_POLL_INTERVAL", "5")
        Keyveve.configure(argparse.Namespace(local=True))
        assert Keyveve.api_url == LOCAL_API_URL
        assert Keyveve.project_id is None
        assert Keyveve.poll_interval == 5.0


class TestOutput:
    """CLI printing and TUI routing."""

    def test_strip_markup(self):
        assert _strip_rich_markup("[red]✗ Failed[/red]") == "✗ Failed"
        assert _strip_rich_markup("[bold]Done[/bold]") == "Done"

    def test_notify_cli(self, capsys):
        Keyveve.notify("Saved", "All good")
        Keyveve.notify("Broken", variant="destructive")
        assert capsys.readouterr().out == "✓ Saved\nAll good\n✗ Broken\n"

    def test_show_folders_cli(self, capsys):
        Keyveve.show_folders({
            "Client Information": [Document(doc_id="1", original_name="a.pdf")],
            "Correspondence": [],
        })
        out = capsys.readouterr().out
        assert "Client Information (1)" in out
        assert "  - a.pdf [awaiting_review]" in out
        assert "Correspondence (0)" in out

    def test_set_stage_ignored_in_cli(self, capsys):
        Keyveve.set_stage("scanning", 15)
        assert capsys.readouterr().out == ""

    def test_routes_to_app(self, capsys):
        app = FakeApp()
        Keyveve.set_app(app)
        Keyveve.print_left("one", "two")
        Keyveve.print_right("debug line")
        Keyveve.set_stage("complete", 100)
        Keyveve.show_folders({"Client Information": []})

        assert app.calls == [
            ("notification", "one", "two"),
            ("debug", "debug line"),
            ("stage", "complete", 100),
            ("folders", ["Client Information"]),
        ]
        assert capsys.readouterr().out == ""
