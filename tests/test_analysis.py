"""Tests for the staged analysis run."""

import json

import pytest

from api import APIError, Document, PortalClient
from workflows.analysis import (
    AnalysisSimulator,
    COMPLETION_OFFSET,
    STAGE_SCHEDULE,
)


class FakeClient:
    """Records organize/list calls and serves canned documents."""

    def __init__(self, documents=None, fail=False):
        self.documents = documents or []
        self.fail = fail
        self.calls = []

    def organize_documents(self, project_id):
        self.calls.append(("organize", project_id))
        if self.fail:
            raise APIError("POST /documents/organize/7 failed: HTTP 500", status_code=500)
        return {'status': "success"}

    def list_documents(self, project_id):
        self.calls.append(("list", project_id))
        return list(self.documents)


@pytest.fixture
def client():
    return FakeClient([
        Document(doc_id="a", original_name="W-2.pdf", doc_type="W-2"),
        Document(doc_id="b", original_name="unknown.bin"),
    ])


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def simulator(client, sleeps):
    return AnalysisSimulator(client, 7, "Tax Return - Individual", sleep=sleeps.append)


def record(sim):
    transitions = []
    sim.subscribe(lambda stage, progress: transitions.append((stage, progress)))
    return transitions


class TestRun:
    """Tests for a successful run."""

    def test_initial_state(self, simulator):
        assert simulator.stage == "idle"
        assert simulator.progress == 0
        assert simulator.can_start
        assert not simulator.is_running

    def test_stage_sequence(self, simulator):
        transitions = record(simulator)
        assert simulator.run() is True
        assert transitions == [
            ("preparing", 0),
            ("scanning", 15),
            ("classifying", 45),
            ("organizing", 70),
            ("renaming", 85),
            ("complete", 100),
        ]

    def test_progress_is_monotonic(self, simulator):
        transitions = record(simulator)
        simulator.run()
        progress = [p for _, p in transitions]
        assert progress == sorted(progress)

    def test_sleeps_follow_schedule(self, simulator, sleeps):
        simulator.run()
        assert sleeps == pytest.approx([1.2, 2.6, 3.0, 2.0, 2.0])
        assert sum(sleeps) == pytest.approx(COMPLETION_OFFSET)

    def test_server_called_once_at_end(self, simulator, client):
        simulator.run()
        assert client.calls == [("organize", 7), ("list", 7)]

    def test_documents_classified(self, simulator):
        simulator.run()
        assert simulator.is_complete
        assert [d.folder for d in simulator.documents] == [
            "Income Documents", "Client Information"
        ]
        assert [d.doc_id for d in simulator.organized["Income Documents"]] == ["a"]
        assert list(simulator.organized)[:2] == ["Client Information", "Correspondence"]

    def test_notifies_on_completion(self, simulator, capsys):
        simulator.run()
        out = capsys.readouterr().out
        assert "Analysis complete" in out
        assert "2 documents classified" in out

    def test_background_start(self, simulator):
        assert simulator.start() is True
        simulator.join(timeout=5)
        assert simulator.is_complete


class TestReentry:
    """Only one run at a time, and none after completion."""

    def test_refuses_after_complete(self, simulator, client):
        simulator.run()
        assert simulator.run() is False
        assert simulator.start() is False
        assert client.calls.count(("organize", 7)) == 1

    def test_refuses_while_running(self, client):
        nested = []

        def sleep(_seconds):
            if not nested:
                nested.append(sim.run())

        sim = AnalysisSimulator(client, 7, "Tax", sleep=sleep)
        assert sim.run() is True
        assert nested == [False]


class TestFailure:
    """A failed final step returns to idle."""

    def test_failure_resets_to_idle(self, sleeps, capsys):
        sim = AnalysisSimulator(FakeClient(fail=True), 7, "Audit", sleep=sleeps.append)
        transitions = record(sim)
        assert sim.run() is False
        assert sim.stage == "idle"
        assert sim.progress == 0
        assert transitions[-1] == ("idle", 0)
        assert "Error during analysis" in capsys.readouterr().out

    def test_malformed_document_list_resets_to_idle(self, sleeps, capsys):
        class Response:
            status_code = 200

            def __init__(self, payload):
                self._payload = payload
                self.content = json.dumps(payload).encode()

            def json(self):
                return self._payload

            def raise_for_status(self):
                pass

        class Session:
            def request(self, method, url, **kwargs):
                if "/organize/" in url:
                    return Response({'status': "success"})
                return Response({'detail': "ok"})

        client = PortalClient("http://portal.test", session=Session(),
                              sleep=lambda _s: None)
        sim = AnalysisSimulator(client, 7, "Audit", sleep=sleeps.append)
        assert sim.run() is False
        assert sim.stage == "idle"
        assert sim.can_start
        assert "Error during analysis" in capsys.readouterr().out

    def test_can_retry_after_failure(self, sleeps):
        client = FakeClient(fail=True)
        sim = AnalysisSimulator(client, 7, "Audit", sleep=sleeps.append)
        sim.run()
        client.fail = False
        assert sim.run() is True
        assert sim.is_complete


class TestSchedule:
    """Custom schedules."""

    def test_empty_schedule(self, client, sleeps):
        sim = AnalysisSimulator(client, 7, None, schedule=[], completion_offset=0,
                                sleep=sleeps.append)
        transitions = record(sim)
        assert sim.run() is True
        assert transitions == [("preparing", 0), ("complete", 100)]
        assert sleeps == [0.0]

    def test_default_schedule_unchanged(self):
        assert [s for s, _, _ in STAGE_SCHEDULE] == [
            "scanning", "classifying", "organizing", "renaming"
        ]
