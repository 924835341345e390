import pytest

from diagram_studio.agents.diagram_assistant import DiagramAssistant
from diagram_studio.services.local_store import ChatTranscriptStore
from diagram_studio.services.workspace import Workspace

from fakes import FakeRenderer, MemoryRecords, ScriptedBackend


@pytest.fixture
def records():
    return MemoryRecords()


@pytest.fixture
def transcript(records):
    return ChatTranscriptStore(records, "test_planner_chat")


@pytest.fixture
def make_workspace(transcript):
    def _make(backend=None, renderer=None, **kwargs):
        kwargs.setdefault("render_debounce_seconds", 0.01)
        kwargs.setdefault("analysis_debounce_seconds", 0.03)
        return Workspace(
            DiagramAssistant(backend or ScriptedBackend()),
            renderer or FakeRenderer(),
            transcript,
            **kwargs,
        )

    return _make
