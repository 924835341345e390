import pytest
from fastapi.testclient import TestClient

from diagram_studio.server import create_app

from fakes import ScriptedBackend


@pytest.fixture
def backend():
    return ScriptedBackend()


@pytest.fixture
def workspace(make_workspace, backend):
    # Long debounce windows keep background work out of request assertions.
    return make_workspace(backend, render_debounce_seconds=60, analysis_debounce_seconds=60)


@pytest.fixture
def client(workspace):
    with TestClient(create_app(lambda: workspace)) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_document_lifecycle(client, workspace):
    listing = client.get("/api/documents").json()
    assert len(listing["documents"]) == 1
    main_id = listing["active_id"]

    created = client.post("/api/documents", json={"kind": "micro"}).json()
    assert created["name"] == "New Micro Flow"
    assert created["active"] is True

    renamed = client.put(f"/api/documents/{created['id']}/name", json={"name": "Invoice Sync"}).json()
    assert renamed["name"] == "Invoice Sync"

    updated = client.put(f"/api/documents/{main_id}/text", json={"text": "graph LR\nA-->B"}).json()
    assert updated["text"] == "graph LR\nA-->B"
    assert updated["active"] is False

    activated = client.post(f"/api/documents/{main_id}/activate").json()
    assert activated["active"] is True

    deleted = client.delete(f"/api/documents/{main_id}").json()
    assert deleted["active_id"] == created["id"]
    assert workspace.active.name == "Invoice Sync"


def test_unknown_documents_are_404(client):
    assert client.put("/api/documents/nope/text", json={"text": "x"}).status_code == 404
    assert client.put("/api/documents/nope/name", json={"name": "x"}).status_code == 404
    assert client.delete("/api/documents/nope").status_code == 404
    assert client.post("/api/documents/nope/activate").status_code == 404


def test_last_document_cannot_be_deleted(client, workspace):
    response = client.delete(f"/api/documents/{workspace.active.id}")
    assert response.status_code == 409
    assert len(workspace.store) == 1


def test_preview_and_analysis_start_empty(client):
    preview = client.get("/api/preview").json()
    assert preview["svg"] is None
    assert preview["error"] is None

    analysis = client.get("/api/analysis").json()
    assert analysis["result"] is None
    assert analysis["is_analyzing"] is False


def test_export(client, workspace):
    assert client.get("/api/export/svg").status_code == 409
    assert client.get("/api/export/gif").status_code == 400

    workspace.render.state.svg = "<svg><text>hi</text></svg>"
    response = client.get("/api/export/svg")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/svg+xml")
    assert 'filename="Main_Flow.svg"' in response.headers["content-disposition"]
    assert response.text == "<svg><text>hi</text></svg>"


def test_generate(client, workspace, backend):
    backend.replies.append("```mermaid\ngraph TD\nA-->B-->C\n```")

    response = client.post("/api/generate", json={"prompt": "add C"}).json()

    assert response["ok"] is True
    assert response["error"] is None
    assert response["document"]["text"] == "graph TD\nA-->B-->C"
    assert client.post("/api/generate", json={"prompt": "  "}).status_code == 400


def test_generate_failure_is_reported(client, workspace, backend):
    backend.replies.append(RuntimeError("503"))

    response = client.post("/api/generate", json={"prompt": "add C"}).json()

    assert response["ok"] is False
    assert response["error"] == "Failed to generate diagram. Please try again."
    assert workspace.generation.prompt == "add C"


def test_explain(client, backend):
    backend.replies.append("Start, check, finish.")
    assert client.post("/api/explain", json={}).json() == {"explanation": "Start, check, finish."}


def test_chat_round_trip(client, workspace, backend):
    backend.replies.append("Model the invoice states.")

    history = client.post("/api/chat", json={"message": "Where do we start?"}).json()

    assert [m["role"] for m in history["messages"]] == ["user", "assistant"]
    assert history["awaiting_response"] is False
    assert client.get("/api/chat").json()["messages"] == history["messages"]
    assert client.post("/api/chat", json={"message": " "}).status_code == 400

    assert client.delete("/api/chat").json() == {"cleared": True}
    assert client.get("/api/chat").json()["messages"] == []


def test_chat_rejects_second_send_while_awaiting(client, workspace, backend):
    workspace.chat.awaiting_response = True
    response = client.post("/api/chat", json={"message": "again?"})
    assert response.status_code == 409
    assert backend.requests == []


def test_project_context(client, workspace):
    body = client.put("/api/context", json={"project_context": "Fleet telemetry", "deep_reasoning": True}).json()
    assert body == {"project_context": "Fleet telemetry", "deep_reasoning": True}
    assert workspace.deep_reasoning is True
    assert client.get("/api/context").json()["project_context"] == "Fleet telemetry"


def test_templates(client, workspace):
    templates = client.get("/api/templates").json()
    assert len(templates) == 5
    name = templates[2]["name"]

    applied = client.post(f"/api/templates/{name}/apply").json()
    assert applied["text"] == templates[2]["code"]
    assert client.post("/api/templates/missing/apply").status_code == 404
