"""REST API server for the single-user diagram workspace."""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Callable, List

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, Response

from diagram_studio.models.templates import TEMPLATES
from diagram_studio.schemas import (
    AnalysisResponse,
    ChatHistoryResponse,
    ChatSendRequest,
    DocumentCreate,
    DocumentListResponse,
    DocumentRename,
    DocumentResponse,
    DocumentTextUpdate,
    ExplainRequest,
    ExplainResponse,
    GenerateRequest,
    GenerateResponse,
    PreviewResponse,
    ProjectContextPayload,
    TemplateResponse,
)
from diagram_studio.services.workspace import Workspace, build_workspace
from diagram_studio.utils.file_utils import export_filename

_MEDIA_TYPES = {"svg": "image/svg+xml", "png": "image/png"}


def get_workspace(request: Request) -> Workspace:
    return request.app.state.workspace


def _document_response(workspace: Workspace, document) -> DocumentResponse:
    return DocumentResponse.from_document(document, workspace.store.active_id)


def _not_found(document_id: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": f"Document not found: {document_id}"})


def create_app(workspace_factory: Callable[[], Workspace] = build_workspace) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        workspace = workspace_factory()
        app.state.workspace = workspace
        workspace.start()
        try:
            yield
        finally:
            workspace.close()

    app = FastAPI(title="Diagram Studio", lifespan=lifespan)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # --- documents -------------------------------------------------------

    @app.get("/api/documents", response_model=DocumentListResponse)
    async def list_documents(workspace: Workspace = Depends(get_workspace)):
        store = workspace.store
        return DocumentListResponse(
            active_id=store.active_id,
            documents=[_document_response(workspace, d) for d in store.documents],
        )

    @app.post("/api/documents", response_model=DocumentResponse)
    async def create_document(payload: DocumentCreate, workspace: Workspace = Depends(get_workspace)):
        return _document_response(workspace, workspace.add_document(payload.kind))

    @app.put("/api/documents/{document_id}/text", response_model=DocumentResponse)
    async def update_text(
        document_id: str, payload: DocumentTextUpdate, workspace: Workspace = Depends(get_workspace)
    ):
        document = workspace.update_document(document_id, payload.text)
        if document is None:
            return _not_found(document_id)
        return _document_response(workspace, document)

    @app.put("/api/documents/{document_id}/name", response_model=DocumentResponse)
    async def rename_document(
        document_id: str, payload: DocumentRename, workspace: Workspace = Depends(get_workspace)
    ):
        document = workspace.rename_document(document_id, payload.name)
        if document is None:
            return _not_found(document_id)
        return _document_response(workspace, document)

    @app.delete("/api/documents/{document_id}")
    async def delete_document(document_id: str, workspace: Workspace = Depends(get_workspace)):
        if workspace.store.get(document_id) is None:
            return _not_found(document_id)
        if not workspace.delete_document(document_id):
            return JSONResponse(status_code=409, content={"error": "The last document cannot be deleted"})
        return {"deleted": document_id, "active_id": workspace.store.active_id}

    @app.post("/api/documents/{document_id}/activate", response_model=DocumentResponse)
    async def activate_document(document_id: str, workspace: Workspace = Depends(get_workspace)):
        try:
            document = workspace.select(document_id)
        except KeyError:
            return _not_found(document_id)
        return _document_response(workspace, document)

    # --- preview and insights --------------------------------------------

    @app.get("/api/preview", response_model=PreviewResponse)
    async def preview(workspace: Workspace = Depends(get_workspace)):
        render = workspace.render
        return PreviewResponse(
            svg=render.svg,
            error=render.error,
            document_id=render.state.document_id,
            pending=render.pending,
        )

    @app.get("/api/analysis", response_model=AnalysisResponse)
    async def analysis(workspace: Workspace = Depends(get_workspace)):
        coordinator = workspace.analysis
        return AnalysisResponse(
            result=coordinator.result,
            document_id=coordinator.result_document_id,
            is_analyzing=coordinator.is_analyzing,
        )

    @app.get("/api/export/{fmt}")
    async def export(fmt: str, workspace: Workspace = Depends(get_workspace)):
        if fmt not in _MEDIA_TYPES:
            return JSONResponse(status_code=400, content={"error": f"Unsupported format: {fmt}"})
        try:
            payload = workspace.export_payload(fmt)  # type: ignore[arg-type]
        except ValueError as exc:
            return JSONResponse(status_code=409, content={"error": str(exc)})
        filename = export_filename(workspace.active.name, fmt)
        return Response(
            content=payload,
            media_type=_MEDIA_TYPES[fmt],
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    # --- assistant -------------------------------------------------------

    @app.post("/api/generate", response_model=GenerateResponse)
    async def generate(payload: GenerateRequest, workspace: Workspace = Depends(get_workspace)):
        if not payload.prompt.strip():
            return JSONResponse(status_code=400, content={"error": "prompt is required"})
        ok = await workspace.generate(payload.prompt, deep_reasoning=payload.deep_reasoning)
        return GenerateResponse(
            ok=ok,
            error=workspace.generation.error,
            document=_document_response(workspace, workspace.active),
        )

    @app.post("/api/explain", response_model=ExplainResponse)
    async def explain(payload: ExplainRequest, workspace: Workspace = Depends(get_workspace)):
        return ExplainResponse(explanation=await workspace.explain(deep_reasoning=payload.deep_reasoning))

    @app.get("/api/chat", response_model=ChatHistoryResponse)
    async def chat_history(workspace: Workspace = Depends(get_workspace)):
        return ChatHistoryResponse(
            messages=workspace.chat.messages,
            awaiting_response=workspace.chat.awaiting_response,
        )

    @app.post("/api/chat", response_model=ChatHistoryResponse)
    async def chat_send(payload: ChatSendRequest, workspace: Workspace = Depends(get_workspace)):
        if not payload.message.strip():
            return JSONResponse(status_code=400, content={"error": "message is required"})
        if workspace.chat.awaiting_response:
            return JSONResponse(status_code=409, content={"error": "A reply is still pending"})
        await workspace.send_chat(payload.message)
        return ChatHistoryResponse(
            messages=workspace.chat.messages,
            awaiting_response=workspace.chat.awaiting_response,
        )

    @app.delete("/api/chat")
    async def chat_clear(workspace: Workspace = Depends(get_workspace)):
        workspace.clear_chat()
        return {"cleared": True}

    # --- settings --------------------------------------------------------

    @app.get("/api/context", response_model=ProjectContextPayload)
    async def get_context(workspace: Workspace = Depends(get_workspace)):
        return ProjectContextPayload(
            project_context=workspace.get_project_context(),
            deep_reasoning=workspace.deep_reasoning,
        )

    @app.put("/api/context", response_model=ProjectContextPayload)
    async def put_context(payload: ProjectContextPayload, workspace: Workspace = Depends(get_workspace)):
        workspace.set_project_context(payload.project_context)
        if payload.deep_reasoning is not None:
            workspace.deep_reasoning = payload.deep_reasoning
        return ProjectContextPayload(
            project_context=workspace.get_project_context(),
            deep_reasoning=workspace.deep_reasoning,
        )

    @app.get("/api/templates", response_model=List[TemplateResponse])
    async def list_templates():
        return [TemplateResponse(**t.model_dump(mode="json")) for t in TEMPLATES]

    @app.post("/api/templates/{name}/apply", response_model=DocumentResponse)
    async def apply_template(name: str, workspace: Workspace = Depends(get_workspace)):
        try:
            workspace.apply_template(name)
        except KeyError:
            return JSONResponse(status_code=404, content={"error": f"Template not found: {name}"})
        return _document_response(workspace, workspace.active)

    return app


app = create_app()
