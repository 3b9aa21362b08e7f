"""HTTP routes that prepare a session's agent type and documents before it starts."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Request, APIRouter
from pydantic import Field, BaseModel
from fastapi.responses import ORJSONResponse

from src.state import RuntimeDeps
from src.session.context import Document, SessionContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class DocumentIn(BaseModel):
    name: str = Field(min_length=1)
    content: str


class DocumentsRequest(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    documents: list[DocumentIn] = Field(default_factory=list)


class AgentTypeRequest(BaseModel):
    session_id: str = Field(alias="sessionId", min_length=1)
    agent_type: str = Field(alias="agentType")


def _runtime_deps(request: Request) -> RuntimeDeps:
    deps = getattr(request.app.state, "runtime_deps", None)
    if deps is None:
        raise RuntimeError("Runtime dependencies are not initialized")
    return deps


def _render_context(session_id: str, context: SessionContext) -> dict[str, Any]:
    return {
        "sessionId": session_id,
        "agentType": context.agent_type,
        "documents": [{"name": doc.name, "content": doc.content} for doc in context.documents],
    }


@router.post("/documents")
async def store_documents(body: DocumentsRequest, request: Request) -> dict[str, Any]:
    documents = [Document(name=doc.name, content=doc.content) for doc in body.documents]
    await _runtime_deps(request).contexts.set_documents(body.session_id, documents)
    return {"success": True, "message": "Documents stored successfully", "documentsCount": len(documents)}


@router.post("/agent-type")
async def update_agent_type(body: AgentTypeRequest, request: Request) -> dict[str, Any]:
    await _runtime_deps(request).contexts.set_agent_type(body.session_id, body.agent_type.strip())
    return {"success": True, "message": "Agent type updated"}


@router.get("/session/{session_id}")
async def get_session(session_id: str, request: Request) -> Any:
    context = await _runtime_deps(request).contexts.get(session_id)
    if context is None:
        return ORJSONResponse(status_code=404, content={"success": False, "error": "Session not found"})
    return {"success": True, "session": _render_context(session_id, context)}


__all__ = ["router"]
