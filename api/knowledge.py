"""
api/knowledge.py
Knowledge base browsing, the document registry and document ingestion.
"""
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from api.models import IngestRequest
from api.services import Services, get_services
from config.settings import settings
from monitoring import get_logger

router = APIRouter()
log = get_logger(__name__)


@router.get("/knowledge-base", summary="List knowledge base entries")
async def list_knowledge(
    category: Optional[str] = None,
    services: Services = Depends(get_services),
) -> list[dict]:
    entries = await run_in_threadpool(services.knowledge.list_entries, category)
    return [e.to_dict() for e in entries]


@router.get("/knowledge-base/search", summary="Semantic search over the knowledge base")
async def search_knowledge(
    q: str,
    category: Optional[str] = None,
    services: Services = Depends(get_services),
) -> list[dict]:
    entries = await run_in_threadpool(services.knowledge.search, q, category)
    return [e.to_dict() for e in entries]


# ── Documents ─────────────────────────────────────────────────────────────────

@router.post("/documents/upload", summary="Upload a PDF or text file into the knowledge base")
async def upload_document(
    file: UploadFile = File(...),
    services: Services = Depends(get_services),
) -> dict:
    if not file.filename:
        raise HTTPException(status_code=400, detail="Uploaded file must have a filename")
    try:
        data = await file.read()
    finally:
        await file.close()

    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(status_code=413, detail="Uploaded file is too large")

    safe_name = Path(file.filename).name
    try:
        summary = await run_in_threadpool(services.pipeline.run_upload, safe_name, data, file.content_type)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"success": True, **summary}


@router.post("/documents/ingest", summary="Ingest already-extracted text into the knowledge base")
async def ingest_document(request: IngestRequest, services: Services = Depends(get_services)) -> dict:
    try:
        summary = await run_in_threadpool(services.pipeline.run_text, request.name, request.content)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return {"success": True, **summary}


@router.get("/documents", summary="List ingested documents, newest first")
async def list_documents(services: Services = Depends(get_services)) -> list[dict]:
    return [d.to_dict() for d in services.documents.list_documents()]


@router.get("/documents/search", summary="Find documents by name, content or summary")
async def search_documents(q: str, services: Services = Depends(get_services)) -> list[dict]:
    return [d.to_dict() for d in services.documents.search(q)]


@router.get("/documents/{document_id}", summary="Get an ingested document")
async def get_document(document_id: str, services: Services = Depends(get_services)) -> dict:
    document = services.documents.get(document_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return document.to_dict()


@router.delete("/documents/{document_id}", summary="Delete a document and its knowledge entries")
async def delete_document(document_id: str, services: Services = Depends(get_services)) -> dict:
    removed = await run_in_threadpool(services.pipeline.delete, document_id)
    if removed is None:
        raise HTTPException(status_code=404, detail="Document not found")
    return {"success": True, "entriesRemoved": removed}


@router.get("/health", summary="Health check")
async def health(services: Services = Depends(get_services)) -> dict:
    handle = services.registry.current()
    return {
        "status": "healthy",
        "ai": {
            "configured": handle is not None,
            "provider":   handle.config.provider if handle else None,
            "model":      handle.config.model if handle else None,
        },
        "knowledge_base": {
            "entries":   await run_in_threadpool(len, services.knowledge),
            "documents": len(services.documents.list_documents()),
        },
    }
