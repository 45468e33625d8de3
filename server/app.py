from __future__ import annotations

import os
import re
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest import APIError
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from noticepack.draft import DraftRecord
from noticepack.errors import (
    ConfigurationError,
    DraftValidationError,
    NotFoundError,
    NoticePackError,
    RenderError,
)
from noticepack.renderer import RenderOptions, render_pdf
from noticepack.sections import DocumentContext
from noticepack.templates import doc_type_key, select_builder
from noticepack.wizard_schemas import get_wizard_schema, missing_required
from server.security import authenticate, bearer_token
from storage.supabase_store import SupabaseStore
from telemetry.logging_utils import get_logger

load_dotenv()

logger = get_logger(__name__)

SMOKE_TABLES = ("document_types", "states", "coverage_matrix")
STATE_CODE_RE = re.compile(r"^[A-Z]{2}$")


@dataclass(frozen=True)
class Settings:
    supabase_url: str
    supabase_anon_key: str


def get_settings() -> Settings:
    url = os.getenv("SUPABASE_URL")
    anon = os.getenv("SUPABASE_ANON_KEY")
    if not url or not anon:
        raise ConfigurationError("Missing SUPABASE_URL or SUPABASE_ANON_KEY")
    return Settings(supabase_url=url, supabase_anon_key=anon)


def get_store(request: Request):
    settings = get_settings()
    return SupabaseStore(settings.supabase_url, settings.supabase_anon_key, access_token=bearer_token(request))


def get_current_user(request: Request, store=Depends(get_store)) -> Dict[str, Any]:
    return authenticate(request, store)


class CreateCasePayload(BaseModel):
    title: str
    state_code: str


class DraftPayload(BaseModel):
    data: Dict[str, Any] = {}


def _cors_origins() -> List[str]:
    raw = os.getenv("NOTICEPACK_CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


app = FastAPI(title="NoticePack")
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_response(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": message, **extra})


@app.exception_handler(NoticePackError)
async def handle_noticepack_error(request: Request, exc: NoticePackError) -> JSONResponse:
    if isinstance(exc, DraftValidationError):
        return _error_response(exc.status_code, exc.message, missing=exc.missing)
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return _error_response(422, "Invalid request", details=jsonable_encoder(exc.errors()))


@app.exception_handler(APIError)
async def handle_backend_error(request: Request, exc: APIError) -> JSONResponse:
    logger.error("backend_query_failed", extra={"path": request.url.path, "code": getattr(exc, "code", None)})
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, getattr(exc, "message", None) or str(exc))


@app.get("/api/health/backend")
def backend_health(store=Depends(get_store)):
    counts: Dict[str, int] = {}
    errors: Dict[str, str] = {}
    for table in SMOKE_TABLES:
        try:
            counts[table] = store.count_rows(table)
        except (APIError, KeyError) as exc:
            errors[table] = getattr(exc, "message", None) or str(exc)
    if errors:
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"ok": False, "errors": errors})
    return {"ok": True, "counts": counts}


@app.get("/api/cases")
def list_cases(user: Dict[str, Any] = Depends(get_current_user), store=Depends(get_store)):
    return {"ok": True, "cases": store.list_cases(user["id"])}


@app.post("/api/cases", status_code=status.HTTP_201_CREATED)
def create_case(
    payload: CreateCasePayload, user: Dict[str, Any] = Depends(get_current_user), store=Depends(get_store)
):
    title = payload.title.strip()
    state_code = payload.state_code.strip().upper()
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title must not be empty.")
    if not STATE_CODE_RE.match(state_code):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="State code must be two letters.")
    case = store.create_case(user["id"], title, state_code)
    logger.info("case_created", extra={"case_id": case["id"], "state_code": state_code})
    return {"ok": True, "case": case}


@app.get("/api/cases/{case_id}")
def get_case(case_id: str, user: Dict[str, Any] = Depends(get_current_user), store=Depends(get_store)):
    case = _require_case(store, case_id, user)
    coverage = store.list_coverage(case["state_code"]) if case.get("state_code") else []
    return {
        "ok": True,
        "case": case,
        "coverage": [_public_coverage(row) for row in coverage],
        "documents": store.list_case_documents(case_id),
    }


@app.get("/api/cases/{case_id}/documents/{doc_type_id}")
def get_case_document(
    case_id: str, doc_type_id: str, user: Dict[str, Any] = Depends(get_current_user), store=Depends(get_store)
):
    case = _require_case(store, case_id, user)
    doc_type = _require_document_type(store, doc_type_id)
    coverage = store.get_coverage(case.get("state_code") or "", doc_type_id) if case.get("state_code") else None
    document = store.get_case_document(case_id, doc_type_id)
    schema = get_wizard_schema(doc_type_key(doc_type))
    return {
        "ok": True,
        "document": {
            "id": doc_type["id"],
            "name": doc_type.get("name"),
            "coverage": (coverage or {}).get("status") or "not_available",
        },
        "schema": schema.to_dict(),
        "draft": _public_draft(document),
    }


@app.put("/api/cases/{case_id}/documents/{doc_type_id}/draft")
def save_draft(
    case_id: str,
    doc_type_id: str,
    payload: DraftPayload,
    strict: bool = False,
    user: Dict[str, Any] = Depends(get_current_user),
    store=Depends(get_store),
):
    _require_case(store, case_id, user)
    doc_type = _require_document_type(store, doc_type_id)
    draft = DraftRecord(payload.data)
    if strict:
        missing = missing_required(get_wizard_schema(doc_type_key(doc_type)), draft)
        if missing:
            raise DraftValidationError(missing)
    saved = store.save_draft(case_id, doc_type_id, draft.as_dict())
    logger.info("draft_saved", extra={"case_id": case_id, "doc_type_id": doc_type_id, "field_count": len(draft)})
    return {"ok": True, "draft": _public_draft(saved)}


@app.post("/api/cases/{case_id}/documents/{doc_type_id}/generate")
def mark_generated(
    case_id: str, doc_type_id: str, user: Dict[str, Any] = Depends(get_current_user), store=Depends(get_store)
):
    _require_case(store, case_id, user)
    _require_document_type(store, doc_type_id)
    updated = store.mark_generated(case_id, doc_type_id)
    if not updated:
        raise NotFoundError("Draft not found")
    return {"ok": True, "draft": _public_draft(updated)}


@app.get("/api/cases/{case_id}/documents/{doc_type_id}/pdf")
def download_document_pdf(
    case_id: str, doc_type_id: str, user: Dict[str, Any] = Depends(get_current_user), store=Depends(get_store)
):
    case = _require_case(store, case_id, user)
    doc_type = _require_document_type(store, doc_type_id)
    document = store.get_case_document(case_id, doc_type_id)
    if not document:
        raise NotFoundError("Draft not found")

    context = DocumentContext(
        case_id=case_id,
        doc_type_id=doc_type_id,
        doc_name=doc_type.get("name") or "",
        status=document.get("status"),
        generated_at=document.get("generated_at") or document.get("updated_at"),
        state_code=case.get("state_code"),
        doc_type_key=doc_type_key(doc_type),
        draft=DraftRecord.from_row(document),
    )
    pdf_bytes = _render_document(context)

    filename = _safe_filename(f"{case_id}-{doc_type_id}.pdf")
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "Cache-Control": "no-store",
        },
    )


def _render_document(context: DocumentContext) -> bytes:
    start = time.perf_counter()
    builder_name = "unknown"
    try:
        builder = select_builder(context.state_code, context.doc_type_key)
        builder_name = builder.__name__
        sections = builder(context)
        pdf_bytes = render_pdf(sections, RenderOptions(title=context.doc_name or "Document"))
    except Exception as exc:
        logger.exception(
            "pdf_render_failed",
            extra={"case_id": context.case_id, "doc_type_id": context.doc_type_id, "builder": builder_name},
        )
        cause = exc.cause if isinstance(exc, RenderError) and exc.cause else exc
        raise RenderError(f"Render failed: {cause}", cause=cause) from exc
    logger.info(
        "pdf_render_complete",
        extra={
            "case_id": context.case_id,
            "doc_type_id": context.doc_type_id,
            "builder": builder_name,
            "section_count": len(sections),
            "bytes": len(pdf_bytes),
            "latency_ms": round((time.perf_counter() - start) * 1000, 2),
        },
    )
    return pdf_bytes


def _require_case(store, case_id: str, user: Dict[str, Any]) -> Dict[str, Any]:
    case = store.get_case(case_id, user["id"])
    if not case:
        raise NotFoundError("Case not found")
    return case


def _require_document_type(store, doc_type_id: str) -> Dict[str, Any]:
    doc_type = store.get_document_type(doc_type_id)
    if not doc_type:
        raise NotFoundError("Document type not found")
    return doc_type


def _public_coverage(row: Dict[str, Any]) -> Dict[str, Any]:
    embedded = row.get("document_types") or {}
    if isinstance(embedded, list):
        embedded = embedded[0] if embedded else {}
    return {
        "document_type_id": row.get("document_type_id"),
        "name": embedded.get("name"),
        "status": row.get("status"),
    }


def _public_draft(document: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not document:
        return None
    return {
        "document_type_id": document.get("document_type_id"),
        "status": document.get("status"),
        "data": DraftRecord.from_row(document).as_dict(),
        "updated_at": document.get("updated_at"),
        "generated_at": document.get("generated_at"),
    }


def _safe_filename(filename: str) -> str:
    cleaned = filename.encode("ascii", errors="ignore").decode("ascii").replace('"', "")
    return cleaned or "document.pdf"
