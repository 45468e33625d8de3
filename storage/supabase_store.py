from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional
import uuid

import time
import httpx
from postgrest import APIError

from supabase import AuthError, Client, create_client

from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


class SupabaseStore:
    """
    Case, document-type and draft access on top of Supabase.

    Built per request with the caller's access token so row-level security
    scopes every query to that user.
    """

    def __init__(self, url: str, key: str, *, access_token: Optional[str] = None) -> None:
        self.client: Client = create_client(url, key)
        self.access_token = access_token
        if access_token:
            self.client.postgrest.auth(access_token)
        self._max_retries = 3
        self._retry_backoff_seconds = 0.25

    def _table(self, name: str):
        return self.client.table(name)

    def _with_retry(self, fn: Callable[[], Any]) -> Any:
        delay = self._retry_backoff_seconds
        for attempt in range(self._max_retries):
            try:
                return fn()
            except (httpx.RemoteProtocolError, httpx.WriteError):
                if attempt >= self._max_retries - 1:
                    raise
                time.sleep(delay)
                delay *= 2

    def _maybe_single(self, query) -> Optional[Dict[str, Any]]:
        # Depending on the postgrest release an empty result is None or a 204 APIError.
        try:
            resp = self._with_retry(lambda: query.maybe_single().execute())
        except APIError as exc:
            if str(getattr(exc, "code", "")) == "204":
                return None
            raise
        return resp.data if resp is not None else None

    # Auth ----------------------------------------------------------------------------

    def get_user(self, token: str) -> Optional[Dict[str, Any]]:
        try:
            resp = self._with_retry(lambda: self.client.auth.get_user(token))
        except AuthError as exc:
            logger.info("auth_token_rejected", extra={"reason": str(exc)})
            return None
        user = getattr(resp, "user", None) if resp else None
        if not user:
            return None
        return {"id": user.id, "email": getattr(user, "email", None)}

    # Cases ---------------------------------------------------------------------------

    def list_cases(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        query = (
            self._table("cases")
            .select("id, title, state_code, status, created_at")
            .eq("user_id", user_id)
            .order("created_at", desc=True)
        )
        if limit:
            query = query.limit(limit)
        resp = self._with_retry(lambda: query.execute())
        return resp.data or []

    def create_case(self, user_id: str, title: str, state_code: str) -> Dict[str, Any]:
        payload = {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "title": title,
            "state_code": state_code,
            "status": "open",
        }
        resp = self._with_retry(lambda: self._table("cases").insert(payload).execute())
        if not resp.data:
            raise RuntimeError("Failed to insert case")
        return resp.data[0]

    def get_case(self, case_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        return self._maybe_single(
            self._table("cases")
            .select("id, title, state_code, status, created_at")
            .eq("id", case_id)
            .eq("user_id", user_id)
        )

    # Document types / coverage -----------------------------------------------------

    def get_document_type(self, doc_type_id: str) -> Optional[Dict[str, Any]]:
        return self._maybe_single(self._table("document_types").select("*").eq("id", doc_type_id))

    def list_coverage(self, state_code: str) -> List[Dict[str, Any]]:
        resp = self._with_retry(
            lambda: self._table("coverage_matrix")
            .select("document_type_id, status, document_types(name)")
            .eq("state_code", state_code)
            .execute()
        )
        return resp.data or []

    def get_coverage(self, state_code: str, doc_type_id: str) -> Optional[Dict[str, Any]]:
        return self._maybe_single(
            self._table("coverage_matrix")
            .select("status")
            .eq("state_code", state_code)
            .eq("document_type_id", doc_type_id)
        )

    def count_rows(self, table: str) -> int:
        resp = self._with_retry(lambda: self._table(table).select("*", count="exact", head=True).execute())
        return resp.count or 0

    # Case documents ------------------------------------------------------------------

    def list_case_documents(self, case_id: str) -> List[Dict[str, Any]]:
        resp = self._with_retry(
            lambda: self._table("case_documents")
            .select("document_type_id, status, updated_at, generated_at")
            .eq("case_id", case_id)
            .execute()
        )
        return resp.data or []

    def get_case_document(self, case_id: str, doc_type_id: str) -> Optional[Dict[str, Any]]:
        return self._maybe_single(
            self._table("case_documents")
            .select("case_id, document_type_id, status, data, generated_at, updated_at")
            .eq("case_id", case_id)
            .eq("document_type_id", doc_type_id)
        )

    def save_draft(self, case_id: str, doc_type_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        payload = {
            "case_id": case_id,
            "document_type_id": doc_type_id,
            "status": "draft",
            "data": data,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        resp = self._with_retry(
            lambda: self._table("case_documents").upsert(payload, on_conflict="case_id,document_type_id").execute()
        )
        if not resp.data:
            raise RuntimeError("Failed to store draft")
        return resp.data[0]

    def mark_generated(self, case_id: str, doc_type_id: str) -> Optional[Dict[str, Any]]:
        now = datetime.now(timezone.utc).isoformat()
        resp = self._with_retry(
            lambda: self._table("case_documents")
            .update({"status": "generated", "generated_at": now, "updated_at": now})
            .eq("case_id", case_id)
            .eq("document_type_id", doc_type_id)
            .execute()
        )
        return resp.data[0] if resp.data else None
