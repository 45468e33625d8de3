from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


DEFAULT_DOCUMENT_TYPES = [
    {"id": "dt-non-renewal", "name": "Notice of Non-Renewal", "slug": "notice_of_non_renewal"},
    {"id": "dt-deductions", "name": "Itemized Deductions Statement", "slug": "itemized_deductions_statement"},
    {"id": "dt-pay-or-quit", "name": "Pay Rent or Quit", "slug": "pay_rent_or_quit"},
    {"id": "dt-late-rent", "name": "Late Rent Reminder", "slug": "late_rent_reminder"},
]

DEFAULT_COVERAGE = {
    "CA": {
        "dt-non-renewal": "implemented",
        "dt-deductions": "implemented",
        "dt-pay-or-quit": "guided",
        "dt-late-rent": "guided",
    },
    "NY": {
        "dt-non-renewal": "guided",
        "dt-deductions": "not_available",
        "dt-pay-or-quit": "guided",
        "dt-late-rent": "guided",
    },
}


class InMemoryStore:
    """Demo-mode store used when Supabase is unavailable (and by the test suite)."""

    def __init__(self, *, seed: bool = True) -> None:
        self.users_by_token: Dict[str, Dict[str, Any]] = {}
        self.states: Dict[str, Dict[str, Any]] = {}
        self.document_types: Dict[str, Dict[str, Any]] = {}
        self.coverage: Dict[Tuple[str, str], str] = {}
        self.cases: Dict[str, Dict[str, Any]] = {}
        self.case_documents: Dict[Tuple[str, str], Dict[str, Any]] = {}

        if seed:
            for doc_type in DEFAULT_DOCUMENT_TYPES:
                self.document_types[doc_type["id"]] = dict(doc_type)
            for state_code, entries in DEFAULT_COVERAGE.items():
                self.states[state_code] = {"code": state_code}
                for doc_type_id, status in entries.items():
                    self.coverage[(state_code, doc_type_id)] = status

    # Auth -----------------------------------------------------------------
    def add_user(self, token: str, *, email: Optional[str] = None, user_id: Optional[str] = None) -> Dict[str, Any]:
        user = {"id": user_id or str(uuid.uuid4()), "email": email}
        self.users_by_token[token] = user
        return user

    def get_user(self, token: str) -> Optional[Dict[str, Any]]:
        return self.users_by_token.get(token)

    # Cases ----------------------------------------------------------------
    def list_cases(self, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        cases = [self._public_case(c) for c in self.cases.values() if c["user_id"] == user_id]
        cases.sort(key=lambda c: c.get("created_at") or "", reverse=True)
        return cases[:limit] if limit else cases

    def create_case(self, user_id: str, title: str, state_code: str) -> Dict[str, Any]:
        case_id = str(uuid.uuid4())
        case = {
            "id": case_id,
            "user_id": user_id,
            "title": title,
            "state_code": state_code,
            "status": "open",
            "created_at": _now_iso(),
        }
        self.cases[case_id] = case
        return dict(case)

    def get_case(self, case_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        case = self.cases.get(case_id)
        if case and case["user_id"] == user_id:
            return self._public_case(case)
        return None

    @staticmethod
    def _public_case(case: Dict[str, Any]) -> Dict[str, Any]:
        return {k: case.get(k) for k in ("id", "title", "state_code", "status", "created_at")}

    # Document types / coverage ---------------------------------------------
    def get_document_type(self, doc_type_id: str) -> Optional[Dict[str, Any]]:
        doc_type = self.document_types.get(doc_type_id)
        return dict(doc_type) if doc_type else None

    def list_coverage(self, state_code: str) -> List[Dict[str, Any]]:
        rows = []
        for (code, doc_type_id), status in self.coverage.items():
            if code != state_code:
                continue
            doc_type = self.document_types.get(doc_type_id) or {}
            rows.append(
                {"document_type_id": doc_type_id, "status": status, "document_types": {"name": doc_type.get("name")}}
            )
        return rows

    def get_coverage(self, state_code: str, doc_type_id: str) -> Optional[Dict[str, Any]]:
        status = self.coverage.get((state_code, doc_type_id))
        return {"status": status} if status else None

    def count_rows(self, table: str) -> int:
        tables = {
            "document_types": self.document_types,
            "states": self.states,
            "coverage_matrix": self.coverage,
            "cases": self.cases,
            "case_documents": self.case_documents,
        }
        if table not in tables:
            raise KeyError(f"Unknown table: {table}")
        return len(tables[table])

    # Case documents -------------------------------------------------------
    def list_case_documents(self, case_id: str) -> List[Dict[str, Any]]:
        return [
            {k: doc.get(k) for k in ("document_type_id", "status", "updated_at", "generated_at")}
            for (doc_case_id, _), doc in self.case_documents.items()
            if doc_case_id == case_id
        ]

    def get_case_document(self, case_id: str, doc_type_id: str) -> Optional[Dict[str, Any]]:
        doc = self.case_documents.get((case_id, doc_type_id))
        return dict(doc) if doc else None

    def save_draft(self, case_id: str, doc_type_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        existing = self.case_documents.get((case_id, doc_type_id)) or {"generated_at": None}
        doc = {
            **existing,
            "case_id": case_id,
            "document_type_id": doc_type_id,
            "status": "draft",
            "data": dict(data),
            "updated_at": _now_iso(),
        }
        self.case_documents[(case_id, doc_type_id)] = doc
        return dict(doc)

    def mark_generated(self, case_id: str, doc_type_id: str) -> Optional[Dict[str, Any]]:
        doc = self.case_documents.get((case_id, doc_type_id))
        if not doc:
            return None
        now = _now_iso()
        doc.update({"status": "generated", "generated_at": now, "updated_at": now})
        return dict(doc)
