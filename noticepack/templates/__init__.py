"""
Template builder registry.

Builders are keyed by ``(jurisdiction code, document-type key)``. The key is a
stable identifier (the document type's slug/code column, or its display name
normalized to snake case); lookups are exact and fall back to the generic
builder when nothing is registered.
"""

from __future__ import annotations

import re
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from noticepack.sections import DocumentContext, Section
from noticepack.templates import ca
from noticepack.templates.fallback import build_fallback_sections

Builder = Callable[[DocumentContext], List[Section]]

BUILDERS: Dict[Tuple[str, str], Builder] = {
    ("CA", "notice_of_non_renewal"): ca.build_notice_of_non_renewal,
    ("CA", "itemized_deductions_statement"): ca.build_itemized_deductions,
}


def normalize_doc_key(value: Optional[str]) -> str:
    """``"Notice of Non-Renewal"`` -> ``"notice_of_non_renewal"``."""
    if not value:
        return ""
    return re.sub(r"[^a-z0-9]+", "_", str(value).lower()).strip("_")


def doc_type_key(doc_type: Optional[Mapping[str, object]]) -> str:
    if not doc_type:
        return ""
    for column in ("slug", "code"):
        explicit = doc_type.get(column)
        if explicit:
            return normalize_doc_key(str(explicit))
    return normalize_doc_key(str(doc_type.get("name") or ""))


def select_builder(state_code: Optional[str], doc_key: Optional[str]) -> Builder:
    jurisdiction = (state_code or "").strip().upper()
    return BUILDERS.get((jurisdiction, normalize_doc_key(doc_key)), build_fallback_sections)


def build_sections(context: DocumentContext) -> List[Section]:
    key = context.doc_type_key or normalize_doc_key(context.doc_name)
    builder = select_builder(context.state_code, key)
    return builder(context)


__all__ = [
    "BUILDERS",
    "Builder",
    "build_fallback_sections",
    "build_sections",
    "doc_type_key",
    "normalize_doc_key",
    "select_builder",
]
