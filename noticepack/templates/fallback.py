from __future__ import annotations

from typing import List

from noticepack.formatting import format_date
from noticepack.sections import DocumentContext, Section

MAX_DETAIL_KEYS = 40


def build_fallback_sections(context: DocumentContext) -> List[Section]:
    """Generic layout for documents without a dedicated template."""
    draft = context.draft

    meta = Section.of(
        "Document Details",
        [
            "NoticePack - Generated PDF",
            "",
            f"Case ID: {context.case_id}",
            f"Document Type ID: {context.doc_type_id}",
            f"State: {context.state_code}" if context.state_code else "State: (unknown)",
            f"Status: {context.status or ''}",
            f"Generated: {format_date(context.generated_at)}",
        ],
    )

    parties = Section.of(
        "Parties / Property (best-effort)",
        [
            f"Tenant: {draft.get_str('tenant_name')}",
            f"Landlord: {draft.get_str('landlord_name')}",
            f"Property Address: {draft.get_str('property_address')}",
            f"Notice Date: {format_date(draft.get_str('notice_date'))}",
            f"Move-out Date: {format_date(draft.get_str('move_out_date'))}",
        ],
    )

    keys = draft.keys()
    shown = keys[:MAX_DETAIL_KEYS]
    detail_lines = [f"{key}: {draft.get_str(key)}" for key in shown] or ["(no draft fields)"]
    if len(keys) > MAX_DETAIL_KEYS:
        detail_lines.extend(["", f"(Showing {MAX_DETAIL_KEYS} of {len(keys)} keys)"])
    details = Section.of(f"Draft Fields (first {MAX_DETAIL_KEYS})", detail_lines)

    return [meta, parties, details]
