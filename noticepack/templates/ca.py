"""California templates."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import List, Optional, Tuple

from noticepack.draft import DraftRecord
from noticepack.formatting import format_date
from noticepack.sections import DocumentContext, Section

MAX_DEDUCTION_ROWS = 20


def _case_lines(context: DocumentContext) -> List[str]:
    return [
        f"case_id: {context.case_id}",
        f"document_type_id: {context.doc_type_id}",
    ]


def _signature_block(draft: DraftRecord) -> Section:
    contact = [value for value in (draft.get_str("landlord_phone"), draft.get_str("landlord_email")) if value]
    return Section.of(
        "Landlord / Agent",
        [
            "Signature: ______________________________",
            f"Name: {draft.get_str('landlord_name')}",
            f"Contact: {' / '.join(contact)}",
        ],
    )


def build_notice_of_non_renewal(context: DocumentContext) -> List[Section]:
    draft = context.draft
    notice_date = format_date(draft.first_of("notice_date", "otice_date"))
    move_out_date = format_date(draft.get_str("move_out_date"))
    tenant_name = draft.get_str("tenant_name")
    property_address = draft.get_str("property_address")

    case_section = Section.of(
        "Case + Document",
        _case_lines(context)
        + [
            f"document_name: {context.doc_name}",
            f"status: {context.status or 'unknown'}",
            f"generated_at: {format_date(context.generated_at)}",
        ],
    )

    fields = Section.of(
        "Notice of Non-Renewal",
        [
            f"tenant_name: {tenant_name}",
            f"property_address: {property_address}",
            f"notice_date: {notice_date}",
            f"move_out_date: {move_out_date}",
            f"landlord_name: {draft.get_str('landlord_name')}",
            f"landlord_phone: {draft.get_str('landlord_phone')}",
            f"landlord_email: {draft.get_str('landlord_email')}",
        ],
    )

    body = Section.of(
        "Notice",
        [
            f"To: {tenant_name or '[Tenant]'} and all others in possession of the premises at "
            f"{property_address or '[Property Address]'}.",
            "",
            "You are hereby notified that your tenancy of the premises described above will not be renewed. "
            f"You are required to vacate and deliver possession of the premises on or before "
            f"{move_out_date or '[Move-out Date]'}.",
            "",
            f"Dated: {notice_date}",
        ],
    )

    return [case_section, fields, body, _signature_block(draft)]


CENTS = Decimal("0.01")


def _parse_amount(raw: str) -> Optional[Decimal]:
    """Parse a money value; anything that cannot be expressed in cents is treated as text."""
    cleaned = raw.replace("$", "").replace(",", "").strip()
    if not cleaned:
        return None
    try:
        amount = Decimal(cleaned)
        if not amount.is_finite():
            return None
        return amount.quantize(CENTS)
    except InvalidOperation:
        return None


def _money(amount: Decimal) -> str:
    try:
        return f"${amount.quantize(CENTS):,}"
    except InvalidOperation:
        # Totals of very large amounts can exceed the decimal context.
        return f"${amount:,}"


def _deduction_rows(draft: DraftRecord) -> List[Tuple[str, str, Optional[Decimal]]]:
    rows = []
    for idx in range(1, MAX_DEDUCTION_ROWS + 1):
        description = draft.get_str(f"deduction_{idx}_description").strip()
        raw_amount = draft.get_str(f"deduction_{idx}_amount").strip()
        if not description and not raw_amount:
            continue
        rows.append((description or f"Item {idx}", raw_amount, _parse_amount(raw_amount)))
    return rows


def build_itemized_deductions(context: DocumentContext) -> List[Section]:
    draft = context.draft

    header = Section.of(
        "Statement Details",
        [
            "NoticePack PDF (template: CA / Itemized Deductions Statement)",
            "",
        ]
        + _case_lines(context)
        + [
            f"status: {context.status or ''}",
            f"generated_at: {format_date(context.generated_at)}",
        ],
    )

    parties = Section.of(
        "Parties / Property",
        [
            f"tenant_name: {draft.get_str('tenant_name')}",
            f"landlord_name: {draft.get_str('landlord_name')}",
            f"property_address: {draft.get_str('property_address')}",
            f"notice_date: {format_date(draft.get_str('notice_date'))}",
            f"move_out_date: {format_date(draft.get_str('move_out_date'))}",
        ],
    )

    rows = _deduction_rows(draft)
    lines: List[str] = []
    total = Decimal("0")
    for description, raw_amount, amount in rows:
        if amount is None:
            lines.append(f"{description}: {raw_amount}")
            continue
        total += amount
        lines.append(f"{description}: {_money(amount)}")
    if not rows:
        lines.append("(no deductions itemized)")

    lines.append("")
    lines.append(f"Total deductions: {_money(total)}")
    deposit_raw = draft.get_str("security_deposit")
    deposit = _parse_amount(deposit_raw)
    if deposit is not None:
        lines.append(f"Security deposit received: {_money(deposit)}")
        lines.append(f"Amount to be returned: {_money(deposit - total)}")
    else:
        lines.append(f"Security deposit received: {deposit_raw}")

    deductions = Section.of("Deductions", lines)
    return [header, parties, deductions, _signature_block(draft)]
