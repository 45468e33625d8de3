"""
Guided-form definitions for each document type.

Schemas are keyed by document-type key (see ``noticepack.templates.normalize_doc_key``).
Documents without a dedicated schema get a small generic set of fields.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from noticepack.draft import DraftRecord
from noticepack.templates import normalize_doc_key

FIELD_TYPES = ("text", "number", "date", "textarea")


@dataclass(frozen=True)
class FieldSchema:
    key: str
    label: str
    type: str = "text"
    required: bool = False
    placeholder: Optional[str] = None
    help: Optional[str] = None


@dataclass(frozen=True)
class WizardSchema:
    title: str
    fields: List[FieldSchema] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_LANDLORD = FieldSchema("landlord_name", "Landlord name", "text", True, "e.g. John Landlord")
_TENANT = FieldSchema("tenant_name", "Tenant name", "text", True, "e.g. Jane Tenant")
_ADDRESS = FieldSchema("property_address", "Property address", "textarea", True, "Street, City, State, ZIP")
_NOTICE_DATE = FieldSchema("notice_date", "Notice date", "date", True)

SCHEMAS: Dict[str, WizardSchema] = {
    "notice_of_non_renewal": WizardSchema(
        "Notice of Non-Renewal",
        [
            _LANDLORD,
            _TENANT,
            _ADDRESS,
            _NOTICE_DATE,
            FieldSchema("move_out_date", "Move-out date", "date", True),
            FieldSchema("landlord_email", "Landlord email", "text", placeholder="optional"),
            FieldSchema("landlord_phone", "Landlord phone", "text", placeholder="optional"),
        ],
    ),
    "pay_rent_or_quit": WizardSchema(
        "Pay Rent or Quit",
        [
            FieldSchema("landlord_name", "Landlord name", "text", True),
            FieldSchema("tenant_name", "Tenant name", "text", True),
            FieldSchema("property_address", "Property address", "textarea", True),
            FieldSchema("rent_amount", "Past due rent amount", "number", True, "e.g. 1200"),
            FieldSchema("rent_due_date", "Rent due date", "date", True),
            _NOTICE_DATE,
            FieldSchema("payment_instructions", "How tenant can pay", "textarea", placeholder="optional"),
        ],
    ),
    "late_rent_reminder": WizardSchema(
        "Late Rent Reminder",
        [
            FieldSchema("tenant_name", "Tenant name", "text", True),
            FieldSchema("property_address", "Property address", "textarea", True),
            FieldSchema("rent_amount", "Rent amount", "number", True),
            FieldSchema("rent_due_date", "Rent due date", "date", True),
            FieldSchema("note", "Optional note", "textarea"),
        ],
    ),
    "itemized_deductions_statement": WizardSchema(
        "Itemized Deductions Statement",
        [
            _LANDLORD,
            _TENANT,
            _ADDRESS,
            FieldSchema("move_out_date", "Move-out date", "date", True),
            FieldSchema("security_deposit", "Security deposit received", "number", True, "e.g. 2400"),
            FieldSchema("deduction_1_description", "Deduction 1", "text", placeholder="e.g. Carpet cleaning"),
            FieldSchema("deduction_1_amount", "Deduction 1 amount", "number"),
            FieldSchema("deduction_2_description", "Deduction 2", "text"),
            FieldSchema("deduction_2_amount", "Deduction 2 amount", "number"),
            FieldSchema("deduction_3_description", "Deduction 3", "text"),
            FieldSchema("deduction_3_amount", "Deduction 3 amount", "number"),
        ],
    ),
}

FALLBACK_SCHEMA = WizardSchema(
    "Document Wizard",
    [
        FieldSchema("landlord_name", "Landlord name", "text", True),
        FieldSchema("tenant_name", "Tenant name", "text", True),
        FieldSchema("property_address", "Property address", "textarea", True),
        FieldSchema("notice_date", "Notice date", "date"),
    ],
)


def get_wizard_schema(doc_key: Optional[str]) -> WizardSchema:
    if not doc_key:
        return FALLBACK_SCHEMA
    return SCHEMAS.get(normalize_doc_key(doc_key), FALLBACK_SCHEMA)


def missing_required(schema: WizardSchema, draft: DraftRecord) -> List[str]:
    return [f.label for f in schema.fields if f.required and not draft.get_str(f.key).strip()]
