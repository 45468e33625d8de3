"""
Offline rendering for drafts saved as JSON files.

    python main.py render draft.json --document "Notice of Non-Renewal" --state CA -o notice.pdf
    python main.py schema "Pay Rent or Quit"
"""

from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from noticepack.draft import DraftRecord
from noticepack.renderer import RenderOptions, render_pdf
from noticepack.sections import DocumentContext
from noticepack.templates import normalize_doc_key, select_builder
from noticepack.wizard_schemas import get_wizard_schema
from telemetry.logging_utils import get_logger

logger = get_logger(__name__)


def load_draft(path: Path) -> DraftRecord:
    if not path.exists():
        raise FileNotFoundError(f"No such draft file: {path}")
    with path.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    # Accept either the bare field mapping or an exported case_documents row.
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return DraftRecord.from_row(payload)
    return DraftRecord(payload)


def render_draft_file(
    draft_path: str,
    output_path: Optional[str],
    *,
    document: str,
    state_code: Optional[str] = None,
    case_id: str = "local",
    doc_type_id: Optional[str] = None,
    status: str = "draft",
) -> Path:
    """Render a local draft JSON file to PDF and return the written path."""
    source = Path(draft_path)
    draft = load_draft(source)
    key = normalize_doc_key(document)
    context = DocumentContext(
        case_id=case_id,
        doc_type_id=doc_type_id or key,
        doc_name=document,
        status=status,
        generated_at=datetime.now(timezone.utc).isoformat(),
        state_code=state_code.upper() if state_code else None,
        doc_type_key=key,
        draft=draft,
    )
    builder = select_builder(context.state_code, key)
    pdf_bytes = render_pdf(builder(context), RenderOptions(title=document))

    target = Path(output_path) if output_path else source.with_suffix(".pdf")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(pdf_bytes)
    logger.info("cli_render_complete", extra={"builder": builder.__name__, "bytes": len(pdf_bytes)})
    return target


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="noticepack", description="NoticePack document tools")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render", help="Render a draft JSON file to PDF.")
    render.add_argument("draft", help="Path to a JSON file with the draft fields.")
    render.add_argument("--document", "-d", required=True, help='Document name, e.g. "Notice of Non-Renewal".')
    render.add_argument("--state", "-s", help="Two-letter jurisdiction code, e.g. CA.")
    render.add_argument("--output", "-o", help="Where to write the PDF (defaults next to the draft).")
    render.add_argument("--case-id", default="local")
    render.add_argument("--doc-type-id")
    render.add_argument("--status", default="draft")

    schema = sub.add_parser("schema", help="Print the wizard fields for a document.")
    schema.add_argument("document", help="Document name or key.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    if args.command == "render":
        path = render_draft_file(
            args.draft,
            args.output,
            document=args.document,
            state_code=args.state,
            case_id=args.case_id,
            doc_type_id=args.doc_type_id,
            status=args.status,
        )
        print(f"Wrote {path}")
        return 0

    wizard = get_wizard_schema(args.document)
    print(wizard.title)
    for field in wizard.fields:
        marker = "*" if field.required else " "
        print(f" {marker} {field.key:<28} {field.type:<9} {field.label}")
    return 0
