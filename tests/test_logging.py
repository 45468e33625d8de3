import json
import logging

from telemetry.logging_utils import JsonFormatter
from telemetry.pii import sanitize_log_payload, scrub_text


def test_scrub_text_hashes_contact_details():
    scrubbed = scrub_text("Reach landlord@example.com or 415-555-0134")
    assert "landlord@example.com" not in scrubbed
    assert "415-555-0134" not in scrubbed
    assert "[EMAIL_" in scrubbed
    assert "[PHONE_" in scrubbed


def test_sanitize_summarizes_draft_payloads():
    cleaned = sanitize_log_payload(
        {"case_id": "c1", "draft": {"tenant_name": "Jane"}, "pdf_bytes": b"%PDF-1.4", "note": None}
    )
    assert cleaned["case_id"] == "c1"
    assert cleaned["draft"] == {"redacted": True, "items": 1}
    assert cleaned["pdf_bytes"] == {"redacted": True, "bytes": 8}
    assert cleaned["note"] is None


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("noticepack.test", logging.INFO, __file__, 1, "pdf_render_complete", None, None)
    record.case_id = "c1"
    record.bytes = 1024
    payload = json.loads(JsonFormatter().format(record))
    assert payload["message"] == "pdf_render_complete"
    assert payload["level"] == "INFO"
    assert payload["case_id"] == "c1"
    assert payload["bytes"] == 1024
    assert "lineno" not in payload
