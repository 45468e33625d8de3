import json

from cli import render as cli_render


def test_render_draft_file_writes_pdf(tmp_path):
    draft_path = tmp_path / "draft.json"
    draft_path.write_text(json.dumps({"tenant_name": "Jane Tenant", "notice_date": "2024-01-05"}), encoding="utf-8")

    out = cli_render.render_draft_file(
        str(draft_path), None, document="Notice of Non-Renewal", state_code="ca"
    )
    assert out == tmp_path / "draft.pdf"
    assert out.read_bytes().startswith(b"%PDF")


def test_load_draft_accepts_exported_row(tmp_path):
    path = tmp_path / "row.json"
    path.write_text(json.dumps({"status": "draft", "data": {"tenant_name": "Jane"}}), encoding="utf-8")
    assert cli_render.load_draft(path).get_str("tenant_name") == "Jane"


def test_main_render_and_schema(tmp_path, capsys):
    draft_path = tmp_path / "draft.json"
    draft_path.write_text("{}", encoding="utf-8")
    target = tmp_path / "out" / "doc.pdf"

    assert cli_render.main(["render", str(draft_path), "-d", "Mold Disclosure", "-o", str(target)]) == 0
    assert target.exists()

    assert cli_render.main(["schema", "Pay Rent or Quit"]) == 0
    printed = capsys.readouterr().out
    assert "Pay Rent or Quit" in printed
    assert "rent_amount" in printed
