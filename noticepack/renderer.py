"""Render a section model to PDF bytes using ReportLab."""

from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO
from typing import Iterable, Optional

from reportlab.lib.pagesizes import LETTER
from reportlab.pdfgen import canvas

from noticepack.errors import RenderError
from noticepack.formatting import DEFAULT_WRAP_WIDTH, wrap_line
from noticepack.sections import Section

FONT_NAME = "Helvetica"
BODY_FONT_SIZE = 11
SECTION_TITLE_FONT_SIZE = 12
DOCUMENT_TITLE_FONT_SIZE = 14

LEFT_MARGIN = 60
TOP_Y = 740
LEADING = 16
TITLE_GAP = 26
SECTION_TITLE_GAP = 6
SECTION_GAP = 10

SECTION_START_MIN_Y = 80
LINE_MIN_Y = 60


@dataclass(frozen=True)
class RenderOptions:
    title: Optional[str] = None


def _printable(text: str) -> str:
    # Standard Type 1 fonts only cover WinAnsi.
    return text.encode("cp1252", errors="replace").decode("cp1252")


class _PageWriter:
    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.y = TOP_Y

    def new_page(self) -> None:
        self.pdf.showPage()
        self.y = TOP_Y

    def draw(self, text: str, size: int) -> None:
        for row in wrap_line(text, DEFAULT_WRAP_WIDTH):
            if self.y < LINE_MIN_Y:
                self.new_page()
            self.pdf.setFont(FONT_NAME, size)
            self.pdf.drawString(LEFT_MARGIN, self.y, _printable(row))
            self.y -= LEADING


def render_pdf(sections: Iterable[Section], options: Optional[RenderOptions] = None) -> bytes:
    """
    Lay sections out top to bottom on US Letter pages.

    A section that would start below the bottom threshold moves to a fresh page,
    and any row that would fall below the line threshold continues on the next page.
    """
    opts = options or RenderOptions()
    buffer = BytesIO()
    try:
        pdf = canvas.Canvas(buffer, pagesize=LETTER)
        if opts.title:
            pdf.setTitle(_printable(opts.title))
        writer = _PageWriter(pdf)

        if opts.title:
            pdf.setFont(FONT_NAME, DOCUMENT_TITLE_FONT_SIZE)
            pdf.drawString(LEFT_MARGIN, writer.y, _printable(opts.title))
            writer.y -= TITLE_GAP

        for section in sections:
            if writer.y < SECTION_START_MIN_Y:
                writer.new_page()
            if section.title:
                writer.draw(section.title, SECTION_TITLE_FONT_SIZE)
                writer.y -= SECTION_TITLE_GAP
            for line in section.lines:
                writer.draw(line, BODY_FONT_SIZE)
            writer.y -= SECTION_GAP

        pdf.save()
    except Exception as exc:
        raise RenderError(f"PDF construction failed: {exc}", cause=exc) from exc
    return buffer.getvalue()
