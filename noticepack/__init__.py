"""NoticePack core: draft records, section builders, and PDF rendering."""

from noticepack.draft import DraftRecord
from noticepack.formatting import format_date, wrap_line
from noticepack.renderer import RenderOptions, render_pdf
from noticepack.sections import DocumentContext, Section
from noticepack.templates import select_builder

__all__ = [
    "DocumentContext",
    "DraftRecord",
    "RenderOptions",
    "Section",
    "format_date",
    "render_pdf",
    "select_builder",
    "wrap_line",
]
