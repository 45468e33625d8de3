from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Tuple

from noticepack.draft import DraftRecord


@dataclass(frozen=True)
class Section:
    """A titled group of text lines. Lines are stored as a tuple so a built section cannot change."""

    title: Optional[str] = None
    lines: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "lines", tuple("" if line is None else str(line) for line in self.lines))

    @classmethod
    def of(cls, title: Optional[str], lines: Iterable[str]) -> "Section":
        return cls(title=title, lines=tuple(lines))


@dataclass(frozen=True)
class DocumentContext:
    case_id: str
    doc_type_id: str
    doc_name: str = ""
    status: Optional[str] = None
    generated_at: Optional[str] = None
    state_code: Optional[str] = None
    doc_type_key: Optional[str] = None
    draft: DraftRecord = field(default_factory=DraftRecord)
