"""
Draft records: the loosely-typed field values a user saved for one document.

Payloads come straight out of a JSON column, so nothing about their shape is
trusted. Values are normalized once at construction and every accessor
returns a string (or None) without raising.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

Scalar = Union[str, int, float, bool]


def _coerce_value(value: Any) -> Optional[Scalar]:
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value, default=str, sort_keys=True)
        except (TypeError, ValueError):
            return str(value)
    return str(value)


class DraftRecord:
    def __init__(self, payload: Any = None) -> None:
        self._values: Dict[str, Optional[Scalar]] = {}
        if isinstance(payload, DraftRecord):
            self._values = dict(payload._values)
        elif isinstance(payload, Mapping):
            for key, value in payload.items():
                if key is None:
                    continue
                self._values[str(key)] = _coerce_value(value)

    @classmethod
    def from_row(cls, row: Optional[Mapping[str, Any]], column: str = "data") -> "DraftRecord":
        """Build a record from a ``case_documents`` row; JSON-encoded text columns are decoded."""
        if not row:
            return cls()
        raw = row.get(column)
        if isinstance(raw, str):
            try:
                raw = json.loads(raw)
            except ValueError:
                raw = None
        return cls(raw)

    def get(self, key: str) -> Optional[Scalar]:
        return self._values.get(key)

    def get_str(self, key: str, default: str = "") -> str:
        value = self._values.get(key)
        if value is None:
            return default
        if isinstance(value, bool):
            return "Yes" if value else "No"
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def first_of(self, *keys: str) -> str:
        for key in keys:
            value = self.get_str(key).strip()
            if value:
                return value
        return ""

    def keys(self) -> List[str]:
        return sorted(self._values)

    def as_dict(self) -> Dict[str, Optional[Scalar]]:
        return dict(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DraftRecord):
            return self._values == other._values
        return NotImplemented

    def __repr__(self) -> str:
        return f"DraftRecord(keys={len(self._values)})"
