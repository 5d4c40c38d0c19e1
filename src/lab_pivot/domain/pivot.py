# ============================================================================
# src/lab_pivot/domain/pivot.py
# ============================================================================
"""
Pivot table aggregates
- PivotTable: one parameter-by-date matrix per owner
- PivotRow: one (normalized parameter, normalized unit) key with per-column lists
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .lab_result import decimal_from_json, decimal_to_json

# Per-column lists every row carries; all have len(table.columns) entries
PER_COLUMN_FIELDS = (
    "values",
    "qualitative",
    "reference_from",
    "reference_to",
    "reference_comparator",
    "units",
)


@dataclass
class PivotRow:
    parameter: str
    unit: Optional[str] = None
    values: List[Optional[Decimal]] = field(default_factory=list)
    qualitative: List[Optional[str]] = field(default_factory=list)
    reference_from: List[Optional[Decimal]] = field(default_factory=list)
    reference_to: List[Optional[Decimal]] = field(default_factory=list)
    reference_comparator: List[Optional[str]] = field(default_factory=list)
    units: List[Optional[str]] = field(default_factory=list)

    def pad_to(self, column_count: int) -> None:
        """Right-pad every per-column list with None up to column_count."""
        for name in PER_COLUMN_FIELDS:
            cells = getattr(self, name)
            while len(cells) < column_count:
                cells.append(None)

    def insert_column(self, index: int) -> None:
        """Open an empty cell at index in every per-column list."""
        for name in PER_COLUMN_FIELDS:
            getattr(self, name).insert(index, None)

    def matches(self, parameter: str, unit: Optional[str]) -> bool:
        return self.parameter.casefold() == parameter.casefold() and self.unit == unit

    def sort_key(self):
        # Case-insensitive ordinal order compares upper-cased text
        return (self.parameter.upper(), self.unit or "")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter": self.parameter,
            "unit": self.unit,
            "values": [decimal_to_json(v) for v in self.values],
            "qualitative": list(self.qualitative),
            "reference_from": [decimal_to_json(v) for v in self.reference_from],
            "reference_to": [decimal_to_json(v) for v in self.reference_to],
            "reference_comparator": list(self.reference_comparator),
            "units": list(self.units),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PivotRow":
        return cls(
            parameter=data["parameter"],
            unit=data.get("unit"),
            values=[decimal_from_json(v) for v in data.get("values", [])],
            qualitative=list(data.get("qualitative", [])),
            reference_from=[decimal_from_json(v) for v in data.get("reference_from", [])],
            reference_to=[decimal_from_json(v) for v in data.get("reference_to", [])],
            reference_comparator=list(data.get("reference_comparator", [])),
            units=list(data.get("units", [])),
        )


@dataclass
class PivotTable:
    owner_id: str
    columns: List[date] = field(default_factory=list)  # strictly descending
    rows: List[PivotRow] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))
    version: int = 0

    def content_dict(self) -> Dict[str, Any]:
        """Columns and rows only; identity and version excluded."""
        return {
            "owner_id": self.owner_id,
            "columns": [c.isoformat() for c in self.columns],
            "rows": [r.to_dict() for r in self.rows],
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.content_dict()
        data["id"] = self.id
        data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PivotTable":
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            columns=[date.fromisoformat(c) for c in data.get("columns", [])],
            rows=[PivotRow.from_dict(r) for r in data.get("rows", [])],
            version=data.get("version", 0),
        )
