# ============================================================================
# src/lab_pivot/domain/lab_result.py
# ============================================================================
"""
Lab result aggregates
- LabResult: one dated column of one report for one document
- LabResultPoint: one measurement with raw, parsed and normalized fields
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .enums import Comparator


def decimal_to_json(value: Optional[Decimal]) -> Optional[str]:
    return None if value is None else str(value)


def decimal_from_json(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(str(value))


def comparator_from_json(value: Optional[str]) -> Optional[Comparator]:
    return Comparator(value) if value else None


@dataclass
class LabResultPoint:
    parameter: str
    result_raw: str = ""
    result_numeric: Optional[Decimal] = None
    result_comparator: Optional[Comparator] = None
    unit: Optional[str] = None
    reference: Optional[str] = None
    reference_comparator: Optional[Comparator] = None
    reference_from: Optional[Decimal] = None
    reference_to: Optional[Decimal] = None

    # Canonical forms used for pivot matching and comparison
    normalized_result: Optional[Decimal] = None
    normalized_unit: Optional[str] = None
    normalized_reference_from: Optional[Decimal] = None
    normalized_reference_to: Optional[Decimal] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameter": self.parameter,
            "result_raw": self.result_raw,
            "result_numeric": decimal_to_json(self.result_numeric),
            "result_comparator": self.result_comparator.value if self.result_comparator else None,
            "unit": self.unit,
            "reference": self.reference,
            "reference_comparator": self.reference_comparator.value if self.reference_comparator else None,
            "reference_from": decimal_to_json(self.reference_from),
            "reference_to": decimal_to_json(self.reference_to),
            "normalized_result": decimal_to_json(self.normalized_result),
            "normalized_unit": self.normalized_unit,
            "normalized_reference_from": decimal_to_json(self.normalized_reference_from),
            "normalized_reference_to": decimal_to_json(self.normalized_reference_to),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LabResultPoint":
        return cls(
            parameter=data.get("parameter", ""),
            result_raw=data.get("result_raw") or "",
            result_numeric=decimal_from_json(data.get("result_numeric")),
            result_comparator=comparator_from_json(data.get("result_comparator")),
            unit=data.get("unit"),
            reference=data.get("reference"),
            reference_comparator=comparator_from_json(data.get("reference_comparator")),
            reference_from=decimal_from_json(data.get("reference_from")),
            reference_to=decimal_from_json(data.get("reference_to")),
            normalized_result=decimal_from_json(data.get("normalized_result")),
            normalized_unit=data.get("normalized_unit"),
            normalized_reference_from=decimal_from_json(data.get("normalized_reference_from")),
            normalized_reference_to=decimal_from_json(data.get("normalized_reference_to")),
        )


@dataclass
class LabResult:
    document_id: str
    date: date
    patient: str = ""
    lab_name: str = ""
    points: List[LabResultPoint] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "document_id": self.document_id,
            "patient": self.patient,
            "lab_name": self.lab_name,
            "date": self.date.isoformat(),
            "points": [p.to_dict() for p in self.points],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LabResult":
        return cls(
            id=data["id"],
            document_id=data["document_id"],
            patient=data.get("patient", ""),
            lab_name=data.get("lab_name", ""),
            date=date.fromisoformat(data["date"]),
            points=[LabResultPoint.from_dict(p) for p in data.get("points", [])],
        )
