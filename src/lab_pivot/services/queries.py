# ============================================================================
# src/lab_pivot/services/queries.py
# ============================================================================
"""
Read-only projections over stored pivot tables and lab results.

Views are pydantic models so they can be handed to an HTTP layer or
dumped to JSON directly. Building a view never mutates the stored table.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from ..domain.lab_result import LabResult
from ..domain.pivot import PivotRow, PivotTable
from ..storage.base import LabSession
from .unit_converter import UnitConverter, default_unit_converter

logger = logging.getLogger(__name__)


class PivotRowView(BaseModel):
    parameter: str
    unit: Optional[str] = None
    values: List[Optional[Decimal]] = Field(default_factory=list)
    qualitative: List[Optional[str]] = Field(default_factory=list)
    reference_from: List[Optional[Decimal]] = Field(default_factory=list)
    reference_to: List[Optional[Decimal]] = Field(default_factory=list)
    reference_comparator: List[Optional[str]] = Field(default_factory=list)
    units: List[Optional[str]] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: PivotRow, indices: Optional[List[int]] = None) -> "PivotRowView":
        """Project a stored row, optionally onto a subset of column indices."""
        def pick(cells):
            if indices is None:
                return list(cells)
            return [cells[i] if i < len(cells) else None for i in indices]

        return cls(
            parameter=row.parameter,
            unit=row.unit,
            values=pick(row.values),
            qualitative=pick(row.qualitative),
            reference_from=pick(row.reference_from),
            reference_to=pick(row.reference_to),
            reference_comparator=pick(row.reference_comparator),
            units=pick(row.units),
        )

    def has_data(self) -> bool:
        """At least one numeric value or non-blank qualitative entry."""
        if any(v is not None for v in self.values):
            return True
        return any(q is not None and q.strip() for q in self.qualitative)


class PivotTableView(BaseModel):
    id: str
    owner_id: str
    columns: List[date] = Field(default_factory=list)
    rows: List[PivotRowView] = Field(default_factory=list)

    @classmethod
    def from_table(cls, table: PivotTable) -> "PivotTableView":
        return cls(
            id=table.id,
            owner_id=table.owner_id,
            columns=list(table.columns),
            rows=[PivotRowView.from_row(r) for r in table.rows],
        )


def get_pivot_by_owner(session: LabSession, owner_id: str) -> Optional[PivotTableView]:
    """Full pivot table of an owner; None when the owner has none."""
    table = session.load_pivot(owner_id)
    if table is None:
        return None
    return PivotTableView.from_table(table)


def get_pivot_by_document(session: LabSession, document_id: str) -> Optional[PivotTableView]:
    """
    Owner's pivot restricted to the dates of one document's results.

    Returns:
        None if the document has no owner or the owner has no pivot.
        Otherwise a view with only the document's dates (descending) and
        only rows carrying data in those columns.
    """
    owner_id = session.owner_of(document_id)
    if not owner_id:
        logger.debug(f"No owner for document {document_id}")
        return None

    table = session.load_pivot(owner_id)
    if table is None:
        return None

    document_dates = {r.date for r in session.lab_results_for_document(document_id)}
    if not document_dates:
        return PivotTableView(id=table.id, owner_id=owner_id)

    indices = [i for i, column in enumerate(table.columns) if column in document_dates]
    rows = [PivotRowView.from_row(r, indices) for r in table.rows]

    return PivotTableView(
        id=table.id,
        owner_id=owner_id,
        columns=[table.columns[i] for i in indices],
        rows=[r for r in rows if r.has_data()],
    )


def get_lab_results_by_document(session: LabSession, document_id: str) -> List[LabResult]:
    return session.lab_results_for_document(document_id)


def get_lab_result(session: LabSession, result_id: str) -> Optional[LabResult]:
    return session.load_lab_result(result_id)


def convert_row(
    row: PivotRowView,
    to_unit: str,
    converter: Optional[UnitConverter] = None
) -> PivotRowView:
    """
    Copy of row with values and reference bounds converted to to_unit.

    Conversion is per column, from that column's unit (falling back to the
    row unit). Cells the converter has no factor for keep their value and
    their original unit.
    """
    converter = converter or default_unit_converter
    converted = row.model_copy(deep=True)

    for i in range(len(converted.values)):
        from_unit = (converted.units[i] if i < len(converted.units) else None) or row.unit
        if not from_unit:
            continue

        _, convertible = converter.try_convert(Decimal(1), from_unit, to_unit)
        if not convertible:
            continue

        if converted.values[i] is not None:
            converted.values[i], _ = converter.try_convert(converted.values[i], from_unit, to_unit)

        lower = converted.reference_from[i] if i < len(converted.reference_from) else None
        upper = converted.reference_to[i] if i < len(converted.reference_to) else None
        if lower is not None or upper is not None:
            converted.reference_from[i], converted.reference_to[i], _ = converter.try_convert_range(
                lower, upper, from_unit, to_unit
            )

        if i < len(converted.units):
            converted.units[i] = to_unit

    column_units = [u for u in converted.units if u is not None]
    if column_units and all(u == to_unit for u in column_units):
        converted.unit = to_unit

    return converted
