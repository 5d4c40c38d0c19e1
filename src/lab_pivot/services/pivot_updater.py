# ============================================================================
# src/lab_pivot/services/pivot_updater.py
# ============================================================================
"""
Pivot Updater - folds LabResults into the owner's pivot table

Two entry points:
- add_or_update: incremental fold of one result inside the caller's session
  (staged only, the caller commits)
- rebuild_for_owner: recompute the whole table from every stored result of
  the owner's non-deleted documents, in its own session

Columns are kept strictly descending by date. Each row is keyed by
(normalized parameter compared case-insensitively, normalized unit compared
exactly) and every per-column list has one entry per column.
"""

import logging
from contextlib import nullcontext
from datetime import date
from typing import Iterable, Optional

from ..domain.lab_result import LabResult, LabResultPoint
from ..domain.pivot import PivotRow, PivotTable
from ..normalizers.parameter_normalizer import ParameterNormalizer
from ..storage.base import LabSession, LabStore
from ..storage.locks import OwnerLockRegistry
from ..utils.logging import log_performance

logger = logging.getLogger(__name__)


def result_order_key(result: LabResult):
    """Deterministic fold order: date, then document id, then result id."""
    return (result.date, result.document_id, result.id)


class PivotUpdater:
    """
    Maintains one PivotTable per owner.

    Args:
        store: Store used by rebuild_for_owner to open its own session
        parameter_normalizer: Row key normalizer for parameter names
        lock_registry: Optional per-owner locks serializing mutations
    """

    def __init__(
        self,
        store: Optional[LabStore] = None,
        parameter_normalizer: Optional[ParameterNormalizer] = None,
        lock_registry: Optional[OwnerLockRegistry] = None,
    ):
        self.store = store
        self.parameter_normalizer = parameter_normalizer or ParameterNormalizer()
        self.lock_registry = lock_registry

    def owner_lock(self, owner_id: Optional[str]):
        """Context manager holding the owner's lock, if locking is enabled."""
        if self.lock_registry is None or not owner_id:
            return nullcontext()
        return self.lock_registry.hold(owner_id)

    # ------------------------------------------------------------------
    # Incremental update
    # ------------------------------------------------------------------
    def add_or_update(self, session: LabSession, result: LabResult) -> Optional[PivotTable]:
        """
        Fold one LabResult into its owner's pivot and stage the write.

        Returns:
            The updated table, or None when the document has no owner
        """
        if session is None:
            raise ValueError("session must not be None")
        if result is None:
            raise ValueError("result must not be None")

        owner_id = session.owner_of(result.document_id)
        if not owner_id:
            logger.warning(
                f"No owner for document {result.document_id}; "
                f"lab result {result.id} not added to any pivot"
            )
            return None

        pivot = session.load_pivot(owner_id)
        if pivot is None:
            pivot = PivotTable(owner_id=owner_id)
            logger.debug(f"Creating pivot table for owner {owner_id}")

        self.apply_result(pivot, result)
        session.store_pivot(pivot)
        return pivot

    # ------------------------------------------------------------------
    # Full rebuild
    # ------------------------------------------------------------------
    def rebuild_for_owner(self, owner_id: str) -> Optional[PivotTable]:
        """
        Recompute the owner's pivot from scratch and commit it.

        Returns:
            The rebuilt table, or None if the owner has no documents left
            (any existing table is deleted in that case)
        """
        if not owner_id or not owner_id.strip():
            raise ValueError("owner_id must not be empty")
        if self.store is None:
            raise ValueError("rebuild_for_owner requires a store")

        with self.owner_lock(owner_id):
            return self._rebuild(owner_id)

    @log_performance(logger, "Pivot rebuild")
    def _rebuild(self, owner_id: str) -> Optional[PivotTable]:
        with self.store.session() as session:
            document_ids = session.document_ids_for_owner(owner_id)

            if not document_ids:
                if session.delete_pivot(owner_id):
                    logger.info(f"Owner {owner_id} has no documents; pivot removed")
                session.save_changes()
                return None

            results = session.lab_results_for_documents(document_ids)
            fresh = self.build_table(owner_id, results)

            existing = session.load_pivot(owner_id)
            if existing is not None:
                existing.columns = fresh.columns
                existing.rows = fresh.rows
                target = existing
            else:
                target = fresh

            session.store_pivot(target)
            session.save_changes()

        logger.info(
            f"Rebuilt pivot for owner {owner_id}: {len(document_ids)} documents, "
            f"{len(results)} results, {len(target.columns)} columns, {len(target.rows)} rows"
        )
        return target

    def build_table(self, owner_id: str, results: Iterable[LabResult]) -> PivotTable:
        """Fold results into a new table in deterministic order."""
        table = PivotTable(owner_id=owner_id)
        for result in sorted(results, key=result_order_key):
            self.apply_result(table, result)
        return table

    # ------------------------------------------------------------------
    # Folding
    # ------------------------------------------------------------------
    def apply_result(self, pivot: PivotTable, result: LabResult) -> None:
        """Write every point of result into the column for result.date."""
        column = self._ensure_column(pivot, result.date)

        for point in result.points:
            parameter = self.parameter_normalizer.normalize(point.parameter)
            row = self._find_or_create_row(pivot, parameter, point.normalized_unit)
            self._write_cell(row, column, point)

        pivot.rows.sort(key=PivotRow.sort_key)

    @staticmethod
    def _ensure_column(pivot: PivotTable, column_date: date) -> int:
        column_count = len(pivot.columns)
        for row in pivot.rows:
            row.pad_to(column_count)

        if column_date in pivot.columns:
            return pivot.columns.index(column_date)

        # First position holding an older date keeps columns descending
        index = next(
            (i for i, existing in enumerate(pivot.columns) if existing < column_date),
            column_count,
        )
        pivot.columns.insert(index, column_date)
        for row in pivot.rows:
            row.insert_column(index)
        return index

    @staticmethod
    def _find_or_create_row(pivot: PivotTable, parameter: str, unit: Optional[str]) -> PivotRow:
        for row in pivot.rows:
            if row.matches(parameter, unit):
                return row

        row = PivotRow(parameter=parameter, unit=unit)
        row.pad_to(len(pivot.columns))
        pivot.rows.append(row)
        return row

    @staticmethod
    def _write_cell(row: PivotRow, column: int, point: LabResultPoint) -> None:
        numeric = point.normalized_result if point.normalized_result is not None else point.result_numeric

        if numeric is not None:
            row.values[column] = numeric
            row.qualitative[column] = None
        else:
            row.values[column] = None
            raw = point.result_raw
            row.qualitative[column] = raw if raw and raw.strip() else None

        row.units[column] = point.normalized_unit or point.unit

        comparator = point.reference_comparator.value if point.reference_comparator else None
        if point.normalized_reference_from is not None or point.normalized_reference_to is not None:
            row.reference_from[column] = point.normalized_reference_from
            row.reference_to[column] = point.normalized_reference_to
            row.reference_comparator[column] = comparator
        elif point.reference_from is not None or point.reference_to is not None:
            row.reference_from[column] = point.reference_from
            row.reference_to[column] = point.reference_to
            row.reference_comparator[column] = comparator
