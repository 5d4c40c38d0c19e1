# ============================================================================
# src/lab_pivot/processors/lab_results_processor.py
# ============================================================================
"""
Lab Results Processor

Entry point for a freshly extracted lab report:

    raw report → ReportTransformer → LabResults
              → one session: store results + fold each into the pivot
              → single commit

A date failure aborts before anything is written. Any failure inside the
session rolls back every staged write, so the stored results and the
owner's pivot never disagree.

Edits and deletions of single results commit first, then rebuild the
owner's pivot from scratch.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from ..domain.lab_result import LabResult
from ..domain.report import LabReport, load_report
from ..services.pivot_updater import PivotUpdater
from ..storage.base import LabStore
from ..utils.logging import LogAdapter
from .report_transformer import ReportTransformer

logger = logging.getLogger(__name__)


class LabResultsProcessor:
    """
    Persists lab results of one document and keeps the owner's pivot current.

    Args:
        store: Lab store providing sessions
        transformer: Report transformer (default instance if None)
        pivot_updater: Pivot updater (created over store if None)
    """

    def __init__(
        self,
        store: LabStore,
        transformer: Optional[ReportTransformer] = None,
        pivot_updater: Optional[PivotUpdater] = None,
    ):
        if store is None:
            raise ValueError("store must not be None")

        self.store = store
        self.transformer = transformer or ReportTransformer()
        self.pivot_updater = pivot_updater or PivotUpdater(store=store)

    def process_report(self, document_id: str, report: LabReport) -> List[LabResult]:
        """
        Transform a report and persist it together with the pivot update.

        Returns:
            The stored LabResults, one per value column

        Raises:
            ReportDateError: a column date is invalid (nothing is written)
            StorageError: persistence failed (everything is rolled back)
        """
        log = LogAdapter(logger, {"document_id": document_id})

        results = self.transformer.transform(report, document_id)
        if not results:
            log.info(f"Report for document {document_id} has no value columns")
            return results

        owner_id = self._owner_of(document_id)
        if owner_id:
            log = LogAdapter(logger, {"document_id": document_id, "owner_id": owner_id})

        with self.pivot_updater.owner_lock(owner_id):
            with self.store.session() as session:
                for result in results:
                    session.store_lab_result(result)
                    self.pivot_updater.add_or_update(session, result)
                session.save_changes()

        point_count = sum(len(r.points) for r in results)
        log.info(
            f"Stored {len(results)} lab results ({point_count} points) for document {document_id}"
        )
        return results

    def process_raw(
        self,
        document_id: str,
        raw: Union[str, bytes, Dict[str, Any]]
    ) -> List[LabResult]:
        """Load raw model output (JSON text or dict) and process it."""
        report = load_report(raw)
        return self.process_report(document_id, report)

    def update_lab_result(self, result: LabResult) -> bool:
        """
        Replace a stored lab result and rebuild the owner's pivot.

        Returns:
            False if no result with that id exists
        """
        if result is None:
            raise ValueError("result must not be None")

        with self.store.session() as session:
            existing = session.load_lab_result(result.id)
            if existing is None:
                logger.warning(f"Lab result {result.id} not found; nothing updated")
                return False
            owners = {session.owner_of(existing.document_id), session.owner_of(result.document_id)}
            session.store_lab_result(result)
            session.save_changes()

        logger.info(f"Updated lab result {result.id}")
        self._rebuild(owners)
        return True

    def delete_lab_result(self, result_id: str) -> bool:
        """
        Delete a stored lab result and rebuild the owner's pivot.

        Returns:
            False if no result with that id exists
        """
        with self.store.session() as session:
            existing = session.load_lab_result(result_id)
            if existing is None:
                logger.warning(f"Lab result {result_id} not found; nothing deleted")
                return False
            owner_id = session.owner_of(existing.document_id)
            session.delete_lab_result(result_id)
            session.save_changes()

        logger.info(f"Deleted lab result {result_id}")
        self._rebuild({owner_id})
        return True

    def _owner_of(self, document_id: str) -> Optional[str]:
        with self.store.session(readonly=True) as session:
            return session.owner_of(document_id)

    def _rebuild(self, owner_ids) -> None:
        for owner_id in sorted(o for o in owner_ids if o):
            self.pivot_updater.rebuild_for_owner(owner_id)
