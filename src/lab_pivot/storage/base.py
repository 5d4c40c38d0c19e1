# ============================================================================
# src/lab_pivot/storage/base.py
# ============================================================================
"""
Storage capability interface

The pivot updater and the processor only talk to a LabSession: a unit of
work that loads and stages writes, and makes them durable together on
save_changes(). Leaving the session without save_changes() discards every
staged write.

Implementations decide how same-owner writers are kept apart (row locks,
version checks, a distributed lock); callers must not assume single-writer
access.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..domain.lab_result import LabResult
from ..domain.pivot import PivotTable


class LabSession(ABC):
    """Unit of work over documents, lab results and pivot tables."""

    def __enter__(self) -> "LabSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # Ownership (external document registry)
    # ------------------------------------------------------------------
    @abstractmethod
    def owner_of(self, document_id: str) -> Optional[str]:
        """Owner of a non-deleted document, or None."""

    @abstractmethod
    def document_ids_for_owner(self, owner_id: str) -> List[str]:
        """Ids of all non-deleted documents of an owner."""

    # ------------------------------------------------------------------
    # Pivot tables
    # ------------------------------------------------------------------
    @abstractmethod
    def load_pivot(self, owner_id: str) -> Optional[PivotTable]:
        pass

    @abstractmethod
    def store_pivot(self, pivot: PivotTable) -> None:
        """Stage an insert or update of the owner's pivot table."""

    @abstractmethod
    def delete_pivot(self, owner_id: str) -> bool:
        pass

    # ------------------------------------------------------------------
    # Lab results
    # ------------------------------------------------------------------
    @abstractmethod
    def store_lab_result(self, result: LabResult) -> None:
        pass

    @abstractmethod
    def load_lab_result(self, result_id: str) -> Optional[LabResult]:
        pass

    @abstractmethod
    def delete_lab_result(self, result_id: str) -> bool:
        pass

    @abstractmethod
    def lab_results_for_document(self, document_id: str) -> List[LabResult]:
        pass

    @abstractmethod
    def lab_results_for_documents(self, document_ids: Sequence[str]) -> List[LabResult]:
        pass

    # ------------------------------------------------------------------
    # Transaction
    # ------------------------------------------------------------------
    @abstractmethod
    def save_changes(self) -> None:
        """Make all staged writes durable atomically."""

    @abstractmethod
    def close(self) -> None:
        """Discard uncommitted writes and release resources."""


class LabStore(ABC):
    """Factory for sessions over one backing database."""

    @abstractmethod
    def session(self, readonly: bool = False) -> LabSession:
        pass
