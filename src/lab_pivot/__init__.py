# ============================================================================
# src/lab_pivot/__init__.py
# ============================================================================
"""
Lab Pivot Engine

Turns lab reports extracted from medical documents into normalized lab
results and maintains one parameter-by-date pivot table per owner.
"""

__version__ = "0.1.0"

from .domain import LabReport, LabResult, LabResultPoint, PivotTable, PivotRow, load_report
from .processors import LabResultsProcessor, ReportTransformer
from .services import PivotUpdater, UnitConverter
from .storage import LabStore, LabSession, OwnerLockRegistry, SqliteLabStore

__all__ = [
    "LabReport",
    "LabResult",
    "LabResultPoint",
    "PivotTable",
    "PivotRow",
    "load_report",
    "LabResultsProcessor",
    "ReportTransformer",
    "PivotUpdater",
    "UnitConverter",
    "LabStore",
    "LabSession",
    "OwnerLockRegistry",
    "SqliteLabStore",
]
