# src/lab_pivot/domain/__init__.py

from .enums import Comparator
from .lab_result import LabResult, LabResultPoint
from .pivot import PivotTable, PivotRow, PER_COLUMN_FIELDS
from .report import LabReport, ValueColumn, Measurement, load_report, build_report_schema

__all__ = [
    "Comparator",
    "LabResult",
    "LabResultPoint",
    "PivotTable",
    "PivotRow",
    "PER_COLUMN_FIELDS",
    "LabReport",
    "ValueColumn",
    "Measurement",
    "load_report",
    "build_report_schema",
]
