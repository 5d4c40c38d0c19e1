# src/lab_pivot/processors/__init__.py

from .report_transformer import ReportTransformer, parse_report_date
from .lab_results_processor import LabResultsProcessor

__all__ = [
    "ReportTransformer",
    "parse_report_date",
    "LabResultsProcessor",
]
