# ============================================================================
# src/lab_pivot/processors/report_transformer.py
# ============================================================================
"""
Report Transformer - raw extracted report to LabResult aggregates

One LabResult is produced per dated value column. Each measurement is run
through the value parser and the unit normalizer; normalized fields are
filled in alongside the raw ones.

A column date that is not a strict YYYY-MM-DD calendar date aborts the
whole report: no results are returned for any column.
"""

import logging
import re
from datetime import date
from typing import List, Optional

from ..domain.lab_result import LabResult, LabResultPoint
from ..domain.report import LabReport, Measurement
from ..normalizers.parameter_normalizer import ParameterNormalizer
from ..normalizers.unit_normalizer import UnitNormalizer
from ..parsing.value_parser import parse_reference, parse_result
from ..utils.exceptions import ReportDateError

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def parse_report_date(raw: Optional[str]) -> date:
    """Strict YYYY-MM-DD parse; anything else raises ReportDateError."""
    text = (raw or "").strip()
    if not _ISO_DATE.match(text):
        raise ReportDateError(f"Invalid report date '{raw}', expected YYYY-MM-DD", raw_date=raw)
    try:
        return date.fromisoformat(text)
    except ValueError as e:
        # e.g. 2024-02-30
        raise ReportDateError(f"Invalid report date '{raw}': {e}", raw_date=raw) from e


class ReportTransformer:
    """
    Converts one raw LabReport into normalized LabResult objects.

    Normalizers are injectable; defaults are used when none are given.
    """

    def __init__(
        self,
        parameter_normalizer: Optional[ParameterNormalizer] = None,
        unit_normalizer: Optional[UnitNormalizer] = None,
    ):
        self.parameter_normalizer = parameter_normalizer or ParameterNormalizer()
        self.unit_normalizer = unit_normalizer or UnitNormalizer()
        self.logger = logging.getLogger(__name__)

    def transform(self, report: LabReport, document_id: str) -> List[LabResult]:
        """
        Transform a report into one LabResult per value column.

        Args:
            report: Raw report as returned by the extraction model
            document_id: Document the report was extracted from

        Returns:
            LabResults in column order, points in measurement order

        Raises:
            ReportDateError: a column date is not YYYY-MM-DD
        """
        if report is None:
            raise ValueError("report must not be None")
        if not document_id:
            raise ValueError("document_id must not be empty")

        # Validate every date first so a bad column leaves nothing behind
        dates = [parse_report_date(column.date) for column in report.values]

        results = []
        for column, column_date in zip(report.values, dates):
            points = [self.build_point(m) for m in column.measurements]
            results.append(LabResult(
                document_id=document_id,
                date=column_date,
                patient=report.patient,
                lab_name=report.lab_name,
                points=points,
            ))
            self.logger.debug(
                f"Column {column_date.isoformat()} of document {document_id}: {len(points)} points"
            )

        return results

    def normalize_unit(self, unit: Optional[str]) -> Optional[str]:
        """Generic string cleanup, then canonical unit spelling; None when empty."""
        if not unit or not unit.strip():
            return None
        cleaned = self.parameter_normalizer.normalize(unit)
        normalized = self.unit_normalizer.normalize(cleaned)
        return normalized or None

    def build_point(self, measurement: Measurement) -> LabResultPoint:
        result = parse_result(measurement.result)
        reference = parse_reference(measurement.reference)

        ref_from = reference.lower
        ref_to = reference.upper

        # "reference: < 5" style reports with no usable bound: fall back
        # to the numeric result as the one-sided bound
        if (
            ref_from is None
            and ref_to is None
            and reference.comparator is not None
            and result.numeric is not None
        ):
            if reference.comparator.is_less_family:
                ref_to = result.numeric
            elif reference.comparator.is_greater_family:
                ref_from = result.numeric

        return LabResultPoint(
            parameter=measurement.parameter,
            result_raw=measurement.result or "",
            result_numeric=result.numeric,
            result_comparator=result.comparator,
            unit=measurement.unit,
            reference=measurement.reference,
            reference_comparator=reference.comparator,
            reference_from=reference.lower,
            reference_to=reference.upper,
            normalized_result=result.numeric,
            normalized_unit=self.normalize_unit(measurement.unit),
            normalized_reference_from=ref_from,
            normalized_reference_to=ref_to,
        )
