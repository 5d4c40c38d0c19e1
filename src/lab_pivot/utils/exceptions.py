# ============================================================================
# src/lab_pivot/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the lab pivot engine.
"""


class LabPivotError(Exception):
    """Base exception for all lab pivot errors."""
    pass


class ReportParseError(LabPivotError):
    """Raw lab report could not be turned into lab results."""
    pass


class ReportDateError(ReportParseError, ValueError):
    """Value column date is not a strict YYYY-MM-DD calendar date."""
    def __init__(self, message: str, raw_date: str):
        super().__init__(message)
        self.raw_date = raw_date


class ReportFormatError(ReportParseError):
    """Report payload is not usable JSON or misses required fields."""
    pass


class StorageError(LabPivotError):
    """Error reading from or writing to the lab store."""
    pass


class ConcurrencyError(StorageError):
    """Pivot table was modified by another writer since it was loaded."""
    def __init__(self, message: str, owner_id: str, expected_version: int):
        super().__init__(message)
        self.owner_id = owner_id
        self.expected_version = expected_version


class ConfigurationError(LabPivotError):
    """Invalid configuration."""
    pass


class UnitConversionError(LabPivotError):
    """Error converting units."""
    def __init__(self, message: str, from_unit: str, to_unit: str):
        super().__init__(message)
        self.from_unit = from_unit
        self.to_unit = to_unit
