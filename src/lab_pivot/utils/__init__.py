# ============================================================================
# src/lab_pivot/utils/__init__.py
# ============================================================================
"""
Utility modules for the lab pivot engine.
"""

from .exceptions import (
    LabPivotError,
    ReportParseError,
    ReportDateError,
    ReportFormatError,
    StorageError,
    ConcurrencyError,
    ConfigurationError,
    UnitConversionError,
)

from .logging import (
    setup_logging,
    setup_logging_from_settings,
    log_performance,
    JsonFormatter,
    LogAdapter,
)

__all__ = [
    # Exceptions
    'LabPivotError',
    'ReportParseError',
    'ReportDateError',
    'ReportFormatError',
    'StorageError',
    'ConcurrencyError',
    'ConfigurationError',
    'UnitConversionError',
    # Logging
    'setup_logging',
    'setup_logging_from_settings',
    'log_performance',
    'JsonFormatter',
    'LogAdapter',
]
