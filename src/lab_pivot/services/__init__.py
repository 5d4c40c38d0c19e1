# src/lab_pivot/services/__init__.py

from .unit_converter import UnitConverter, default_unit_converter, fold_unit
from .pivot_updater import PivotUpdater, result_order_key
from .queries import (
    PivotRowView,
    PivotTableView,
    get_pivot_by_owner,
    get_pivot_by_document,
    get_lab_results_by_document,
    get_lab_result,
    convert_row,
)

__all__ = [
    "UnitConverter",
    "default_unit_converter",
    "fold_unit",
    "PivotUpdater",
    "result_order_key",
    "PivotRowView",
    "PivotTableView",
    "get_pivot_by_owner",
    "get_pivot_by_document",
    "get_lab_results_by_document",
    "get_lab_result",
    "convert_row",
]
