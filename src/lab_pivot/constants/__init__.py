# src/lab_pivot/constants/__init__.py

from .unit_mappings import UNIT_MAPPINGS
from .unit_conversions import (
    UNIT_CONVERSIONS,
    GLUCOSE_MG_PER_MMOL,
    CHOLESTEROL_MG_PER_MMOL,
)

__all__ = [
    "UNIT_MAPPINGS",
    "UNIT_CONVERSIONS",
    "GLUCOSE_MG_PER_MMOL",
    "CHOLESTEROL_MG_PER_MMOL",
]
