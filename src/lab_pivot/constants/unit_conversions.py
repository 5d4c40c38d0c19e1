# ============================================================================
# src/lab_pivot/constants/unit_conversions.py
# ============================================================================
"""
Unit Conversion Tables
- Convert lab units between compatible measurement systems
- Keys are (from_unit, to_unit) in folded form (lowercase, "µ" -> "u")
- Values are (operation, factor); "div" divides, "mul" multiplies
"""

from decimal import Decimal
from types import MappingProxyType

GLUCOSE_MG_PER_MMOL = Decimal("18.0")
CHOLESTEROL_MG_PER_MMOL = Decimal("38.67")

UNIT_CONVERSIONS = MappingProxyType({
    # Glucose-like analytes
    ("mg/dl", "mmol/l"): ("div", GLUCOSE_MG_PER_MMOL),
    ("mmol/l", "mg/dl"): ("mul", GLUCOSE_MG_PER_MMOL),

    # Cholesterol
    ("mg/dl", "mmol/l:cholesterol"): ("div", CHOLESTEROL_MG_PER_MMOL),
    ("mmol/l:cholesterol", "mg/dl"): ("mul", CHOLESTEROL_MG_PER_MMOL),

    # Mass concentration scale changes
    ("ug/ml", "ng/ml"): ("mul", Decimal("1000")),
    ("ng/ml", "ug/ml"): ("div", Decimal("1000")),
    ("g/dl", "g/l"): ("mul", Decimal("10")),
    ("g/l", "g/dl"): ("div", Decimal("10")),
})
