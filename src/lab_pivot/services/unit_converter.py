# ============================================================================
# src/lab_pivot/services/unit_converter.py
# ============================================================================
"""
Lightweight unit converter

Best-effort conversion between a small set of compatible unit pairs
(mg/dL <-> mmol/L for glucose-like analytes, cholesterol, µg/mL <-> ng/mL,
g/dL <-> g/L). A missing factor is reported as "cannot convert", never as
an error.
"""

import logging
from decimal import Decimal
from typing import Mapping, Optional, Tuple

from ..constants.unit_conversions import UNIT_CONVERSIONS, CHOLESTEROL_MG_PER_MMOL
from ..utils.exceptions import UnitConversionError

logger = logging.getLogger(__name__)


def fold_unit(unit: Optional[str]) -> str:
    """Comparison form of a unit: trimmed, lowercased, micro sign as 'u'."""
    return (unit or "").strip().lower().replace("µ", "u").replace("μ", "u")


class UnitConverter:
    def __init__(self, conversions: Optional[Mapping[Tuple[str, str], Tuple[str, Decimal]]] = None):
        table = dict(UNIT_CONVERSIONS)
        if conversions:
            table.update(conversions)
        self.conversions = table

    def try_convert(
        self,
        value: Decimal,
        from_unit: str,
        to_unit: str
    ) -> Tuple[Decimal, bool]:
        """
        Convert value from one unit to another.

        Returns:
            (converted, ok); on ok=False the input value is returned unchanged
        """
        f = fold_unit(from_unit)
        t = fold_unit(to_unit)

        if f and f == t:
            return value, True

        conversion = self.conversions.get((f, t))
        if conversion:
            return self._apply(value, conversion), True

        # Qualified targets like "mmol/l:ldl" fall back to the cholesterol factor
        if t.startswith("mmol/l:") and f == "mg/dl":
            return value / CHOLESTEROL_MG_PER_MMOL, True

        logger.debug(f"No conversion known from '{from_unit}' to '{to_unit}'")
        return value, False

    def convert(self, value: Decimal, from_unit: str, to_unit: str) -> Decimal:
        """
        Convert value, raising when the unit pair is unknown.

        Raises:
            UnitConversionError: no conversion from from_unit to to_unit
        """
        converted, ok = self.try_convert(value, from_unit, to_unit)
        if not ok:
            raise UnitConversionError(
                f"Cannot convert from '{from_unit}' to '{to_unit}'",
                from_unit=from_unit,
                to_unit=to_unit,
            )
        return converted

    def try_convert_range(
        self,
        lower: Optional[Decimal],
        upper: Optional[Decimal],
        from_unit: str,
        to_unit: str
    ) -> Tuple[Optional[Decimal], Optional[Decimal], bool]:
        """
        Convert optional range bounds independently.

        Returns:
            (lower, upper, ok) where ok is True if at least one bound converted.
            Bounds that did not convert come back as None.
        """
        converted_lower = converted_upper = None
        any_converted = False

        if lower is not None:
            value, ok = self.try_convert(lower, from_unit, to_unit)
            if ok:
                converted_lower = value
                any_converted = True

        if upper is not None:
            value, ok = self.try_convert(upper, from_unit, to_unit)
            if ok:
                converted_upper = value
                any_converted = True

        return converted_lower, converted_upper, any_converted

    @staticmethod
    def _apply(value: Decimal, conversion: Tuple[str, Decimal]) -> Decimal:
        operation, factor = conversion
        if operation == "mul":
            return value * factor
        return value / factor


default_unit_converter = UnitConverter()
