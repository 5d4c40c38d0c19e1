# ============================================================================
# src/lab_pivot/normalizers/unit_normalizer.py
# ============================================================================
"""
Unit spelling normalization

Maps spelling variants ("g/l", "G/L", "g\\l") to one preferred spelling
("g/L"). Unknown units are returned lowercased and trimmed; this never
fails.
"""

from typing import Mapping, Optional

from ..constants.unit_mappings import UNIT_MAPPINGS


class UnitNormalizer:
    def __init__(self, mappings: Optional[Mapping[str, str]] = None):
        self.mappings = mappings if mappings is not None else UNIT_MAPPINGS

    def normalize(self, unit: str) -> str:
        if not unit or not unit.strip():
            return ""

        key = unit.strip().lower()
        return self.mappings.get(key, key)


default_unit_normalizer = UnitNormalizer()
