# ============================================================================
# src/lab_pivot/domain/enums.py
# ============================================================================
"""
Lab Value Enums
- Comparators qualifying a numeric result or a reference bound
"""

from enum import Enum
from typing import Optional


class Comparator(str, Enum):
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="

    @property
    def is_less_family(self) -> bool:
        return self in (Comparator.LT, Comparator.LE)

    @property
    def is_greater_family(self) -> bool:
        return self in (Comparator.GT, Comparator.GE)

    @classmethod
    def from_token(cls, token: Optional[str]) -> Optional["Comparator"]:
        """Map a raw token (including the unicode forms) to a comparator."""
        if not token:
            return None
        token = token.strip().replace("≤", "<=").replace("≥", ">=")
        try:
            return cls(token)
        except ValueError:
            return None
