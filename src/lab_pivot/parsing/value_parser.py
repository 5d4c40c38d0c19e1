# ============================================================================
# src/lab_pivot/parsing/value_parser.py
# ============================================================================
"""
Parsing utilities for lab result and reference strings.

Handles result values like:
- "12.5" / "13,2"      (dot or comma decimal separator)
- "<0.6" / ">= 100"    (leading comparator)
- "Negative"           (qualitative - no numeric value, not an error)

Handles reference strings like:
- "0.50-1.25" / "4,5 – 11"   (range, three dash variants)
- ">= 12" / "< 5"            (one-sided)
- "≤ 5" / "Normal < 200"     (comparator inferred from the text)
- "12"                       (bare number - treated as lower bound)
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from ..domain.enums import Comparator

_NUMBER = r"\d+(?:[.,]\d+)?"

# Longest tokens first so "<=" is not read as "<"
_COMPARATOR_PREFIX = re.compile(r"^\s*(<=|>=|<|>)")

_RESULT = re.compile(rf"^\s*(<=|>=|<|>)?\s*([+-]?{_NUMBER})\s*$")

_RANGE = re.compile(rf"({_NUMBER})\s*[-–—]\s*({_NUMBER})")

# A number standing on its own, not glued to letters ("5mg", "10E3")
_STANDALONE_NUMBER = re.compile(rf"(?<![\w.,])({_NUMBER})(?![\w])")

_ANY_NUMBER = re.compile(_NUMBER)

# Checked in order; two-character forms before their one-character prefix
_INFERRED_COMPARATORS = (
    ("≤", Comparator.LE),
    ("<=", Comparator.LE),
    ("<", Comparator.LT),
    ("≥", Comparator.GE),
    (">=", Comparator.GE),
    (">", Comparator.GT),
)


@dataclass(frozen=True)
class ResultParse:
    comparator: Optional[Comparator] = None
    numeric: Optional[Decimal] = None


@dataclass(frozen=True)
class ReferenceParse:
    comparator: Optional[Comparator] = None
    lower: Optional[Decimal] = None
    upper: Optional[Decimal] = None


def parse_decimal(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse a number using invariant semantics.

    Comma and dot are both accepted as the decimal separator; thousands
    separators are not supported ("1.234,5" does not parse).
    """
    if text is None:
        return None
    candidate = text.strip().replace(",", ".")
    if not re.fullmatch(r"[+-]?\d+(?:\.\d+)?", candidate):
        return None
    try:
        return Decimal(candidate)
    except InvalidOperation:
        return None


def parse_result(raw: Optional[str]) -> ResultParse:
    """
    Parse a raw result into (comparator, numeric).

    Only the shape "[comparator] number" yields values; anything else is
    a qualitative result and both fields stay None.
    """
    if not raw:
        return ResultParse()

    match = _RESULT.match(raw)
    if not match:
        return ResultParse()

    numeric = parse_decimal(match.group(2))
    if numeric is None:
        return ResultParse()

    return ResultParse(
        comparator=Comparator.from_token(match.group(1)),
        numeric=numeric,
    )


def _infer_comparator(text: str) -> Optional[Comparator]:
    for token, comparator in _INFERRED_COMPARATORS:
        if token in text:
            return comparator
    return None


def _assign_single_bound(
    value: Decimal,
    comparator: Optional[Comparator]
) -> Tuple[Optional[Decimal], Optional[Decimal]]:
    """Place a lone number: upper for '<' family, lower otherwise."""
    if comparator is not None and comparator.is_less_family:
        return None, value
    # greater-than family, or no signal at all (ambiguous default)
    return value, None


def parse_reference(raw: Optional[str]) -> ReferenceParse:
    """
    Parse a raw reference string into (comparator, lower, upper).

    Order of attempts:
    1. leading comparator token is split off
    2. "<number> - <number>" range
    3. single standalone number, placed by comparator direction
    4. any number in the original string, placed the same way
    """
    if not raw or not raw.strip():
        return ReferenceParse()

    text = raw.strip()
    comparator = None
    remainder = text

    prefix = _COMPARATOR_PREFIX.match(text)
    if prefix:
        comparator = Comparator.from_token(prefix.group(1))
        remainder = text[prefix.end():].strip()

    range_match = _RANGE.search(remainder)
    if range_match:
        return ReferenceParse(
            comparator=comparator,
            lower=parse_decimal(range_match.group(1)),
            upper=parse_decimal(range_match.group(2)),
        )

    if comparator is None:
        comparator = _infer_comparator(remainder)

    lower = upper = None
    single = _STANDALONE_NUMBER.search(remainder)
    if single:
        value = parse_decimal(single.group(1))
        if value is not None:
            lower, upper = _assign_single_bound(value, comparator)

    if lower is None and upper is None:
        fallback = _ANY_NUMBER.search(raw)
        if fallback:
            value = parse_decimal(fallback.group(0))
            if value is not None:
                lower, upper = _assign_single_bound(value, comparator)

    return ReferenceParse(comparator=comparator, lower=lower, upper=upper)
