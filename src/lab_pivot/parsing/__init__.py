# src/lab_pivot/parsing/__init__.py

from .value_parser import (
    ResultParse,
    ReferenceParse,
    parse_decimal,
    parse_result,
    parse_reference,
)

__all__ = [
    "ResultParse",
    "ReferenceParse",
    "parse_decimal",
    "parse_result",
    "parse_reference",
]
