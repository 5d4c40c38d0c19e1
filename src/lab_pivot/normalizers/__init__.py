# src/lab_pivot/normalizers/__init__.py

from .parameter_normalizer import ParameterNormalizer, default_parameter_normalizer
from .unit_normalizer import UnitNormalizer, default_unit_normalizer

__all__ = [
    "ParameterNormalizer",
    "default_parameter_normalizer",
    "UnitNormalizer",
    "default_unit_normalizer",
]
