# ============================================================================
# src/lab_pivot/normalizers/parameter_normalizer.py
# ============================================================================
"""
Parameter name normalization

Produces the matching key used to merge readings recorded under slightly
different labels into one pivot row:

    "Hämoglobin (Hb)"  -> "hamoglobin"
    "  GLUCOSE   fasting" -> "glucose fasting"
    "Vitamin B12 (µg)" -> "vitamin b12"
"""

import re
import unicodedata

_MULTI_WHITESPACE = re.compile(r"\s+")
_PARENTHESES = re.compile(r"\([^)]*\)")

# micro sign, greek mu, and the '?' left behind by broken encodings
_MICRO_VARIANTS = str.maketrans({"µ": "u", "μ": "u", "?": "u"})


class ParameterNormalizer:
    """Deterministic, stateless cleanup of parameter names."""

    def normalize(self, parameter: str) -> str:
        if not parameter or not parameter.strip():
            return ""

        work = parameter.lower().strip()
        work = _PARENTHESES.sub(" ", work)

        # remove diacritics
        decomposed = unicodedata.normalize("NFD", work)
        work = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
        work = unicodedata.normalize("NFC", work)

        work = work.translate(_MICRO_VARIANTS)

        return _MULTI_WHITESPACE.sub(" ", work).strip()


default_parameter_normalizer = ParameterNormalizer()
