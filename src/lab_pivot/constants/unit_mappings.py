# ============================================================================
# src/lab_pivot/constants/unit_mappings.py
# ============================================================================
"""
Unit Spelling Table
- Maps lowercased/trimmed unit spellings to one preferred spelling per unit
- Backslash separators and long forms ("liter") are folded here too
"""

from types import MappingProxyType

UNIT_MAPPINGS = MappingProxyType({
    # Mass concentration
    "g/l": "g/L",
    "g\\l": "g/L",
    "g/liter": "g/L",
    "g/dl": "g/dL",
    "g\\dl": "g/dL",
    "g/deciliter": "g/dL",
    "mg/l": "mg/L",
    "mg\\l": "mg/L",
    "mg/dl": "mg/dL",
    "mg\\dl": "mg/dL",
    "mg/deciliter": "mg/dL",
    "ng/ml": "ng/mL",
    "ng\\ml": "ng/mL",
    "ng/l": "ng/L",
    "pg/ml": "pg/mL",
    "pg\\ml": "pg/mL",
    "ug/l": "µg/L",
    "ug/dl": "µg/dL",
    "ug/ml": "µg/mL",
    "mcg/l": "µg/L",
    "mcg/dl": "µg/dL",
    "mcg/ml": "µg/mL",

    # Substance concentration
    "mmol/l": "mmol/L",
    "mmol\\l": "mmol/L",
    "mmol/liter": "mmol/L",
    "umol/l": "µmol/L",
    "umol\\l": "µmol/L",
    "nmol/l": "nmol/L",
    "pmol/l": "pmol/L",
    "mol/l": "mol/L",

    # Enzyme activity
    "iu/l": "IU/L",
    "iu\\l": "IU/L",
    "u/l": "U/L",
    "u\\l": "U/L",
    "miu/l": "mIU/L",
    "miu/ml": "mIU/mL",
    "mu/l": "mU/L",
    "uiu/ml": "µIU/mL",

    # Cell counts
    "cells/ul": "cells/µL",
    "cells\\ul": "cells/µL",
    "k/ul": "10^3/µL",
    "k\\ul": "10^3/µL",
    "10^3/ul": "10^3/µL",
    "10e3/ul": "10^3/µL",
    "10^9/l": "10^9/L",
    "10e9/l": "10^9/L",
    "10^12/l": "10^12/L",
    "10e12/l": "10^12/L",

    # Volumes / misc
    "fl": "fL",
    "pg": "pg",
    "%": "%",
    "mm/h": "mm/h",
    "ml/min": "mL/min",
    "": "",
})
