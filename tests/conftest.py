# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import pytest

from lab_pivot.storage.sqlite_store import SqliteLabStore


@pytest.fixture
def store(tmp_path):
    """Fresh SQLite lab store in a temporary directory"""
    return SqliteLabStore(db_path=tmp_path / "lab_pivot.db", timeout=5.0)


@pytest.fixture
def owned_store(store):
    """Store with doc-1 and doc-2 owned by user-1, doc-3 owned by user-2"""
    store.register_document("doc-1", "user-1")
    store.register_document("doc-2", "user-1")
    store.register_document("doc-3", "user-2")
    return store


@pytest.fixture
def sample_report_dict():
    """Two-column lab report as returned by the extraction model"""
    return {
        "LabName": "Labor Dr. Muster",
        "Patient": "Erika Mustermann",
        "Values": [
            {
                "Date": "2024-02-01",
                "Label": "01.02.24",
                "Measurements": [
                    {"Parameter": "Glucose", "Result": "5,4", "Unit": "mmol/l", "Reference": "3.9-5.6"},
                    {"Parameter": "Hämoglobin (Hb)", "Result": "13,2", "Unit": "g/dl", "Reference": "12-16"},
                    {"Parameter": "CRP", "Result": "<0.6", "Unit": "mg/l", "Reference": "< 5"},
                    {"Parameter": "Urine color", "Result": "yellow"},
                ],
            },
            {
                "Date": "2024-01-01",
                "Label": "01.01.24",
                "Measurements": [
                    {"Parameter": "Glucose", "Result": "6.1", "Unit": "mmol/L", "Reference": "3.9-5.6"},
                    {"Parameter": "Ferritin", "Result": "45", "Unit": "ng/ml", "Reference": ">= 30"},
                ],
            },
        ],
    }


@pytest.fixture
def glucose_report_factory():
    """Build a one-column report with a single glucose measurement"""
    def build(report_date, result="5.0", unit="mmol/L", reference="3.9-5.6"):
        return {
            "LabName": "Lab",
            "Patient": "Patient",
            "Values": [
                {
                    "Date": report_date,
                    "Measurements": [
                        {"Parameter": "Glucose", "Result": result, "Unit": unit, "Reference": reference},
                    ],
                }
            ],
        }
    return build
