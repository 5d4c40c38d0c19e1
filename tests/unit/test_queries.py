# ============================================================================
# FILE: tests/unit/test_queries.py
# ============================================================================
"""
Unit tests for the read-only pivot and lab result queries
"""

import json
from datetime import date
from decimal import Decimal

import pytest

from lab_pivot.processors.lab_results_processor import LabResultsProcessor
from lab_pivot.services.queries import (
    PivotRowView,
    convert_row,
    get_lab_result,
    get_lab_results_by_document,
    get_pivot_by_document,
    get_pivot_by_owner,
)


@pytest.fixture
def populated_store(owned_store, sample_report_dict, glucose_report_factory):
    """user-1 has doc-1 (two dates) and doc-2 (one date)"""
    processor = LabResultsProcessor(owned_store)
    processor.process_raw("doc-1", sample_report_dict)
    processor.process_raw("doc-2", glucose_report_factory("2024-03-01", result="4.8"))
    return owned_store


def test_pivot_by_owner(populated_store):
    with populated_store.session(readonly=True) as session:
        view = get_pivot_by_owner(session, "user-1")

    assert view.owner_id == "user-1"
    assert view.columns == [date(2024, 3, 1), date(2024, 2, 1), date(2024, 1, 1)]
    glucose = next(r for r in view.rows if r.parameter == "glucose")
    assert glucose.values == [Decimal("4.8"), Decimal("5.4"), Decimal("6.1")]


def test_pivot_by_owner_absent(store):
    with store.session(readonly=True) as session:
        assert get_pivot_by_owner(session, "user-1") is None


def test_pivot_by_document_restricts_columns(populated_store):
    """Test only the document's dates and rows with data there are returned"""
    with populated_store.session(readonly=True) as session:
        view = get_pivot_by_document(session, "doc-2")

    assert view.columns == [date(2024, 3, 1)]
    assert [r.parameter for r in view.rows] == ["glucose"]
    row = view.rows[0]
    for cells in (row.values, row.qualitative, row.reference_from, row.reference_to,
                  row.reference_comparator, row.units):
        assert len(cells) == 1
    assert row.values == [Decimal("4.8")]


def test_pivot_by_document_keeps_qualitative_rows(populated_store):
    with populated_store.session(readonly=True) as session:
        view = get_pivot_by_document(session, "doc-1")

    assert view.columns == [date(2024, 2, 1), date(2024, 1, 1)]
    parameters = {r.parameter for r in view.rows}
    assert parameters == {"glucose", "hamoglobin", "crp", "urine color", "ferritin"}
    color = next(r for r in view.rows if r.parameter == "urine color")
    assert color.qualitative == ["yellow", None]


def test_pivot_by_document_without_results(populated_store):
    populated_store.register_document("doc-empty", "user-1")

    with populated_store.session(readonly=True) as session:
        view = get_pivot_by_document(session, "doc-empty")

    assert view is not None
    assert view.columns == []
    assert view.rows == []


def test_pivot_by_document_unknown_document(populated_store):
    with populated_store.session(readonly=True) as session:
        assert get_pivot_by_document(session, "missing") is None


def test_pivot_by_document_owner_without_pivot(owned_store):
    with owned_store.session(readonly=True) as session:
        assert get_pivot_by_document(session, "doc-3") is None


def test_views_do_not_mutate_stored_table(populated_store):
    with populated_store.session(readonly=True) as session:
        before = session.load_pivot("user-1").content_dict()
        get_pivot_by_document(session, "doc-2")
        after = session.load_pivot("user-1").content_dict()

    assert before == after


def test_view_is_json_serialisable(populated_store):
    with populated_store.session(readonly=True) as session:
        view = get_pivot_by_owner(session, "user-1")

    data = json.loads(view.model_dump_json())
    assert data["columns"][0] == "2024-03-01"


def test_lab_results_by_document(populated_store):
    with populated_store.session(readonly=True) as session:
        results = get_lab_results_by_document(session, "doc-1")
        single = get_lab_result(session, results[0].id)
        missing = get_lab_result(session, "nope")

    assert sorted(r.date for r in results) == [date(2024, 1, 1), date(2024, 2, 1)]
    assert single.id == results[0].id
    assert single.points == results[0].points
    assert missing is None


def test_convert_row_per_column():
    """Test convertible cells change unit, others keep their original unit"""
    row = PivotRowView(
        parameter="glucose",
        unit="mg/dL",
        values=[Decimal("90"), Decimal("7")],
        qualitative=[None, None],
        reference_from=[Decimal("72"), None],
        reference_to=[Decimal("99"), None],
        reference_comparator=[None, None],
        units=["mg/dL", "U/L"],
    )

    converted = convert_row(row, "mmol/L")

    assert converted.values == [Decimal("5"), Decimal("7")]
    assert converted.reference_from == [Decimal("4"), None]
    assert converted.reference_to == [Decimal("5.5"), None]
    assert converted.units == ["mmol/L", "U/L"]
    assert converted.unit == "mg/dL"
    assert row.values == [Decimal("90"), Decimal("7")]


def test_convert_row_all_columns_sets_row_unit():
    row = PivotRowView(
        parameter="hamoglobin",
        unit="g/dL",
        values=[Decimal("13.2"), None],
        qualitative=[None, None],
        reference_from=[Decimal("12"), None],
        reference_to=[Decimal("16"), None],
        reference_comparator=[None, None],
        units=["g/dL", None],
    )

    converted = convert_row(row, "g/L")

    assert converted.values == [Decimal("132"), None]
    assert converted.reference_from == [Decimal("120"), None]
    assert converted.units == ["g/L", "g/L"]
    assert converted.unit == "g/L"
