# ============================================================================
# FILE: tests/unit/test_sqlite_store.py
# ============================================================================
"""
Unit tests for the SQLite lab store
"""

from datetime import date
from decimal import Decimal

import pytest

from lab_pivot.domain.enums import Comparator
from lab_pivot.domain.lab_result import LabResult, LabResultPoint
from lab_pivot.domain.pivot import PivotRow, PivotTable
from lab_pivot.storage.sqlite_store import SqliteLabStore
from lab_pivot.utils.exceptions import ConcurrencyError, StorageError


def make_result(document_id="doc-1", day=date(2024, 1, 1)):
    return LabResult(
        document_id=document_id,
        date=day,
        patient="P",
        lab_name="Lab",
        points=[LabResultPoint(
            parameter="CRP",
            result_raw="<0.6",
            result_numeric=Decimal("0.6"),
            result_comparator=Comparator.LT,
            unit="mg/l",
            reference="< 5",
            reference_comparator=Comparator.LT,
            reference_to=Decimal("5"),
            normalized_result=Decimal("0.6"),
            normalized_unit="mg/L",
            normalized_reference_to=Decimal("5"),
        )],
    )


def make_pivot(owner_id="user-1"):
    row = PivotRow(parameter="crp", unit="mg/L")
    row.pad_to(1)
    row.values[0] = Decimal("0.60")
    return PivotTable(owner_id=owner_id, columns=[date(2024, 1, 1)], rows=[row])


def test_database_created(tmp_path):
    db_path = tmp_path / "nested" / "lab.db"

    SqliteLabStore(db_path=db_path)

    assert db_path.exists()


def test_ownership_registry(store):
    store.register_document("doc-1", "user-1")
    store.register_document("doc-2", "user-1")
    store.register_document("doc-3", "user-1", deleted=True)

    with store.session(readonly=True) as session:
        assert session.owner_of("doc-1") == "user-1"
        assert session.owner_of("doc-3") is None
        assert session.owner_of("missing") is None
        assert session.document_ids_for_owner("user-1") == ["doc-1", "doc-2"]


def test_register_document_reassigns_owner(store):
    store.register_document("doc-1", "user-1")
    store.register_document("doc-1", "user-2")

    with store.session(readonly=True) as session:
        assert session.owner_of("doc-1") == "user-2"


def test_lab_result_round_trip(store):
    """Test decimals, comparators and dates survive storage"""
    result = make_result()

    with store.session() as session:
        session.store_lab_result(result)
        session.save_changes()

    with store.session(readonly=True) as session:
        loaded = session.load_lab_result(result.id)

    assert loaded == result
    assert loaded.points[0].result_comparator is Comparator.LT
    assert str(loaded.points[0].normalized_reference_to) == "5"


def test_results_for_many_documents(store):
    with store.session() as session:
        for i in range(3):
            session.store_lab_result(make_result(document_id=f"doc-{i}", day=date(2024, 1, i + 1)))
        session.save_changes()

    with store.session(readonly=True) as session:
        results = session.lab_results_for_documents(["doc-0", "doc-2", "doc-9"])
        assert session.lab_results_for_documents([]) == []

    assert [r.document_id for r in results] == ["doc-0", "doc-2"]


def test_uncommitted_session_rolls_back(store):
    result = make_result()

    with store.session() as session:
        session.store_lab_result(result)
        session.store_pivot(make_pivot())

    with store.session(readonly=True) as session:
        assert session.load_lab_result(result.id) is None
        assert session.load_pivot("user-1") is None


def test_exception_in_session_rolls_back(store):
    result = make_result()

    with pytest.raises(RuntimeError):
        with store.session() as session:
            session.store_lab_result(result)
            raise RuntimeError("boom")

    with store.session(readonly=True) as session:
        assert session.load_lab_result(result.id) is None


def test_pivot_round_trip_and_versioning(store):
    pivot = make_pivot()

    with store.session() as session:
        session.store_pivot(pivot)
        session.save_changes()
    assert pivot.version == 1

    with store.session(readonly=True) as session:
        loaded = session.load_pivot("user-1")

    assert loaded.id == pivot.id
    assert loaded.version == 1
    assert loaded.content_dict() == pivot.content_dict()
    assert loaded.rows[0].values == [Decimal("0.60")]


def test_stale_pivot_write_raises_concurrency_error(store):
    """Test a table loaded before another writer's commit cannot overwrite it"""
    with store.session() as session:
        session.store_pivot(make_pivot())
        session.save_changes()

    with store.session(readonly=True) as session:
        stale = session.load_pivot("user-1")

    with store.session() as session:
        fresh = session.load_pivot("user-1")
        fresh.rows[0].values[0] = Decimal("1.0")
        session.store_pivot(fresh)
        session.save_changes()

    with store.session() as session:
        with pytest.raises(ConcurrencyError) as exc_info:
            session.store_pivot(stale)

    assert exc_info.value.owner_id == "user-1"
    assert exc_info.value.expected_version == 1


def test_second_new_pivot_for_owner_conflicts(store):
    with store.session() as session:
        session.store_pivot(make_pivot())
        session.save_changes()

    with store.session() as session:
        with pytest.raises(ConcurrencyError):
            session.store_pivot(make_pivot())


def test_delete_pivot(store):
    with store.session() as session:
        session.store_pivot(make_pivot())
        session.save_changes()

    with store.session() as session:
        assert session.delete_pivot("user-1") is True
        assert session.delete_pivot("user-1") is False
        session.save_changes()

    with store.session(readonly=True) as session:
        assert session.load_pivot("user-1") is None


def test_delete_lab_result(store):
    result = make_result()
    with store.session() as session:
        session.store_lab_result(result)
        session.save_changes()

    with store.session() as session:
        assert session.delete_lab_result(result.id) is True
        assert session.delete_lab_result(result.id) is False
        session.save_changes()


def test_readonly_session_rejects_writes(store):
    with store.session(readonly=True) as session:
        with pytest.raises(StorageError):
            session.store_lab_result(make_result())


def test_closed_session_rejects_writes(store):
    session = store.session()
    session.close()

    with pytest.raises(StorageError):
        session.save_changes()


def test_sqlite_errors_are_wrapped(store):
    with store.session() as session:
        session._conn.execute("DROP TABLE lab_results")
        with pytest.raises(StorageError):
            session.load_lab_result("x")


def test_save_changes_allows_further_work(store):
    """Test a session stays usable after a commit"""
    first, second = make_result(), make_result(day=date(2024, 2, 1))

    with store.session() as session:
        session.store_lab_result(first)
        session.save_changes()
        session.store_lab_result(second)

    with store.session(readonly=True) as session:
        assert session.load_lab_result(first.id) is not None
        assert session.load_lab_result(second.id) is None
