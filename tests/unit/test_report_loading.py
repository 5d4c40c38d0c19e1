# ============================================================================
# FILE: tests/unit/test_report_loading.py
# ============================================================================
"""
Unit tests for loading raw model output into LabReport
"""

import json

import pytest

from lab_pivot.domain.report import LabReport, build_report_schema, load_report
from lab_pivot.utils.exceptions import ReportFormatError, ReportParseError


def test_load_from_dict(sample_report_dict):
    report = load_report(sample_report_dict)

    assert isinstance(report, LabReport)
    assert report.lab_name == "Labor Dr. Muster"
    assert len(report.values) == 2
    assert report.values[0].label == "01.02.24"
    assert report.values[0].measurements[0].parameter == "Glucose"


def test_load_from_json_text(sample_report_dict):
    report = load_report(json.dumps(sample_report_dict))

    assert report.patient == "Erika Mustermann"


def test_load_from_fenced_text(sample_report_dict):
    """Test markdown code fences around the JSON are stripped"""
    text = "```json\n" + json.dumps(sample_report_dict) + "\n```"

    report = load_report(text)

    assert len(report.values) == 2


def test_load_repairs_broken_json():
    """Test trailing commas and missing braces are repaired"""
    text = '{"LabName": "Lab", "Patient": "P", "Values": [{"Date": "2024-01-01", "Measurements": [{"Parameter": "Hb", "Result": "13",},]}]'

    report = load_report(text)

    assert report.values[0].measurements[0].result == "13"


def test_top_level_list_is_values():
    report = load_report([{"Date": "2024-01-01", "Measurements": []}])

    assert report.lab_name == ""
    assert report.values[0].date == "2024-01-01"


def test_numeric_result_coerced_to_text():
    report = load_report({"Values": [{"Date": "2024-01-01", "Measurements": [
        {"Parameter": "Hb", "Result": 13.2, "Unit": None}
    ]}]})

    measurement = report.values[0].measurements[0]
    assert measurement.result == "13.2"
    assert measurement.unit is None


def test_snake_case_field_names_accepted():
    report = load_report({"lab_name": "Lab", "values": [{"date": "2024-01-01", "measurements": []}]})

    assert report.lab_name == "Lab"


@pytest.mark.parametrize("payload", ["", "   ", "not json at all", "42"])
def test_unusable_payload_raises(payload):
    with pytest.raises(ReportFormatError):
        load_report(payload)


def test_schema_mismatch_raises_parse_error():
    with pytest.raises(ReportParseError):
        load_report({"Values": [{"Measurements": []}]})


def test_none_payload_rejected():
    with pytest.raises(ValueError):
        load_report(None)


def test_report_schema_shape():
    schema = build_report_schema()

    assert schema["required"] == ["LabName", "Patient", "Values"]
    column = schema["properties"]["Values"]["items"]
    assert column["properties"]["Date"]["pattern"] == r"^\d{4}-\d{2}-\d{2}$"
