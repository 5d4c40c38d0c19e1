# ============================================================================
# src/lab_pivot/domain/report.py
# ============================================================================
"""
Raw lab report shape produced by the document-analysis model.

The model answers with JSON shaped like:

    {
      "LabName": "...",
      "Patient": "...",
      "Values": [
        {"Date": "2024-01-02", "Label": "02.01.24",
         "Measurements": [{"Parameter": "Hb", "Result": "13,2",
                           "Unit": "g/dl", "Reference": "12-16"}]}
      ]
    }

Model output is not always valid JSON (trailing commas, code fences,
truncated braces), so `load_report` falls back to json_repair before
validating the payload against the pydantic models below.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Union

from json_repair import repair_json
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..utils.exceptions import ReportFormatError

logger = logging.getLogger(__name__)

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


class Measurement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    parameter: str = Field(alias="Parameter")
    result: str = Field(default="", alias="Result")
    unit: Optional[str] = Field(default=None, alias="Unit")
    reference: Optional[str] = Field(default=None, alias="Reference")

    @field_validator("result", mode="before")
    @classmethod
    def _coerce_result(cls, v):
        # Models sometimes emit bare numbers for Result
        if v is None:
            return ""
        return str(v)

    @field_validator("unit", "reference", mode="before")
    @classmethod
    def _coerce_optional(cls, v):
        if v is None:
            return None
        return str(v)


class ValueColumn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    # Kept as text: date validation is the transformer's job
    date: str = Field(alias="Date")
    label: Optional[str] = Field(default=None, alias="Label")
    source_column: Optional[str] = Field(default=None, alias="SourceColumn")
    measurements: List[Measurement] = Field(default_factory=list, alias="Measurements")


class LabReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lab_name: str = Field(default="", alias="LabName")
    patient: str = Field(default="", alias="Patient")
    values: List[ValueColumn] = Field(default_factory=list, alias="Values")


def build_report_schema() -> Dict[str, Any]:
    """JSON schema handed to the model as the structured-output contract."""
    return {
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "LabName": {"type": "string"},
            "Patient": {"type": "string"},
            "Values": {
                "type": "array",
                "description": "One entry per data column (e.g. per collection date).",
                "items": {
                    "type": "object",
                    "additionalProperties": False,
                    "properties": {
                        "Date": {
                            "type": "string",
                            "description": "ISO 8601 date for this column",
                            "pattern": DATE_PATTERN,
                        },
                        "Label": {
                            "type": "string",
                            "description": "Original column header as printed (e.g. '30.10.15')",
                        },
                        "SourceColumn": {
                            "type": "string",
                            "description": "Original column name if different from Label",
                        },
                        "Measurements": {
                            "type": "array",
                            "items": {
                                "type": "object",
                                "additionalProperties": False,
                                "properties": {
                                    "Parameter": {"type": "string"},
                                    "Result": {"type": "string"},
                                    "Unit": {"type": "string"},
                                    "Reference": {"type": "string"},
                                },
                                "required": ["Parameter", "Result"],
                            },
                        },
                    },
                    "required": ["Date", "Measurements"],
                },
            },
        },
        "required": ["LabName", "Patient", "Values"],
    }


def _strip_code_fences(text: str) -> str:
    text = text.strip()
    fenced = re.match(r"^```(?:json)?\s*([\s\S]*?)\s*```$", text)
    if fenced:
        return fenced.group(1)
    return text


def _parse_json_payload(text: str) -> Any:
    """
    Extract JSON from model response with repair fallback.
    """
    text = _strip_code_fences(text)
    if not text:
        raise ReportFormatError("Empty lab report payload")

    # Try 1: Direct parse
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Try 2: Use json_repair
    repaired = repair_json(text, return_objects=True)
    if isinstance(repaired, (dict, list)) and repaired:
        logger.info("Lab report payload required JSON repair")
        return repaired

    raise ReportFormatError("Lab report payload is not valid JSON")


def load_report(payload: Union[str, bytes, Dict[str, Any], LabReport]) -> LabReport:
    """
    Build a LabReport from model output.

    Accepts raw text (optionally wrapped in markdown code fences), bytes,
    an already decoded dict, or a LabReport. A top-level list is treated
    as the Values array of a report without lab name or patient.
    """
    if payload is None:
        raise ValueError("payload must not be None")
    if isinstance(payload, LabReport):
        return payload
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8")

    data = _parse_json_payload(payload) if isinstance(payload, str) else payload

    if isinstance(data, list):
        data = {"Values": data}
    if not isinstance(data, dict):
        raise ReportFormatError(f"Lab report payload must be an object, got {type(data).__name__}")

    try:
        return LabReport.model_validate(data)
    except ValidationError as e:
        raise ReportFormatError(f"Lab report payload does not match schema: {e}") from e
