from __future__ import annotations

import json
import pathlib

import jsonschema
import pytest

from ircrm.logging.error_log import ErrorLogBuffer
from ircrm.models.error_record import ErrorRecord

"""Error log JSON schema contract test."""

SCHEMA_PATH = pathlib.Path(__file__).resolve().parents[2] / "contracts" / "error_log_schema.json"


@pytest.fixture(scope="module")
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_error_log_schema_valid_example(schema):
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "operation": "import",
        "source": "contacts.xlsx",
        "unit": "batch 2",
        "error_type": "BATCH_INSERT_ERROR",
        "message": "new row for relation \"contacts\" violates check constraint",
    }
    jsonschema.validate(record, schema)


def test_error_log_schema_rejects_extra_key(schema):
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "operation": "export",
        "source": "Jane Doe",
        "unit": "c1/a1-deck.pdf",
        "error_type": "ATTACHMENT_DOWNLOAD_ERROR",
        "message": "object not found",
        "extra": "not allowed",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, schema)


def test_error_log_schema_rejects_lowercase_error_type(schema):
    record = {
        "timestamp": "2025-09-26T10:12:33Z",
        "operation": "import",
        "source": "contacts.xlsx",
        "unit": "batch 1",
        "error_type": "batch_insert_error",
        "message": "x",
    }
    with pytest.raises(jsonschema.exceptions.ValidationError):
        jsonschema.validate(record, schema)


def test_flushed_records_match_schema(schema, temp_workdir):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("import", "contacts.xlsx", "batch 2", "BATCH_INSERT_ERROR", "dup"))
    buf.append(ErrorRecord.create("export", "Jane Doe", "c1/a1-deck.pdf", "ATTACHMENT_DOWNLOAD_ERROR", "gone"))
    path = buf.flush()
    for line in path.read_text(encoding="utf-8").splitlines():
        jsonschema.validate(json.loads(line), schema)
