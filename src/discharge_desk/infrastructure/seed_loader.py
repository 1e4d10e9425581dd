"""Seed file loader.

Turns a JSON fixture of patients (with nested admission history) into the
set operations that create them, so a fresh store can be populated in one
atomic write.

Expected shape::

    {
      "patients": [
        {
          "id": "p1",
          "name": "Ada",
          "surname": "Obi",
          "hospitalNumber": "H-001",
          "status": "PendingDischarge",
          "financials": {"totalBill": 100.0, "amountPaid": 100.0},
          "dischargeRequesterId": "u1",
          "admissionHistory": [
            {"id": "a1", "admissionDate": "2024-05-01T08:00:00Z"}
          ]
        }
      ]
    }
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from discharge_desk.domain.models import ADMISSION_HISTORY_COLLECTION, PATIENTS_COLLECTION, Financials
from discharge_desk.domain.ports import ValidationError, WriteOperation, document_path

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("admissionDate", "dischargeDate", "createdAt")


def parse_timestamp(value: Any) -> Any:
    """Parse ISO-8601 strings into UTC datetimes; other values pass through."""
    if not isinstance(value, str):
        return value
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _with_timestamps(data: dict) -> dict:
    return {k: (parse_timestamp(v) if k in TIMESTAMP_FIELDS else v) for k, v in data.items()}


def build_seed_operations(seed: dict) -> list[WriteOperation]:
    """Build set operations for every patient and admission record in ``seed``.

    Raises:
        ValidationError: If the seed is structurally invalid
    """
    patients = seed.get("patients")
    if not isinstance(patients, list):
        raise ValidationError("Seed must contain a 'patients' list")

    operations = []
    for index, entry in enumerate(patients):
        entry = dict(entry)
        patient_id = entry.pop("id", None)
        if not patient_id:
            raise ValidationError(f"Patient #{index} has no id", details={"index": index})
        history = entry.pop(ADMISSION_HISTORY_COLLECTION, [])

        if "financials" not in entry:
            raise ValidationError(f"Patient {patient_id} has no financials", details={"patient_id": patient_id})
        try:
            entry["financials"] = Financials.model_validate(entry["financials"]).to_document()
        except PydanticValidationError as e:
            raise ValidationError(
                f"Patient {patient_id} has invalid financials",
                details={"patient_id": patient_id, "errors": e.error_count()},
            )
        operations.append(WriteOperation.set(document_path(PATIENTS_COLLECTION, patient_id), entry))

        for record_index, record in enumerate(history):
            record = dict(record)
            record_id = record.pop("id", None) or f"{patient_id}-adm-{record_index + 1}"
            try:
                record = _with_timestamps(record)
            except ValueError as e:
                raise ValidationError(
                    f"Admission record {record_id} has an invalid timestamp: {str(e)}",
                    details={"patient_id": patient_id},
                )
            operations.append(WriteOperation.set(
                document_path(PATIENTS_COLLECTION, patient_id, ADMISSION_HISTORY_COLLECTION, record_id),
                record,
            ))

    logger.info(f"Built {len(operations)} seed operation(s) for {len(patients)} patient(s)")
    return operations


def load_seed_file(path: Path) -> list[WriteOperation]:
    """Read a JSON seed file and build its operations."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            seed = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"Invalid JSON in seed file: {str(e)}")
    if not isinstance(seed, dict):
        raise ValidationError("Seed file must contain a JSON object")
    return build_seed_operations(seed)
