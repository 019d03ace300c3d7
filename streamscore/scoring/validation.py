"""Boundary validation for raw record payloads."""
from typing import Any

from pydantic import ValidationError

from streamscore.exceptions import RecordValidationError
from streamscore.scoring.types import StreamRecord


def describe_errors(exc: ValidationError) -> list[str]:
    """Flatten pydantic errors into "field: message" strings."""
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "record"
        messages.append(f"{field}: {error['msg']}")
    return messages


def validate_record(payload: dict[str, Any]) -> StreamRecord:
    """Build a StreamRecord or raise RecordValidationError listing every problem."""
    try:
        return StreamRecord.model_validate(payload)
    except ValidationError as e:
        raise RecordValidationError(describe_errors(e)) from e
