"""CSV import and export of stream records."""
import csv
import logging
from io import StringIO
from typing import Iterable, Optional

from pydantic import BaseModel

from streamscore.exceptions import CsvFormatError, RecordValidationError
from streamscore.scoring.types import StreamRecord, TimePeriod
from streamscore.scoring.validation import validate_record

logger = logging.getLogger(__name__)

EXPORT_HEADERS = [
    "Name",
    "Date",
    "NumberOfStreams",
    "Hours",
    "AvgViewers",
    "Messages",
    "UniqueChatters",
    "Followers",
    "Period",
    "FollowerCount",
]

REQUIRED_COLUMNS = [
    "name",
    "date",
    "numberofstreams",
    "hours",
    "avgviewers",
    "messages",
    "uniquechatters",
    "followers",
]

# Alternate spellings accepted in uploaded headers
COLUMN_ALIASES = {
    "streams": "numberofstreams",
}


class CsvImportResult(BaseModel):
    """Records read from an upload plus a warning per skipped row."""
    records: list[StreamRecord]
    warnings: list[str]


def _column_key(header: str) -> str:
    key = header.strip().lower().replace(" ", "")
    return COLUMN_ALIASES.get(key, key)


def _parse_int(value: str) -> int:
    try:
        return int(value)
    except ValueError:
        number = float(value)
        if not number.is_integer():
            raise
        return int(number)


def _optional_int(value: str) -> Optional[int]:
    return _parse_int(value) if value else None


def _row_to_payload(values: dict[str, str], default_period: TimePeriod) -> dict:
    """Convert raw cells into a record payload. Raises ValueError on bad numbers."""
    messages = _optional_int(values["messages"])
    unique_chatters = _optional_int(values["uniquechatters"])
    follower_count = _optional_int(values.get("followercount", ""))

    return {
        "name": values["name"],
        "date": values["date"],
        "period": values.get("period") or default_period,
        "number_of_streams": _parse_int(values["numberofstreams"]),
        "hours": float(values["hours"]),
        "avg_viewers": float(values["avgviewers"]),
        "messages": messages or 0,
        "include_messages": messages is not None,
        "unique_chatters": unique_chatters or 0,
        "include_unique_chatters": unique_chatters is not None,
        "followers": _parse_int(values["followers"]),
        "follower_count": follower_count or 0,
    }


def parse_csv(
    csv_content: str,
    default_period: TimePeriod = TimePeriod.SIXTY_DAYS,
) -> CsvImportResult:
    """Parse uploaded CSV text into stream records.

    Header names are matched case-insensitively with spaces ignored. Rows
    with the wrong number of cells, unreadable numbers or values that fail
    record validation are skipped and reported in ``warnings``. Each parsed
    record gets a fresh id.
    """
    content = csv_content.strip()
    if len([line for line in content.splitlines() if line.strip()]) < 2:
        raise CsvFormatError("CSV must have at least a header row and one data row")

    reader = csv.reader(StringIO(content))
    headers = [_column_key(h) for h in next(reader)]

    missing = [col for col in REQUIRED_COLUMNS if col not in headers]
    if missing:
        raise CsvFormatError(f"Missing required columns: {', '.join(missing)}")

    records = []
    warnings = []

    def skip(line_number: int, reason: str):
        message = f"Skipping line {line_number}: {reason}"
        logger.warning(message)
        warnings.append(message)

    for row in reader:
        line_number = reader.line_num
        if not any(cell.strip() for cell in row):
            continue

        if len(row) != len(headers):
            skip(line_number, "column count mismatch")
            continue

        values = {key: cell.strip() for key, cell in zip(headers, row)}

        try:
            payload = _row_to_payload(values, default_period)
        except ValueError:
            skip(line_number, "invalid numeric values")
            continue

        try:
            records.append(validate_record(payload))
        except RecordValidationError as e:
            skip(line_number, "; ".join(e.errors))

    logger.info(f"Parsed {len(records)} records from CSV ({len(warnings)} rows skipped)")
    return CsvImportResult(records=records, warnings=warnings)


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def export_csv(records: Iterable[StreamRecord]) -> str:
    """Serialise records, header first, one row per record."""
    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADERS)

    for record in records:
        writer.writerow([
            record.name,
            record.date.isoformat(),
            record.number_of_streams,
            _format_number(record.hours),
            _format_number(record.avg_viewers),
            record.messages if record.include_messages else "",
            record.unique_chatters if record.include_unique_chatters else "",
            record.followers,
            record.period.value,
            record.follower_count,
        ])

    return buffer.getvalue()
