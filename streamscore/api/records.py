"""Stream record store endpoints."""
import logging
from datetime import date
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File, status
from fastapi.responses import Response
from pydantic import BaseModel, ValidationError
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from streamscore.config import get_settings
from streamscore.database import get_session
from streamscore.api.auth import verify_api_key
from streamscore.api.score import ScoreResponse, build_score_response
from streamscore.api.settings import load_scoring_settings, save_period_settings
from streamscore.exceptions import MigrationError, RecordNotFoundError, RecordValidationError
from streamscore.models import StreamRecordRow
from streamscore.scoring import ScoringSettings, StreamRecord, TimePeriod
from streamscore.scoring.csv_io import export_csv, parse_csv
from streamscore.scoring.migrations import upgrade_record, upgrade_settings
from streamscore.scoring.validation import describe_errors, validate_record

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/records", tags=["records"])


class ImportResponse(BaseModel):
    """Result of a bulk import."""
    imported: int
    warnings: list[str]


class LegacyImportRequest(BaseModel):
    """A data dump from an older release, in any schema version."""
    streams: list[dict[str, Any]] = []
    settings: Optional[dict[str, Any]] = None


class LegacyImportResponse(ImportResponse):
    settings_migrated: bool


async def _get_row(db: AsyncSession, record_id: str) -> StreamRecordRow:
    row = await db.get(StreamRecordRow, record_id)
    if row is None:
        raise RecordNotFoundError(record_id)
    return row


@router.get("", response_model=list[StreamRecord])
async def list_records(
    name: Optional[str] = Query(None),
    period: Optional[TimePeriod] = Query(None),
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """List stored records, newest period end first."""
    query = select(StreamRecordRow)
    if name:
        query = query.where(StreamRecordRow.name == name)
    if period:
        query = query.where(StreamRecordRow.period == period.value)
    query = query.order_by(StreamRecordRow.date.desc(), StreamRecordRow.name)

    result = await db.execute(query)
    return [row.to_record() for row in result.scalars().all()]


@router.post("", response_model=StreamRecord, status_code=status.HTTP_201_CREATED)
async def create_record(
    record: StreamRecord,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Store a new record. A fresh id is assigned when none is given."""
    if await db.get(StreamRecordRow, record.id) is not None:
        raise HTTPException(status_code=409, detail=f"Record {record.id} already exists")

    db.add(StreamRecordRow.from_record(record))
    await db.commit()
    logger.info(f"Stored record {record.id} for {record.name}")
    return record


@router.delete("")
async def clear_records(
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Delete every stored record."""
    result = await db.execute(delete(StreamRecordRow))
    await db.commit()
    logger.info(f"Cleared {result.rowcount} records")
    return {"deleted": result.rowcount}


@router.get("/export.csv")
async def export_records(
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Download every stored record as CSV."""
    result = await db.execute(
        select(StreamRecordRow).order_by(StreamRecordRow.date, StreamRecordRow.name)
    )
    records = [row.to_record() for row in result.scalars().all()]

    filename = f"stream-data-{date.today().isoformat()}.csv"
    return Response(
        content=export_csv(records),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.post("/upload", response_model=ImportResponse)
async def upload_records_csv(
    file: UploadFile = File(...),
    period: Optional[TimePeriod] = Query(None, description="Period for rows without a Period column"),
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Import records from an uploaded CSV file. Malformed rows are skipped."""
    if not file.filename or not file.filename.lower().endswith(".csv"):
        raise HTTPException(status_code=400, detail="File must be a CSV")

    content = await file.read()
    try:
        csv_content = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(status_code=400, detail="CSV must be UTF-8 encoded")

    default_period = period or TimePeriod(get_settings().default_period)
    parsed = parse_csv(csv_content, default_period)

    for record in parsed.records:
        db.add(StreamRecordRow.from_record(record))

    await db.commit()
    logger.info(f"Imported {len(parsed.records)} records from {file.filename}")
    return ImportResponse(imported=len(parsed.records), warnings=parsed.warnings)


@router.post("/import-legacy", response_model=LegacyImportResponse)
async def import_legacy_data(
    request: LegacyImportRequest,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Import records and settings saved by an older release."""
    warnings = []
    imported = 0

    for index, payload in enumerate(request.streams):
        try:
            record = validate_record(upgrade_record(payload))
        except (MigrationError, RecordValidationError) as e:
            warnings.append(f"Skipping stream {index + 1}: {e}")
            continue

        row = await db.get(StreamRecordRow, record.id)
        if row is None:
            db.add(StreamRecordRow.from_record(record))
        else:
            row.update_from(record)
        imported += 1

    settings_migrated = False
    if request.settings is not None:
        try:
            scoring_settings = ScoringSettings.model_validate(upgrade_settings(request.settings))
        except ValidationError as e:
            raise MigrationError("Invalid legacy settings: " + "; ".join(describe_errors(e))) from e
        for period, cfg in scoring_settings.periods.items():
            await save_period_settings(db, period, cfg)
        settings_migrated = True

    await db.commit()
    logger.info(f"Legacy import: {imported} records, settings migrated: {settings_migrated}")
    return LegacyImportResponse(
        imported=imported,
        warnings=warnings,
        settings_migrated=settings_migrated,
    )


@router.get("/{record_id}", response_model=StreamRecord)
async def get_record(
    record_id: str,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Get a single stored record."""
    row = await _get_row(db, record_id)
    return row.to_record()


@router.put("/{record_id}", response_model=StreamRecord)
async def update_record(
    record_id: str,
    record: StreamRecord,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Replace a stored record. The path id wins over any id in the body."""
    row = await _get_row(db, record_id)
    record = record.model_copy(update={"id": record_id})
    row.update_from(record)
    await db.commit()
    return record


@router.delete("/{record_id}")
async def delete_record(
    record_id: str,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Delete a stored record."""
    row = await _get_row(db, record_id)
    await db.delete(row)
    await db.commit()
    return {"deleted": record_id}


@router.get("/{record_id}/score", response_model=ScoreResponse)
async def score_stored_record(
    record_id: str,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Score a stored record against the stored settings for its period."""
    row = await _get_row(db, record_id)
    record = row.to_record()
    stored = await load_scoring_settings(db)
    return build_score_response(record, stored.for_period(record.period))
