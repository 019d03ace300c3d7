"""Legitimacy scoring endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from streamscore.database import get_session
from streamscore.api.auth import verify_api_key
from streamscore.api.settings import load_scoring_settings
from streamscore.scoring import (
    CalculationResult,
    PeriodSettings,
    RedFlag,
    StreamRecord,
    calculate_cached,
    classify,
    score_records,
)

router = APIRouter(prefix="/score", tags=["score"])


class ScoreRequest(BaseModel):
    """Score one record, optionally against ad-hoc period settings."""
    record: StreamRecord
    settings: Optional[PeriodSettings] = None


class BatchScoreRequest(BaseModel):
    """Score several records against the stored settings."""
    records: list[StreamRecord] = Field(min_length=1)


class ScoreResponse(BaseModel):
    """Calculation result plus display-only red flags."""
    result: CalculationResult
    red_flags: list[RedFlag]


class BatchScoreResponse(BaseModel):
    results: list[ScoreResponse]


def build_score_response(record: StreamRecord, cfg: PeriodSettings) -> ScoreResponse:
    result = calculate_cached(record, cfg)
    return ScoreResponse(result=result, red_flags=classify(result, record))


@router.post("", response_model=ScoreResponse)
async def score_record(
    request: ScoreRequest,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Score a single period record."""
    cfg = request.settings
    if cfg is None:
        stored = await load_scoring_settings(db)
        cfg = stored.for_period(request.record.period)
    return build_score_response(request.record, cfg)


@router.post("/batch", response_model=BatchScoreResponse)
async def score_batch(
    request: BatchScoreRequest,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Score each record independently; results keep the input order."""
    stored = await load_scoring_settings(db)
    results = score_records(request.records, stored)
    return BatchScoreResponse(results=[
        ScoreResponse(result=result, red_flags=classify(result, record))
        for record, result in zip(request.records, results)
    ])
