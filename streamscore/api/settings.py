"""Per-period scoring settings endpoints."""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from streamscore.database import get_session
from streamscore.api.auth import verify_api_key
from streamscore.models import PeriodSettingsRow
from streamscore.scoring import (
    DEFAULT_PERIOD_SETTINGS,
    PERIOD_DAYS,
    PERIOD_LABELS,
    PeriodSettings,
    ScoringSettings,
    TimePeriod,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


class PeriodInfo(BaseModel):
    """A reporting period as offered to clients."""
    period: TimePeriod
    days: int
    label: str


async def load_scoring_settings(db: AsyncSession) -> ScoringSettings:
    """Read every stored bucket. Missing buckets fall back to defaults when used."""
    result = await db.execute(select(PeriodSettingsRow))
    periods = {TimePeriod(row.period): row.to_settings() for row in result.scalars().all()}
    return ScoringSettings(periods=periods)


async def save_period_settings(db: AsyncSession, period: TimePeriod, cfg: PeriodSettings):
    """Insert or replace the stored bucket for a period."""
    row = await db.get(PeriodSettingsRow, period.value)
    if row is None:
        row = PeriodSettingsRow(period=period.value)
        db.add(row)
    row.apply(cfg)
    await db.flush()


async def seed_default_settings(db: AsyncSession) -> int:
    """Store the shipped bucket for every period that has none yet."""
    stored = await load_scoring_settings(db)
    seeded = 0
    for period, cfg in DEFAULT_PERIOD_SETTINGS.items():
        if period not in stored.periods:
            await save_period_settings(db, period, cfg)
            seeded += 1
    await db.commit()
    if seeded:
        logger.info(f"Seeded default settings for {seeded} periods")
    return seeded


@router.get("", response_model=ScoringSettings)
async def get_all_settings(
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Get settings for every period."""
    stored = await load_scoring_settings(db)
    return ScoringSettings(periods={period: stored.for_period(period) for period in TimePeriod})


@router.get("/periods", response_model=list[PeriodInfo])
async def list_periods(_: str = Depends(verify_api_key)):
    """Supported periods with their length and display label."""
    return [
        PeriodInfo(period=period, days=PERIOD_DAYS[period], label=PERIOD_LABELS[period])
        for period in TimePeriod
    ]


@router.get("/{period}", response_model=PeriodSettings)
async def get_period_settings(
    period: TimePeriod,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Get settings for one period."""
    stored = await load_scoring_settings(db)
    return stored.for_period(period)


@router.put("/{period}", response_model=PeriodSettings)
async def update_period_settings(
    period: TimePeriod,
    cfg: PeriodSettings,
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Replace the settings for one period."""
    await save_period_settings(db, period, cfg)
    await db.commit()
    logger.info(f"Updated settings for {period.value}")
    return cfg


@router.post("/reset", response_model=ScoringSettings)
async def reset_settings(
    db: AsyncSession = Depends(get_session),
    _: str = Depends(verify_api_key),
):
    """Restore the shipped settings for every period."""
    for period, cfg in DEFAULT_PERIOD_SETTINGS.items():
        await save_period_settings(db, period, cfg)
    await db.commit()
    logger.info("Reset all period settings to defaults")
    return ScoringSettings(periods=dict(DEFAULT_PERIOD_SETTINGS))
