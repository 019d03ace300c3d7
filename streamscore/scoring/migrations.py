"""Schema upgrades for stored settings and record payloads.

Payloads exported from older releases come in three shapes:

Settings
    v1  global settings with a day window (``windowStartDays``) and
        ``daysCap``/``daysWeight``
    v2  global settings with ``streamsCap``/``streamsWeight``
    v3  per-period map ``{"periods": {"60days": {...}, ...}}``

Records
    v1  no ``numberOfStreams`` and no ``period``
    v2  ``numberOfStreams`` present, no ``period``
    v3  ``period``, ``followerCount`` and the include flags present

Each upgrade step is a pure function from version n to n + 1. They are
applied once, in order, when a payload is loaded; the scoring engine only
ever sees current payloads.
"""
import logging
from typing import Any, Callable

from streamscore.exceptions import MigrationError
from streamscore.scoring.defaults import DEFAULT_PERIOD_SETTINGS
from streamscore.scoring.types import TimePeriod

logger = logging.getLogger(__name__)

SETTINGS_SCHEMA_VERSION = 3
RECORD_SCHEMA_VERSION = 3
VERSION_KEY = "schemaVersion"

_V1_ONLY_SETTINGS_KEYS = ("windowStartDays", "windowEndDays")
_PERIOD_SETTINGS_FIELDS = {
    "streamsCap": "streams_cap",
    "hoursCap": "hours_cap",
    "viewersCap": "viewers_cap",
    "followerCountCap": "follower_count_cap",
    "mpvmTarget": "mpvm_target",
    "ucp100Target": "ucp100_target",
    "f1kVHTarget": "f1kvh_target",
    "minViewerHours": "min_viewer_hours",
    "streamsWeight": "streams_weight",
    "hoursWeight": "hours_weight",
    "viewersWeight": "viewers_weight",
    "mpvmWeight": "mpvm_weight",
    "ucp100Weight": "ucp100_weight",
    "f1kVHWeight": "f1kvh_weight",
    "consistencyWeight": "consistency_weight",
    "followerCountWeight": "follower_count_weight",
}


# =========================================================
# Settings
# =========================================================

def detect_settings_version(payload: dict[str, Any]) -> int:
    if VERSION_KEY in payload:
        return int(payload[VERSION_KEY])
    if "periods" in payload:
        return 3
    if "daysCap" in payload or "daysWeight" in payload or any(
        key in payload for key in _V1_ONLY_SETTINGS_KEYS
    ):
        return 1
    return 2


def _settings_v1_to_v2(payload: dict[str, Any]) -> dict[str, Any]:
    """Day-based caps become stream-based caps; the day window is dropped."""
    upgraded = {
        k: v for k, v in payload.items()
        if k not in ("daysCap", "daysWeight", *_V1_ONLY_SETTINGS_KEYS)
    }
    upgraded["streamsCap"] = payload.get("daysCap") or 60
    upgraded["streamsWeight"] = payload.get("daysWeight") or 0.10
    return upgraded


def _settings_v2_to_v3(payload: dict[str, Any]) -> dict[str, Any]:
    """Global settings become the 60-day bucket; other buckets take defaults."""
    periods = {period.value: cfg.model_dump() for period, cfg in DEFAULT_PERIOD_SETTINGS.items()}

    bucket = periods[TimePeriod.SIXTY_DAYS.value]
    for legacy_key, field in _PERIOD_SETTINGS_FIELDS.items():
        if legacy_key in payload:
            bucket[field] = payload[legacy_key]
    # Fields that did not exist before per-period settings
    bucket["follower_count_weight"] = payload.get("followerCountWeight", 0)
    bucket["follower_count_cap"] = payload.get("followerCountCap")
    return {"periods": periods}


_SETTINGS_UPGRADES: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _settings_v1_to_v2,
    2: _settings_v2_to_v3,
}


# =========================================================
# Records
# =========================================================

def detect_record_version(payload: dict[str, Any]) -> int:
    if VERSION_KEY in payload:
        return int(payload[VERSION_KEY])
    if "period" in payload:
        return 3
    if "numberOfStreams" in payload:
        return 2
    return 1


def _record_v1_to_v2(payload: dict[str, Any]) -> dict[str, Any]:
    return {**payload, "numberOfStreams": payload.get("numberOfStreams") or 1}


def _record_v2_to_v3(payload: dict[str, Any]) -> dict[str, Any]:
    upgraded = dict(payload)
    upgraded.setdefault("period", TimePeriod.SIXTY_DAYS.value)
    upgraded.setdefault("followerCount", 0)
    upgraded.setdefault("includeMessages", True)
    upgraded.setdefault("includeUniqueChatters", True)
    return upgraded


_RECORD_UPGRADES: dict[int, Callable[[dict[str, Any]], dict[str, Any]]] = {
    1: _record_v1_to_v2,
    2: _record_v2_to_v3,
}


def _upgrade(
    payload: dict[str, Any],
    version: int,
    target: int,
    steps: dict[int, Callable[[dict[str, Any]], dict[str, Any]]],
    kind: str,
) -> dict[str, Any]:
    if version > target:
        raise MigrationError(f"Unsupported {kind} schema version {version} (latest is {target})")
    if version < 1:
        raise MigrationError(f"Invalid {kind} schema version {version}")

    upgraded = {k: v for k, v in payload.items() if k != VERSION_KEY}
    while version < target:
        logger.info(f"Upgrading {kind} payload from v{version} to v{version + 1}")
        upgraded = steps[version](upgraded)
        version += 1

    upgraded[VERSION_KEY] = target
    return upgraded


def upgrade_settings(payload: dict[str, Any]) -> dict[str, Any]:
    """Bring a settings payload up to the current schema."""
    if not isinstance(payload, dict):
        raise MigrationError("Settings payload must be an object")
    return _upgrade(
        payload,
        detect_settings_version(payload),
        SETTINGS_SCHEMA_VERSION,
        _SETTINGS_UPGRADES,
        "settings",
    )


def upgrade_record(payload: dict[str, Any]) -> dict[str, Any]:
    """Bring a stream record payload up to the current schema."""
    if not isinstance(payload, dict):
        raise MigrationError("Record payload must be an object")
    return _upgrade(
        payload,
        detect_record_version(payload),
        RECORD_SCHEMA_VERSION,
        _RECORD_UPGRADES,
        "record",
    )
