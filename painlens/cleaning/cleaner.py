"""
PAINLENS Record Cleaner

Validates and orders raw diary records for engine consumption.

Architecture:
    Caller (storage) → Cleaner → Engines

The cleaner:
    - Accepts PainRecord instances or plain mappings
    - Drops records with an invalid pain level or timestamp (never raises)
    - Returns normalized copies sorted ascending by timestamp
    - Records how many rows were dropped and why
"""

import logging
import math
import numbers
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

import pandas as pd

from painlens.core.models import PainRecord, QualityOfLife

logger = logging.getLogger(__name__)


# Accepted spellings for each field (snake_case and camelCase)
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "timestamp": ("timestamp", "time", "date"),
    "pain_level": ("pain_level", "painLevel", "pain"),
    "triggers": ("triggers",),
    "symptoms": ("symptoms",),
    "medications": ("medications",),
    "locations": ("locations",),
    "quality_of_life": ("quality_of_life", "qualityOfLife"),
    "record_id": ("record_id", "recordId", "id"),
}

QOL_ALIASES: Dict[str, Tuple[str, ...]] = {
    "sleep_quality": ("sleep_quality", "sleepQuality"),
    "mood_impact": ("mood_impact", "moodImpact"),
    "activity_level": ("activity_level", "activityLevel"),
}

# String timestamps must lead with a calendar date; relative words such as
# "now" or "today" would otherwise resolve against the wall clock
ISO_DATE_PREFIX = re.compile(r"^\d{4}-\d{2}-\d{2}")

PAIN_MIN = 0
PAIN_MAX = 10


class InvalidRecord(ValueError):
    """A single record failed validation. Internal to the cleaner."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


@dataclass(frozen=True)
class CleanResult:
    """Result of cleaning: the valid series plus bookkeeping."""
    records: Tuple[PainRecord, ...]
    rows_before: int
    rows_after: int
    drop_reasons: Dict[str, int] = field(default_factory=dict)

    @property
    def rows_dropped(self) -> int:
        return self.rows_before - self.rows_after

    def __len__(self) -> int:
        return len(self.records)


def clean_records(records: Iterable[Any]) -> CleanResult:
    """
    Validate and sort raw records.

    Cleaning steps:
        1. Reject the call if `records` is not a collection of records
        2. Normalize each record (pain level, timestamp, labels, QoL)
        3. Drop records that fail validation, counting the reason
        4. Sort ascending by timestamp (stable for equal timestamps)

    Args:
        records: Iterable of PainRecord or mapping values

    Returns:
        CleanResult with the cleaned series

    Raises:
        TypeError: If records is not an iterable collection of records
    """
    if records is None or isinstance(records, (str, bytes, Mapping, PainRecord)):
        raise TypeError(
            f"records must be a collection of pain records, got {type(records).__name__}"
        )
    try:
        raw = list(records)
    except TypeError:
        raise TypeError(
            f"records must be a collection of pain records, got {type(records).__name__}"
        )

    valid = []
    reasons: Counter = Counter()

    for idx, entry in enumerate(raw):
        try:
            valid.append(normalize_record(entry))
        except InvalidRecord as e:
            reasons[e.reason] += 1
            logger.debug(f"Dropping record {idx}: {e.reason}")

    cleaned = tuple(sorted(valid, key=lambda r: r.timestamp))

    if reasons:
        logger.debug(
            f"Cleaned: {len(raw)} → {len(cleaned)} records, "
            f"dropped {sum(reasons.values())} ({dict(reasons)})"
        )

    return CleanResult(
        records=cleaned,
        rows_before=len(raw),
        rows_after=len(cleaned),
        drop_reasons=dict(reasons),
    )


def normalize_record(entry: Any) -> PainRecord:
    """
    Build a validated PainRecord from a PainRecord or mapping.

    Raises:
        InvalidRecord: If the pain level or timestamp is unusable
    """
    if isinstance(entry, PainRecord):
        values = {
            "timestamp": entry.timestamp,
            "pain_level": entry.pain_level,
            "triggers": entry.triggers,
            "symptoms": entry.symptoms,
            "medications": entry.medications,
            "locations": entry.locations,
            "quality_of_life": entry.quality_of_life,
            "record_id": entry.record_id,
        }
    elif isinstance(entry, Mapping):
        values = {name: _lookup(entry, aliases) for name, aliases in FIELD_ALIASES.items()}
    else:
        raise InvalidRecord("not_a_record")

    record_id = values["record_id"]

    return PainRecord(
        timestamp=parse_timestamp(values["timestamp"]),
        pain_level=parse_pain_level(values["pain_level"]),
        triggers=normalize_labels(values["triggers"]),
        symptoms=normalize_labels(values["symptoms"]),
        medications=normalize_labels(values["medications"]),
        locations=normalize_labels(values["locations"]),
        quality_of_life=normalize_quality_of_life(values["quality_of_life"]),
        record_id=None if record_id is None else str(record_id),
    )


# =============================================================================
# Field Parsers
# =============================================================================

def parse_pain_level(value: Any) -> int:
    """Pain must be an integer in [0, 10]; integral floats are accepted."""
    if value is None:
        raise InvalidRecord("missing_pain_level")
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidRecord("non_numeric_pain_level")
    if not isinstance(value, numbers.Integral):
        value = float(value)
        if not math.isfinite(value) or not value.is_integer():
            raise InvalidRecord("non_integer_pain_level")
    level = int(value)
    if level < PAIN_MIN or level > PAIN_MAX:
        raise InvalidRecord("pain_level_out_of_range")
    return level


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a timestamp to a naive UTC datetime.

    Accepts datetime, date, pandas Timestamp or an ISO-8601 string
    (YYYY-MM-DD, optionally followed by a time and offset).
    """
    if value is None:
        raise InvalidRecord("missing_timestamp")
    if isinstance(value, bool) or not isinstance(value, (str, datetime, date, pd.Timestamp)):
        raise InvalidRecord("unparseable_timestamp")
    if isinstance(value, str):
        value = value.strip()
        if not ISO_DATE_PREFIX.match(value):
            raise InvalidRecord("unparseable_timestamp")

    try:
        ts = pd.Timestamp(value)
    except (ValueError, TypeError, OverflowError):
        raise InvalidRecord("unparseable_timestamp")

    if pd.isna(ts):
        raise InvalidRecord("unparseable_timestamp")

    if ts.tzinfo is not None:
        ts = ts.tz_convert(timezone.utc).tz_localize(None)

    return ts.to_pydatetime()


def normalize_labels(value: Any) -> FrozenSet[str]:
    """Free-form labels as a set of stripped, non-empty strings."""
    if value is None:
        return frozenset()
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, Iterable) or isinstance(value, Mapping):
        return frozenset()

    labels = set()
    for item in value:
        if item is None or isinstance(item, bool):
            continue
        label = str(item).strip()
        if label:
            labels.add(label)
    return frozenset(labels)


def normalize_quality_of_life(value: Any) -> Optional[QualityOfLife]:
    """Keep finite numeric sub-scores; anything else counts as not collected."""
    if value is None:
        return None
    if isinstance(value, QualityOfLife):
        raw = {
            "sleep_quality": value.sleep_quality,
            "mood_impact": value.mood_impact,
            "activity_level": value.activity_level,
        }
    elif isinstance(value, Mapping):
        raw = {name: _lookup(value, aliases) for name, aliases in QOL_ALIASES.items()}
    else:
        return None

    qol = QualityOfLife(**{name: _score(v) for name, v in raw.items()})
    return None if qol.is_empty else qol


def _score(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def _lookup(entry: Mapping, aliases: Tuple[str, ...]) -> Any:
    for key in aliases:
        if key in entry:
            return entry[key]
    return None
