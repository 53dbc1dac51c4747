"""
Pytest Configuration
====================

Shared fixtures for building synthetic pain diaries.
"""

from datetime import datetime, timedelta

import pytest


# Monday, so weekly buckets line up with day offsets
START = datetime(2024, 3, 4, 9, 0, 0)


def _record(day, pain, hour=0, **fields):
    ts = START + timedelta(days=day, hours=hour)
    record = {"timestamp": ts.isoformat(), "pain_level": pain}
    record.update(fields)
    return record


@pytest.fixture
def start():
    """Timestamp of day 0 in synthetic diaries."""
    return START


@pytest.fixture
def make_record():
    """
    Build one record dict.

    make_record(day, pain, hour=0, triggers=[...], quality_of_life={...})
    """
    return _record


@pytest.fixture
def daily_records():
    """
    Build one record per day from a list of pain levels.

    daily_records([3, 3, 7], triggers=lambda day, pain: [...])
    Keyword values may be callables of (day, pain).
    """
    def build(pains, **fields):
        records = []
        for day, pain in enumerate(pains):
            values = {
                key: (value(day, pain) if callable(value) else value)
                for key, value in fields.items()
            }
            records.append(_record(day, pain, **values))
        return records

    return build


@pytest.fixture
def rain_diary(daily_records):
    """
    30 daily records cycling 2,2,2,8,8,8,8 with "rain" logged on 8-days.
    """
    cycle = [2, 2, 2, 8, 8, 8, 8]
    pains = [cycle[day % len(cycle)] for day in range(30)]
    return daily_records(
        pains,
        triggers=lambda day, pain: ["rain"] if pain == 8 else [],
    )
