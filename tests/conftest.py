"""
Shared pytest fixtures and synthetic stream factories.

Activities are generated at 1 Hz like FIT/Strava high-resolution streams.
Channel values are given either as constants or as callables of the elapsed
second. Everything is anchored to a fixed NOW so lookback windows are
deterministic.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _series(value, time):
    if value is None:
        return None
    if callable(value):
        return [value(t) for t in time]
    return [value for _ in time]


def make_activity(
    activity_id,
    days_ago,
    sport,
    duration_s,
    hr,
    power=None,
    velocity=None,
    wrapped=True,
    hr_key='heartrate',
    now=NOW,
):
    """Build a raw activity payload the way the ingestion side hands it over."""
    time = list(range(0, duration_s + 1))
    channels = {
        'time': time,
        hr_key: _series(hr, time),
        'watts': _series(power, time),
        'velocity_smooth': _series(velocity, time),
    }
    streams = {}
    for key, data in channels.items():
        if data is None:
            continue
        streams[key] = {'data': data, 'series_type': 'time'} if wrapped else data
    return {
        'id': activity_id,
        'startDate': (now - timedelta(days=days_ago)).isoformat(),
        'type': sport,
        'streams': streams,
    }


def easy_run(activity_id, days_ago, hr=150, velocity=3.2, minutes=60):
    return make_activity(activity_id, days_ago, 'Run', minutes * 60, hr=hr, velocity=velocity)


def tempo_run(activity_id, days_ago, hr=172):
    """10 min warm-up at 140 bpm, then 30 min at `hr` with an uneven pace."""
    return make_activity(
        activity_id, days_ago, 'Run', 40 * 60,
        hr=lambda t: 140 if t < 600 else hr,
        velocity=lambda t: 3.0 if t < 600 else (3.4 if (t // 5) % 2 else 4.0),
    )


def interval_run(activity_id, days_ago, peak_hr=188):
    """15 min at 150 bpm followed by a 5 min all-out effort."""
    return make_activity(
        activity_id, days_ago, 'Run', 20 * 60,
        hr=lambda t: 150 if t < 900 else peak_hr,
        velocity=lambda t: 3.2 if t < 900 else 4.5,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def run_block():
    """Two easy runs, two tempo runs and one interval session over two weeks."""
    return [
        easy_run('easy-1', 3),
        tempo_run('tempo-1', 5),
        interval_run('vo2-1', 7),
        easy_run('easy-2', 10),
        tempo_run('tempo-2', 12),
    ]


@pytest.fixture
def client():
    from hrplan.main import app
    with TestClient(app) as test_client:
        yield test_client
