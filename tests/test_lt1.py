from conftest import make_activity

from hrplan.core.analytics.estimates import Confidence, Sample
from hrplan.core.analytics.lt1 import cardiac_drift, estimate_lt1, is_steady


def steady_ride(activity_id, days_ago, hr=150, power=180):
    return make_activity(activity_id, days_ago, 'Ride', 30 * 60, hr=hr, power=power)


def drifting_ride(activity_id, days_ago):
    """Constant power while HR climbs from 130 to 175 bpm."""
    # A gentler 140 -> 150 ramp is not enough: the single scanned window
    # (600-1800 s, first 120 s dropped) averages 145.3 bpm in its first half and
    # 148.3 bpm in its second, a drift of about 2.1 %, under the 3 % cycling
    # bound. 130 -> 175 gives 153.9 -> 167.4 bpm, about 8.8 %.
    return make_activity(activity_id, days_ago, 'Ride', 30 * 60,
                         hr=lambda t: 130 + 45 * t / 1800, power=200)


def test_needs_two_activities(now):
    result = estimate_lt1([steady_ride('r1', 1)], sport='bike', now=now)
    assert result.value is None
    assert result.confidence == Confidence.LOW


def test_drifting_window_is_rejected(now):
    result = estimate_lt1([drifting_ride('r1', 1), steady_ride('r2', 2)], sport='bike', now=now)
    assert result.value == 150
    assert result.hr.min == 147
    assert result.hr.max == 153
    assert result.confidence == Confidence.LOW
    assert [c.activity_id for c in result.evidence] == ['r2']


def test_highest_steady_hr_wins(now):
    result = estimate_lt1([steady_ride('r1', 1, hr=150), steady_ride('r2', 2, hr=160)],
                          sport='bike', now=now)
    assert result.value == 160
    assert result.hr.min == 147
    assert result.hr.max == 163
    assert result.confidence == Confidence.MED


def test_uneven_power_is_not_steady(now):
    activities = [
        make_activity(f'r{i}', i + 1, 'Ride', 30 * 60, hr=150,
                      power=lambda t: 100 if t % 2 else 300)
        for i in range(2)
    ]
    assert estimate_lt1(activities, sport='bike', now=now).value is None


def test_other_sports_are_ignored(now):
    activities = [steady_ride('r1', 1), steady_ride('r2', 2)]
    assert estimate_lt1(activities, sport='run', now=now).value is None


def test_high_confidence_needs_three_days(now):
    activities = [steady_ride(f'r{i}', i + 1) for i in range(4)]
    result = estimate_lt1(activities, sport='bike', now=now)
    assert result.value == 150
    assert result.confidence == Confidence.HIGH


def test_steadiness_falls_back_to_hr_spread():
    steady = [Sample(time=i * 5, hr=150 + (i % 2)) for i in range(20)]
    wobbly = [Sample(time=i * 5, hr=130 if i % 2 else 160) for i in range(20)]
    assert is_steady(steady)
    assert not is_steady(wobbly)


def test_cardiac_drift_skips_warm_in():
    window = [Sample(time=i, hr=v) for i, v in enumerate([100, 100, 150, 150, 153, 153, 153, 153])]
    mean1, mean2, drift = cardiac_drift(window, warm_in=2)
    assert mean1 == 150
    assert mean2 == 153
    assert round(drift, 1) == 2.0
