import pytest
from conftest import make_activity

from hrplan.core.analytics.intensity_model import IntensityModel, fit_intensity_model
from hrplan.core.analytics.time_utils import pace_from_velocity


def _level(t):
    """HR steps of 10 bpm every 10 minutes: 130, 140, ... 170."""
    return 130 + 10 * min(t // 600, 4)


def stepped_run(activity_id, days_ago):
    return make_activity(activity_id, days_ago, 'Run', 50 * 60,
                         hr=_level, velocity=lambda t: 0.02 * _level(t) + 0.2)


def test_fit_and_predict_run_pace(now):
    model = fit_intensity_model([stepped_run('s1', 1)], 'run')
    assert model is not None
    assert model.sport == 'run'
    assert model.predict(155) == pytest.approx(3.3)
    assert pace_from_velocity(model.predict(155)) == "5:03 /km"


def test_unsupported_sport_has_no_model():
    swim = make_activity('w1', 1, 'Swim', 50 * 60, hr=140, velocity=1.2)
    assert fit_intensity_model([swim], 'swim') is None


def test_bike_without_power_has_no_model():
    ride = make_activity('b1', 1, 'Ride', 50 * 60, hr=_level)
    assert fit_intensity_model([ride], 'bike') is None


def test_short_activity_gives_too_few_windows():
    short = make_activity('s1', 1, 'Run', 11 * 60, hr=150, velocity=3.2)
    assert fit_intensity_model([short], 'run') is None


def test_predict_without_hr_spread_is_undefined():
    model = IntensityModel(sport='run', points=((150.0, 3.0), (150.0, 3.1), (150.0, 3.2)))
    assert model.predict(150) is None


def test_predict_single_point():
    model = IntensityModel(sport='bike', points=((150.0, 220.0),))
    assert model.predict(170) == 220.0
