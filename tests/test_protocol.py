from hrplan.core.analytics.estimates import Confidence, ThresholdEstimate, ThresholdResult
from hrplan.core.analytics.intensity_model import IntensityModel
from hrplan.core.analytics.protocol import generate_protocol


def est(value):
    return ThresholdEstimate(value=value, min=value - 3, max=value + 3, confidence=Confidence.MED)


def result(value):
    return ThresholdResult(hr=est(value))


def test_run_protocol():
    protocol = generate_protocol(est(190), result(150), result(170), sport='run')
    assert protocol.end_hr == 180
    assert protocol.stage_duration_minutes == 4
    assert [s.target_hr for s in protocol.stages] == [135, 141, 147, 153, 159, 165, 171, 177]
    assert [s.stage for s in protocol.stages] == list(range(1, 9))
    assert [s.notes for s in protocol.stages] == (
        ["Below LT1 (150 bpm)"] * 2 + ["Near LT1 (150 bpm)"] * 2
        + ["Near LT2 (170 bpm)"] * 2 + ["Above LT2 (170 bpm)"] * 2
    )
    assert protocol.stop_rules[0] == "Stop when HR >= 180 bpm"
    assert all(s.suggested_pace is None for s in protocol.stages)


def test_bike_protocol_starts_closer_to_lt1():
    protocol = generate_protocol(est(190), result(150), result(170), sport='bike')
    assert [s.target_hr for s in protocol.stages] == [138, 144, 150, 156, 162, 168, 174, 180]
    assert protocol.stages[-1].target_hr <= protocol.end_hr


def test_stage_count_is_capped():
    protocol = generate_protocol(est(200), result(120), result(190), sport='run')
    assert len(protocol.stages) == 10
    assert protocol.stages[0].target_hr == 110
    assert all(s.target_hr <= protocol.end_hr for s in protocol.stages)


def test_missing_estimate_gives_no_protocol():
    assert generate_protocol(est(190), ThresholdResult(), result(170)) is None
    assert generate_protocol(ThresholdEstimate.empty(), result(150), result(170)) is None


def test_run_stages_get_pace_hints():
    points = tuple((hr, 0.02 * hr + 0.2) for hr in (140.0, 150.0, 160.0, 170.0, 180.0))
    model = IntensityModel(sport='run', points=points)
    protocol = generate_protocol(est(190), result(150), result(170), sport='run', model=model)
    assert protocol.stages[0].suggested_pace == "5:45 /km"
    assert all(s.suggested_power is None for s in protocol.stages)


def test_bike_stages_get_power_hints():
    points = tuple((hr, 2 * hr - 100) for hr in (140.0, 150.0, 160.0))
    model = IntensityModel(sport='bike', points=points)
    protocol = generate_protocol(est(190), result(150), result(170), sport='bike', model=model)
    assert protocol.stages[0].suggested_power == 176


def test_to_dict_shape():
    data = generate_protocol(est(190), result(150), result(170), sport='run').to_dict()
    assert set(data) == {'sport', 'stage_duration_minutes', 'end_hr', 'stages', 'stop_rules'}
    assert data['stages'][0] == {
        'stage': 1,
        'target_hr': 135,
        'suggested_pace': None,
        'suggested_power': None,
        'notes': "Below LT1 (150 bpm)",
    }


def test_stages_climb_in_equal_steps():
    for hr_max, lt1, lt2 in ((190, 150, 170), (200, 120, 190), (160, 130, 150), (185, 145, 150)):
        protocol = generate_protocol(est(hr_max), result(lt1), result(lt2), sport='run')
        targets = [s.target_hr for s in protocol.stages]
        assert targets, (hr_max, lt1, lt2)
        assert all(b - a == 6 for a, b in zip(targets, targets[1:]))
        assert targets[0] >= round(0.55 * hr_max)
        assert targets[-1] <= protocol.end_hr
        assert len(targets) <= 10
