from hrplan.core.analytics.zones import estimated_hr_zones


def test_zones_from_thresholds():
    assert estimated_hr_zones(150, 170) == [
        {'zone': 'zone1', 'min': 105, 'max': 135},
        {'zone': 'zone2', 'min': 135, 'max': 150},
        {'zone': 'zone3', 'min': 150, 'max': 162},
        {'zone': 'zone4', 'min': 163, 'max': 177},
        {'zone': 'zone5', 'min': 179, 'max': 204},
    ]


def test_zone_bounds_never_decrease():
    zones = estimated_hr_zones(160, 162)
    mins = [z['min'] for z in zones]
    assert mins == sorted(mins)
    assert all(z['min'] <= z['max'] for z in zones)


def test_no_zones_without_both_thresholds():
    assert estimated_hr_zones(None, 170) is None
    assert estimated_hr_zones(150, None) is None
    assert estimated_hr_zones(170, 150) is None
