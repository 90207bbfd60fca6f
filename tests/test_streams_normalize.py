from hrplan.streams.normalize import has_hr_stream, lookup_channel, normalize_streams


def test_wrapped_and_bare_encodings_are_equivalent():
    wrapped = {
        'time': {'data': [0, 1, 2]},
        'heartrate': {'data': [120, 121, 122]},
        'watts': {'data': [200, 0, 210]},
    }
    bare = {'time': [0, 1, 2], 'hr': [120, 121, 122], 'power': [200, 0, 210]}
    assert normalize_streams(wrapped) == normalize_streams(bare)


def test_synonyms_resolve_to_canonical_channels():
    streams = {
        'time': [0, 1],
        'heart_rate': [130, 131],
        'velocity': {'data': [3.1, 3.2]},
        'distance': [0.0, 3.2],
    }
    bundle = normalize_streams(streams)
    assert bundle.hr == (130.0, 131.0)
    assert bundle.velocity == (3.1, 3.2)
    # zero distance means "no reading"
    assert bundle.distance == (None, 3.2)
    assert bundle.power == ()


def test_first_non_empty_synonym_wins():
    streams = {'heartrate': {'data': []}, 'hr': [140, 141]}
    assert lookup_channel(streams, 'hr') == [140, 141]
    assert has_hr_stream(streams)


def test_missing_or_invalid_time_axis():
    assert normalize_streams(None) is None
    assert normalize_streams({}) is None
    assert normalize_streams({'time': {'data': []}, 'hr': [120]}) is None
    assert normalize_streams({'time': ['a', 'b'], 'hr': [120, 121]}) is None


def test_non_numeric_readings_become_missing():
    bundle = normalize_streams({'time': [0, 1, 2], 'hr': [None, 'x', 150]})
    assert bundle.hr == (None, None, 150.0)
    assert not has_hr_stream({'time': [0, 1]})
