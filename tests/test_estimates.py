import json

import pytest

from estimates import (
    MEAN_KEY,
    Measurement,
    extract_field,
    extract_mean_and_std_dev,
    read_measurement,
    record_path,
)


def test_well_formed_record():
    text = ('{"mean":{"confidence_interval":{"confidence_level":0.95,"lower_bound":12000.0,'
            '"upper_bound":12600.0},"point_estimate":12345.0,"standard_error":10.0},'
            '"std_dev":{"confidence_interval":{"confidence_level":0.95,"lower_bound":60.0,'
            '"upper_bound":70.0},"point_estimate":67.0,"standard_error":1.0}}')
    assert extract_mean_and_std_dev(text) == (12345.0, 67.0)


def test_pretty_printed_record():
    doc = {"mean": {"point_estimate": 12345.0}, "std_dev": {"point_estimate": 67.0}}
    assert extract_mean_and_std_dev(json.dumps(doc, indent=2)) == (12345.0, 67.0)


def test_std_dev_defaults_to_zero():
    assert extract_mean_and_std_dev('{"mean":{"point_estimate":500.5}}') == (500.5, 0.0)


def test_unparsable_std_dev_defaults_to_zero():
    text = '{"mean":{"point_estimate":500.5},"std_dev":{"point_estimate":"n/a"}}'
    assert extract_mean_and_std_dev(text) == (500.5, 0.0)


@pytest.mark.parametrize("text", [
    '{"std_dev":{"point_estimate":67.0}}',
    '{"mean":{"point_estimate":null},"std_dev":{"point_estimate":67.0}}',
    '{"mean":{"point_estimate":abc},"std_dev":{"point_estimate":67.0}}',
    '{"mean":{"standard_error":1.0}}',
    '{"mean":{"point_estimate":12',
    "",
])
def test_mean_is_mandatory(text):
    assert extract_mean_and_std_dev(text) is None


def test_first_point_estimate_after_container_wins():
    # a nested object carrying its own point_estimate shadows the real one
    text = '{"mean":{"bootstrap":{"point_estimate":1.0},"point_estimate":2.0}}'
    assert extract_field(text, MEAN_KEY) == 1.0


def test_extract_field_reads_up_to_closing_brace():
    assert extract_field('{"mean":{"point_estimate": 42 }}', MEAN_KEY) == 42.0


def test_read_measurement(make_record, tmp_path):
    make_record("select", "sqlglot", 10, mean=2_500_000.0, sd=500_000.0)
    m = read_measurement(tmp_path / "store" / "select" / "sqlglot" / "10")
    assert m == Measurement(2_500_000.0, 500_000.0)
    assert m.mean_ms == pytest.approx(2.5)
    assert m.std_dev_ms == pytest.approx(0.5)
    assert m.upper_ms == pytest.approx(3.0)


def test_read_measurement_missing_record(tmp_path):
    assert read_measurement(tmp_path / "nothing") is None


def test_read_measurement_undecodable(tmp_path):
    path = record_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_bytes(b'{"mean":{"point_estimate":\xff\xfe}}')
    assert read_measurement(tmp_path) is None
