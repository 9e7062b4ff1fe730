"""
Tests for reading normalization.
"""

from datetime import datetime, timedelta, timezone

import pytest

from agri_monitor.core.errors import ValidationError
from agri_monitor.models.sensor_data import MEASUREMENT_FIELDS
from agri_monitor.services.normalizer import SEQUENCE_ERROR, normalize_reading


class TestSequenceField:
    """sequence is the only required field and must be a JSON number."""

    def test_missing_sequence(self):
        with pytest.raises(ValidationError) as exc:
            normalize_reading({"Temp": 20}, "community-a")
        assert exc.value.message == SEQUENCE_ERROR

    @pytest.mark.parametrize("value", ["12", None, True, [1], {"n": 1}, 3.5])
    def test_non_numeric_sequence(self, value):
        with pytest.raises(ValidationError) as exc:
            normalize_reading({"sequence": value}, "community-a")
        assert exc.value.message == SEQUENCE_ERROR

    def test_whole_float_accepted(self):
        reading = normalize_reading({"sequence": 7.0}, "community-a")
        assert reading.sequence == 7

    def test_body_must_be_object(self):
        with pytest.raises(ValidationError):
            normalize_reading([{"sequence": 1}], "community-a")


class TestMeasurements:

    def test_wire_names_are_mapped(self, sample_reading_payload):
        reading = normalize_reading(sample_reading_payload, "community-a")

        assert reading.community_id == "community-a"
        assert reading.sequence == 1
        assert reading.soil_moisture == 50
        assert reading.rainfall == 10
        assert reading.ph == 6.5
        assert reading.humidity == 60
        assert reading.temperature == 20
        assert reading.turbidity == 3.2
        assert reading.ozone == 0.02
        assert reading.ammonia == 0.5
        assert reading.co2 == 410
        assert reading.tilt_x == 0.5
        assert reading.tilt_y == -0.3

    def test_absent_fields_stay_none(self):
        reading = normalize_reading({"sequence": 1, "Temp": 21.5}, "community-a")

        assert reading.temperature == 21.5
        for field in MEASUREMENT_FIELDS:
            if field != "temperature":
                assert getattr(reading, field) is None

    def test_zero_is_kept(self):
        reading = normalize_reading({"sequence": 1, "rain": 0}, "community-a")
        assert reading.rainfall == 0

    def test_no_range_clamping(self):
        reading = normalize_reading({"sequence": 1, "pH": 20, "soil": 140}, "community-a")

        assert reading.ph == 20
        assert reading.soil_moisture == 140

    def test_string_measurement_rejected(self):
        with pytest.raises(ValidationError) as exc:
            normalize_reading({"sequence": 1, "Temp": "21"}, "community-a")
        assert "Temp" in exc.value.message

    def test_unknown_keys_ignored(self):
        reading = normalize_reading({"sequence": 1, "battery": 3.7}, "community-a")
        assert reading.sequence == 1


class TestTimestamp:

    def test_device_timestamp_used(self, sample_reading_payload):
        reading = normalize_reading(sample_reading_payload, "community-a")
        assert reading.timestamp == datetime(2025, 3, 1, 6, 30, tzinfo=timezone.utc)

    def test_defaults_to_server_time(self):
        before = datetime.now(timezone.utc)
        reading = normalize_reading({"sequence": 1}, "community-a")

        assert before - timedelta(seconds=1) <= reading.timestamp <= datetime.now(timezone.utc)

    def test_invalid_timestamp(self):
        with pytest.raises(ValidationError):
            normalize_reading({"sequence": 1, "timestamp": "yesterday"}, "community-a")
