"""Tests for per-record-type extraction, volume and 1RM estimation."""

import uuid

import pytest

from app.core.enums import OneRepMaxFormula, ProgressionMetric, RecordType
from app.core.exceptions import InvalidInputError
from app.schemas.records import LoggedSet
from app.services.record_values import (
    calculate_volume,
    check_set,
    estimate_one_rep_max,
    extract_record_value,
    metric_value,
)


class TestExtractRecordValue:
    def test_weighted_rep_set(self, make_set):
        s = make_set(weight=100, reps=5)
        assert extract_record_value(s, RecordType.MAX_WEIGHT, is_timed=False) == 100.0
        assert extract_record_value(s, RecordType.MAX_REPS, is_timed=False) == 5.0
        assert extract_record_value(s, RecordType.MAX_VOLUME, is_timed=False) == 500.0
        assert extract_record_value(s, RecordType.MAX_TIME, is_timed=False) is None

    def test_reps_skipped_for_timed_exercise(self, make_set):
        s = make_set(reps=10, time_seconds=60)
        assert extract_record_value(s, RecordType.MAX_REPS, is_timed=True) is None
        assert extract_record_value(s, RecordType.MAX_TIME, is_timed=True) == 60.0

    def test_time_skipped_for_rep_exercise(self, make_set):
        s = make_set(reps=10, time_seconds=60)
        assert extract_record_value(s, RecordType.MAX_TIME, is_timed=False) is None

    def test_volume_uses_time_when_reps_absent(self, make_set):
        s = make_set(weight=20, time_seconds=45)
        assert extract_record_value(s, RecordType.MAX_VOLUME, is_timed=True) == 900.0

    def test_no_volume_without_weight(self, make_set):
        s = make_set(reps=15)
        assert extract_record_value(s, RecordType.MAX_VOLUME, is_timed=False) is None
        assert extract_record_value(s, RecordType.MAX_WEIGHT, is_timed=False) is None

    def test_zero_weight_is_a_value(self, make_set):
        s = make_set(weight=0, reps=12)
        assert extract_record_value(s, RecordType.MAX_WEIGHT, is_timed=False) == 0.0
        assert extract_record_value(s, RecordType.MAX_VOLUME, is_timed=False) == 0.0

    def test_timed_volume_uses_time_even_with_reps(self, make_set):
        hold = make_set(weight=20, reps=10, time_seconds=60)
        assert extract_record_value(hold, RecordType.MAX_VOLUME, is_timed=True) == 1200.0
        assert extract_record_value(hold, RecordType.MAX_VOLUME, is_timed=False) == 200.0

    def test_zero_reps_fall_back_to_time(self, make_set):
        hold = make_set(weight=20, reps=0, time_seconds=60)
        assert extract_record_value(hold, RecordType.MAX_VOLUME, is_timed=True) == 1200.0
        assert extract_record_value(hold, RecordType.MAX_VOLUME, is_timed=False) == 1200.0


class TestCheckSet:
    def test_accepts_valid_set(self, make_set):
        check_set(make_set(weight=50, reps=8))

    def test_rejects_negative_weight(self, make_set):
        # model_construct skips pydantic validation, like a hand-built record would
        bad = LoggedSet.model_construct(**{**make_set(reps=5).model_dump(), "weight": -5.0})
        with pytest.raises(InvalidInputError, match="weight"):
            check_set(bad)

    def test_rejects_missing_exercise(self, make_set):
        bad = LoggedSet.model_construct(**{**make_set(reps=5).model_dump(), "exercise_id": None})
        with pytest.raises(InvalidInputError, match="exercise"):
            check_set(bad)

    def test_invalid_input_is_a_value_error(self):
        assert issubclass(InvalidInputError, ValueError)


def test_calculate_volume():
    assert calculate_volume(100, 5, None) == 500.0
    assert calculate_volume(10, None, 30) == 300.0
    assert calculate_volume(None, 10, None) == 0.0
    assert calculate_volume(50, None, None) == 0.0
    assert calculate_volume(20, 10, 60, is_timed=True) == 1200.0
    assert calculate_volume(20, 0, 60) == 1200.0
    assert calculate_volume(20, 0, None) == 0.0


class TestEstimateOneRepMax:
    def test_single_rep_is_the_weight(self):
        assert estimate_one_rep_max(140, 1) == 140.0

    def test_epley(self):
        assert estimate_one_rep_max(100, 5) == 116.67

    def test_brzycki(self):
        assert estimate_one_rep_max(100, 5, OneRepMaxFormula.BRZYCKI) == 112.5

    def test_brzycki_extrapolates_high_reps(self):
        assert estimate_one_rep_max(50, 40, OneRepMaxFormula.BRZYCKI) == 55.0

    @pytest.mark.parametrize("weight,reps", [(0, 5), (100, 0)])
    def test_zero_inputs(self, weight, reps):
        assert estimate_one_rep_max(weight, reps) == 0.0


class TestMetricValue:
    def test_estimated_1rm_needs_weight_and_reps(self, make_set):
        assert metric_value(make_set(reps=10), ProgressionMetric.ESTIMATED_1RM) is None
        assert metric_value(make_set(weight=100, reps=5), ProgressionMetric.ESTIMATED_1RM) == 116.67

    def test_raw_fields(self, make_set):
        s = make_set(weight=60, reps=8, time_seconds=None, id=uuid.uuid4())
        assert metric_value(s, ProgressionMetric.MAX_WEIGHT) == 60.0
        assert metric_value(s, ProgressionMetric.MAX_REPS) == 8.0
        assert metric_value(s, ProgressionMetric.MAX_TIME) is None
        assert metric_value(s, ProgressionMetric.VOLUME) == 480.0

    def test_volume_follows_exercise_type(self, make_set):
        hold = make_set(weight=20, reps=10, time_seconds=60)
        assert metric_value(hold, ProgressionMetric.VOLUME) == 200.0
        assert metric_value(hold, ProgressionMetric.VOLUME, is_timed=True) == 1200.0
