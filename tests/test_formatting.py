"""Tests for metric labels and display formatting."""

import pytest

from app.core.enums import ProgressionMetric, RecordType
from app.services.formatting import (
    available_metrics,
    format_duration,
    format_metric_value,
    format_record_value,
    format_volume,
    metric_axis_label,
)


def test_available_metrics_for_rep_exercise():
    options = available_metrics(is_timed=False)
    assert [o.value for o in options] == ["max_weight", "estimated_1rm", "volume", "max_reps"]
    assert options[1].label == "Est. 1RM"


def test_available_metrics_for_timed_exercise():
    options = available_metrics(is_timed=True)
    assert [(o.value, o.label) for o in options] == [
        ("max_time", "Duration"),
        ("volume", "Weighted Duration"),
    ]


@pytest.mark.parametrize(
    "value,metric,expected",
    [
        (100.0, ProgressionMetric.MAX_WEIGHT, "100kg"),
        (102.5, ProgressionMetric.ESTIMATED_1RM, "102.5kg"),
        (2500, ProgressionMetric.VOLUME, "2.5t"),
        (750, ProgressionMetric.VOLUME, "750kg"),
        (95, ProgressionMetric.MAX_TIME, "1:35"),
        (45, ProgressionMetric.MAX_TIME, "45s"),
        (12, ProgressionMetric.MAX_REPS, "12 reps"),
        (1234567.5, ProgressionMetric.MAX_WEIGHT, "1234567.5kg"),
        (1500.5, ProgressionMetric.VOLUME, "1.5t"),
        (12.5, ProgressionMetric.VOLUME, "12.5kg"),
    ],
)
def test_format_metric_value(value, metric, expected):
    assert format_metric_value(value, metric) == expected


def test_axis_labels():
    assert metric_axis_label(ProgressionMetric.MAX_TIME) == "Time (sec)"
    assert metric_axis_label(ProgressionMetric.VOLUME) == "Volume (kg)"


def test_format_volume():
    assert format_volume(500) == "500"
    assert format_volume(1500) == "1.5t"
    assert format_volume(12.5) == "12.5"


def test_format_duration():
    assert format_duration(2700) == "45m"
    assert format_duration(5400) == "1h 30m"


def test_format_record_value_uses_metric_units():
    assert format_record_value(100, RecordType.MAX_WEIGHT) == "100kg"
    assert format_record_value(1200, RecordType.MAX_VOLUME) == "1.2t"
    assert format_record_value(90, RecordType.MAX_TIME) == "1:30"
    assert format_record_value(8, RecordType.MAX_REPS) == "8 reps"
