"""Display helpers for progression metrics (labels, units, axis titles)."""

from __future__ import annotations

from app.core.enums import ProgressionMetric, RecordType
from app.schemas.progression import MetricOption

_TIMED_METRICS = [
    (ProgressionMetric.MAX_TIME, "Duration"),
    (ProgressionMetric.VOLUME, "Weighted Duration"),
]

_REP_METRICS = [
    (ProgressionMetric.MAX_WEIGHT, "Max Weight"),
    (ProgressionMetric.ESTIMATED_1RM, "Est. 1RM"),
    (ProgressionMetric.VOLUME, "Volume"),
    (ProgressionMetric.MAX_REPS, "Max Reps"),
]

_AXIS_LABELS = {
    ProgressionMetric.MAX_WEIGHT: "Weight (kg)",
    ProgressionMetric.ESTIMATED_1RM: "Weight (kg)",
    ProgressionMetric.VOLUME: "Volume (kg)",
    ProgressionMetric.MAX_TIME: "Time (sec)",
    ProgressionMetric.MAX_REPS: "Reps",
}


def available_metrics(is_timed: bool) -> list[MetricOption]:
    """Metrics that make sense for the exercise type."""
    options = _TIMED_METRICS if is_timed else _REP_METRICS
    return [MetricOption(value=m.value, label=label) for m, label in options]


def _number(value: float) -> str:
    """100.0 -> '100', 102.5 -> '102.5'."""
    return f"{value:.10g}" if float(value) != int(value) else str(int(value))


def format_volume(kg: float) -> str:
    """'1,500' below a tonne, '2.5t' from 1000 kg up."""
    if kg >= 1000:
        return f"{kg / 1000:.1f}t"
    return f"{kg:,.0f}" if float(kg) == int(kg) else f"{kg:,}"


def format_duration(seconds: int) -> str:
    """'45m', '1h 30m'."""
    hours, rem = divmod(int(seconds), 3600)
    mins = rem // 60
    if hours > 0:
        return f"{hours}h {mins}m"
    return f"{mins}m"


def format_metric_value(value: float, metric: ProgressionMetric) -> str:
    if metric in (ProgressionMetric.MAX_WEIGHT, ProgressionMetric.ESTIMATED_1RM):
        return f"{_number(value)}kg"
    if metric == ProgressionMetric.VOLUME:
        volume = format_volume(value)
        return volume if volume.endswith("t") else f"{volume}kg"
    if metric == ProgressionMetric.MAX_TIME:
        mins, secs = divmod(int(value), 60)
        if mins > 0:
            return f"{mins}:{secs:02d}"
        return f"{secs}s"
    if metric == ProgressionMetric.MAX_REPS:
        return f"{_number(value)} reps"
    return _number(value)


def metric_axis_label(metric: ProgressionMetric) -> str:
    return _AXIS_LABELS.get(metric, "Value")


_RECORD_METRICS = {
    RecordType.MAX_WEIGHT: ProgressionMetric.MAX_WEIGHT,
    RecordType.MAX_REPS: ProgressionMetric.MAX_REPS,
    RecordType.MAX_VOLUME: ProgressionMetric.VOLUME,
    RecordType.MAX_TIME: ProgressionMetric.MAX_TIME,
}


def format_record_value(value: float, record_type: RecordType) -> str:
    """Record values share the units of the matching progression metric."""
    return format_metric_value(value, _RECORD_METRICS[record_type])
