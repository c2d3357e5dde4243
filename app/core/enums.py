"""Shared enums for models and API."""

from enum import Enum


class RecordType(str, Enum):
    """Dimension along which a personal record is tracked."""

    MAX_WEIGHT = "MAX_WEIGHT"  # Heaviest weight
    MAX_REPS = "MAX_REPS"  # Most reps (non-timed exercises)
    MAX_VOLUME = "MAX_VOLUME"  # weight × reps, or weight × time for timed exercises
    MAX_TIME = "MAX_TIME"  # Longest duration (timed exercises)


class MuscleGroup(str, Enum):
    """Primary muscle group of an exercise."""

    CHEST = "CHEST"
    BACK = "BACK"
    LEGS = "LEGS"
    SHOULDERS = "SHOULDERS"
    ARMS = "ARMS"
    CORE = "CORE"
    CARDIO = "CARDIO"
    FULL_BODY = "FULL_BODY"


class Equipment(str, Enum):
    BARBELL = "BARBELL"
    DUMBBELL = "DUMBBELL"
    MACHINE = "MACHINE"
    BODYWEIGHT = "BODYWEIGHT"
    CABLE = "CABLE"
    KETTLEBELL = "KETTLEBELL"
    BANDS = "BANDS"
    NONE = "NONE"


class ProgressionMetric(str, Enum):
    """Scalar plotted on the progression chart."""

    MAX_WEIGHT = "max_weight"
    ESTIMATED_1RM = "estimated_1rm"
    VOLUME = "volume"
    MAX_TIME = "max_time"
    MAX_REPS = "max_reps"


class OneRepMaxFormula(str, Enum):
    EPLEY = "epley"  # weight * (1 + reps/30)
    BRZYCKI = "brzycki"  # weight * 36 / (37 - reps)
