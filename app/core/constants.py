"""Application constants."""

from app.core.enums import RecordType

# RPE (Rate of Perceived Exertion)
RPE_MIN = 1
RPE_MAX = 10

# Mood rating on session completion
MOOD_MIN = 1
MOOD_MAX = 10

# Trend charts
DEFAULT_VOLUME_WEEKS = 12
MAX_VOLUME_WEEKS = 104
DEFAULT_TREND_LIMIT = 12

# Streak lookback (one year of weeks)
MAX_STREAK_WEEKS = 52

# Display priority: lower number = shown first.
# MAX_TIME and MAX_REPS share a tier (bodyweight equivalents).
PR_PRIORITY: dict[RecordType, int] = {
    RecordType.MAX_VOLUME: 0,
    RecordType.MAX_TIME: 1,
    RecordType.MAX_REPS: 1,
    RecordType.MAX_WEIGHT: 2,
}
