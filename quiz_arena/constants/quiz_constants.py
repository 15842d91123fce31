"""Quiz-related constants shared across UI and core layers."""

OPTIONS_PER_QUESTION: int = 4
UNANSWERED: int = -1

DEFAULT_DURATION_MINUTES: int = 10
MAX_DURATION_MINUTES: int = 180
TICK_INTERVAL_SECONDS: float = 1.0

DEFAULT_QUESTION_COUNT: int = 5
MIN_QUESTION_COUNT: int = 1
MAX_QUESTION_COUNT: int = 20

PODIUM_SIZE: int = 3
RESULT_PAGE_LEADERBOARD_SIZE: int = 10

PERFECT_SCORE_BADGE_LABEL: str = "Grammar Master"
TOP_THREE_BADGE_LABEL: str = "Top 3 Finisher"

# Sessions whose page stopped polling are closed after this long.
SESSION_IDLE_TIMEOUT_SECONDS: int = 120
SESSION_SWEEP_INTERVAL_SECONDS: float = 15.0
