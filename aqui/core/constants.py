from __future__ import annotations

# Status heuristics for live sessions. Product has not confirmed these values.
CLOSING_AFTER_HOURS = 7
CLOSING_SOON_MINUTES = 30
DEFAULT_SCHEDULED_DURATION_MINUTES = 120

MAX_SESSION_DURATION_MINUTES = 24 * 60

ENDED_BY_VENDOR = "vendor"
ENDED_BY_TIMER = "timer"
ENDED_BY_ADMIN = "admin"
ENDED_BY_VALUES = frozenset({ENDED_BY_VENDOR, ENDED_BY_TIMER, ENDED_BY_ADMIN})

GO_LIVE_STATUSES = frozenset({"approved", "active"})

SWEEPER_JOB_ID = "auto_end_sessions"
CRON_SECRET_HEADER = "X-Cron-Secret"
