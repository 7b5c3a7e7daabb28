"""Static game configuration constants."""

SAVE_KEY = "quickKickMogulSave"
SAVE_VERSION = 2

MATCH_DURATION_SECONDS = 5 * 60
TICK_SECONDS = 1.0

DEFAULT_MONEY = 0.0
DEFAULT_CLICK_POWER = 1
DEFAULT_STADIUM_CAPACITY = 100
DEFAULT_PASSIVE_INCOME = 0.0
DEFAULT_LEAGUE_LEVEL = 1

CLICK_UPGRADE_COST_PER_LEVEL = 10
STADIUM_UPGRADE_STEP = 100
STADIUM_UPGRADE_COST_PER_STEP = 50
TRAIN_COST_PER_OVERALL = 5
TRAIN_VALUE_GAIN = 100
PLAYER_VALUE_PER_OVERALL = 100
RECRUIT_OVERALL_GAIN: tuple[int, int] = (5, 15)

# (position, min overall, max overall) for each roster slot of a new game.
INITIAL_LINEUP: tuple[tuple[str, int, int], ...] = (
    ("GK", 50, 60),
    ("DEF", 45, 55),
    ("DEF", 45, 55),
    ("MID", 55, 65),
    ("MID", 55, 65),
    ("FWD", 60, 70),
    ("FWD", 60, 70),
)

TIER_COLORS: tuple[str, ...] = (
    "#374151",  # basic
    "#a16207",  # bronze
    "#9ca3af",  # silver
    "#f59e0b",  # gold
    "#10b981",  # emerald
    "#3b82f6",  # sapphire
    "#a855f7",  # amethyst
    "#ef4444",  # ruby
    "#84cc16",  # jade
    "#0ea5e9",  # cosmic
)
