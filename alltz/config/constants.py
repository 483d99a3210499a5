"""
Centralized constants for alltz.

Timeline geometry, scrub steps, search limits and file locations live here
so that the engine, the navigator and the UI agree on them.
"""

import os
from pathlib import Path

# =============================================================================
# FILE LOCATIONS
# =============================================================================

CONFIG_ENV_VAR = "ALLTZ_CONFIG"  # Overrides the config file path (tests, portable installs)
CONFIG_FILENAME = "config.json"
LOG_FILENAME = "alltz.log"


def config_dir() -> Path:
    """Directory holding the preferences file and the TUI log (~/.config/alltz)."""
    return Path.home() / ".config" / "alltz"


def config_path() -> Path:
    """Path of the preferences file, respecting ALLTZ_CONFIG."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return config_dir() / CONFIG_FILENAME


# =============================================================================
# TIMELINE GEOMETRY
# =============================================================================

CHARS_PER_HOUR = 2.0  # 48 hours fit in ~96 columns
MIN_TIMELINE_HOURS = 48.0  # 24h either side of the scrub instant
MAX_TIMELINE_HOURS = 168.0  # one week

# =============================================================================
# NAVIGATION
# =============================================================================

TICK_INTERVAL_SECONDS = 1.0
SEARCH_RESULT_LIMIT = 8  # keeps quick-select keys 1-8 meaningful

COARSE_SCRUB_MINUTES = 60
FINE_SCRUB_MINUTES = 1
QUARTER_SCRUB_MINUTES = 15
HOUR_SCRUB_MINUTES = 60

# =============================================================================
# DEFAULTS
# =============================================================================

DEFAULT_ZONES = [
    "Los Angeles",
    "New York",
    "UTC",
    "London",
    "Berlin",
    "Tokyo",
    "Sydney",
]

DEFAULT_WORK_HOURS = (8, 18)
DEFAULT_AWAKE_HOURS = (6, 22)
