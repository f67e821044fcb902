"""
config/settings.py

Paths and monitor tuning. Every value can be overridden from the
environment so tests and deployments can point at their own database.
"""

import os
from dataclasses import dataclass, field
from typing import List


PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

DB_PATH = os.environ.get(
    "PERSISTGUARD_DB", os.path.join(PROJECT_ROOT, "data", "persistguard.db")
)
LOG_FILE = os.environ.get("PERSISTGUARD_LOG", "persistguard.log")

DEFAULT_WATCH_PATHS = [
    "/Library/LaunchDaemons",
    "/Library/LaunchAgents",
    os.path.expanduser("~/Library/LaunchAgents"),
    "/Library/StartupItems",
    "/etc/cron.d",
]

DEBOUNCE_SEC = 2.0          # quiet period after the last fs event before rescanning
POLL_INTERVAL_SEC = 0.25    # monitor loop tick


def _watch_paths_from_env() -> List[str]:
    raw = os.environ.get("PERSISTGUARD_WATCH_PATHS")
    if not raw:
        return list(DEFAULT_WATCH_PATHS)
    return [p for p in raw.split(os.pathsep) if p]


@dataclass
class MonitorSettings:
    watch_paths: List[str] = field(default_factory=lambda: list(DEFAULT_WATCH_PATHS))
    debounce_sec: float = DEBOUNCE_SEC
    poll_interval_sec: float = POLL_INTERVAL_SEC

    @classmethod
    def from_env(cls) -> "MonitorSettings":
        return cls(
            watch_paths=_watch_paths_from_env(),
            debounce_sec=float(os.environ.get("PERSISTGUARD_DEBOUNCE_SEC", DEBOUNCE_SEC)),
            poll_interval_sec=POLL_INTERVAL_SEC,
        )
