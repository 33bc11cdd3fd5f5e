from __future__ import annotations

import json
import logging
from datetime import time
from pathlib import Path

from chain_planner.models import SchedulingPreferences

logger = logging.getLogger(__name__)

TIME_FIELDS = ("default_wake_time", "default_sleep_time", "evening_routine_earliest")


def _time_to_str(t: time) -> str:
    return t.strftime("%H:%M")


def _str_to_time(s: str) -> time:
    h, m = map(int, s.split(":")[:2])
    return time(h, m)


class PreferencesStore:
    def __init__(self, path: str = "data/preferences.json"):
        self.path = Path(path)

    def load(self) -> SchedulingPreferences:
        """
        Load scheduling preferences. Falls back to defaults when the file is
        missing or cannot be parsed.
        """
        try:
            if not self.path.exists():
                return SchedulingPreferences()

            data = json.loads(self.path.read_text(encoding="utf-8"))

            for name in TIME_FIELDS:
                if isinstance(data.get(name), str):
                    data[name] = _str_to_time(data[name])

            return SchedulingPreferences(**data)
        except Exception as e:
            logger.warning(f"Could not load preferences from {self.path}, using defaults: {e}")
            return SchedulingPreferences()

    def save(self, prefs: SchedulingPreferences) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

        data = prefs.model_dump()
        for name in TIME_FIELDS:
            if isinstance(data.get(name), time):
                data[name] = _time_to_str(data[name])

        self.path.write_text(
            json.dumps(data, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
