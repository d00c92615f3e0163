"""Configuration loading utilities for the front office simulation."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

import yaml


DEFAULT_SETTINGS_PATH = Path(__file__).parent / "data" / "settings.yaml"


@dataclass(frozen=True)
class Settings:
    """Typed view over the settings YAML file."""

    season_weeks: int
    end_of_season_week: int
    campaign_seed: int
    mood_decay_rate: float
    mood_neutral_value: int
    mood_recent_events_cap: int
    mood_weekly_history_cap: int
    compliance_history_cap: int
    patience_history_cap: int
    expectations_history_cap: int
    ownership_history_cap: int
    ownership_change_base: float
    ownership_change_per_year: float
    ownership_change_cap: float

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Settings":
        season_cfg = data.get("season", {})
        mood_cfg = data.get("mood", {})
        history_cfg = data.get("history_caps", {})
        ownership_cfg = data.get("ownership_change", {})
        return Settings(
            season_weeks=int(season_cfg.get("regular_season_weeks", 17)),
            end_of_season_week=int(season_cfg.get("end_of_season_week", 18)),
            campaign_seed=int(data.get("campaign_seed", 1)),
            mood_decay_rate=float(mood_cfg.get("decay_rate", 0.1)),
            mood_neutral_value=int(mood_cfg.get("neutral_value", 50)),
            mood_recent_events_cap=int(mood_cfg.get("recent_events", 10)),
            mood_weekly_history_cap=int(mood_cfg.get("weekly_history", 17)),
            compliance_history_cap=int(history_cfg.get("compliance", 100)),
            patience_history_cap=int(history_cfg.get("patience", 120)),
            expectations_history_cap=int(history_cfg.get("expectations", 25)),
            ownership_history_cap=int(history_cfg.get("ownership", 250)),
            ownership_change_base=float(ownership_cfg.get("base", 0.008)),
            ownership_change_per_year=float(ownership_cfg.get("per_year_after_ten", 0.002)),
            ownership_change_cap=float(ownership_cfg.get("cap", 0.05)),
        )


class SettingsLoader:
    """Loads and caches settings from YAML configuration files."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or DEFAULT_SETTINGS_PATH
        self._cache: Settings | None = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self, force: bool = False) -> Settings:
        if self._cache is not None and not force:
            return self._cache
        with self._path.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        self._cache = Settings.from_dict(data)
        return self._cache


def get_settings() -> Settings:
    """Convenience accessor for default settings."""

    return SettingsLoader().load()


__all__ = ["DEFAULT_SETTINGS_PATH", "Settings", "SettingsLoader", "get_settings"]
