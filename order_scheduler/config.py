"""Run configuration loaded from a YAML (or JSON) file.

Every key is optional; missing sections fall back to the defaults of the
original production line (calendar anchored at 2020-07-20, 06:00-22:00
working window, deadlines in 2020, amounts in Ft).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict

import yaml

from .work_calendar import WorkCalendar


@dataclass(frozen=True)
class SchedulerConfig:
    log_level: str = "INFO"
    log_file: str | None = None
    calendar: WorkCalendar = field(default_factory=WorkCalendar)
    deadline_year: int = 2020
    currency: str = "Ft"
    iter_log: str | None = None
    charts_enabled: bool = False
    charts_dir: str = "charts"


def _section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = cfg.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping")
    return value


def _as_int(section: Dict[str, Any], key: str, default: int, name: str) -> int:
    try:
        return int(section.get(key, default))
    except (TypeError, ValueError):
        raise ValueError(f"Config key '{name}.{key}' must be an integer") from None


def config_from_dict(cfg: Dict[str, Any]) -> SchedulerConfig:
    """Build a :class:`SchedulerConfig` from already parsed config data.

    Raises:
        ValueError: If a section is not a mapping or a value has the wrong type.
    """
    cal_cfg = _section(cfg, "calendar")
    input_cfg = _section(cfg, "input")
    output_cfg = _section(cfg, "output")
    search_cfg = _section(cfg, "search")
    charts_cfg = _section(cfg, "charts")

    start = cal_cfg.get("start", "2020-07-20")
    try:
        anchor = datetime.fromisoformat(str(start))
    except ValueError:
        raise ValueError(f"Config key 'calendar.start' is not an ISO date: {start!r}") from None

    calendar = WorkCalendar(
        anchor=anchor,
        day_start_hour=_as_int(cal_cfg, "day_start_hour", 6, "calendar"),
        window_hours=_as_int(cal_cfg, "window_hours", 16, "calendar"),
    )
    return SchedulerConfig(
        log_level=str(cfg.get("log_level", "INFO")).upper(),
        log_file=cfg.get("log_file"),
        calendar=calendar,
        deadline_year=_as_int(input_cfg, "deadline_year", 2020, "input"),
        currency=str(output_cfg.get("currency", "Ft") or ""),
        iter_log=search_cfg.get("iter_log"),
        charts_enabled=bool(charts_cfg.get("enabled", False)),
        charts_dir=str(charts_cfg.get("dir", "charts")),
    )


def load_config(config_file: str | None = None) -> SchedulerConfig:
    """Load configuration from a YAML/JSON file; defaults when no file given."""
    if config_file is None:
        return SchedulerConfig()
    if not os.path.isfile(config_file):
        raise FileNotFoundError(f"Config file not found: {config_file}")
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    if config_file.endswith((".yml", ".yaml")):
        cfg = yaml.safe_load(text) or {}
    else:
        cfg = json.loads(text)
    if not isinstance(cfg, dict):
        raise ValueError(f"Config file {config_file} must contain a mapping")
    return config_from_dict(cfg)
