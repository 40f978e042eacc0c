from __future__ import annotations

import os
import yaml
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

USER_CONFIG_PATH = Path(os.environ.get("TASKDASH_CONFIG", Path.home() / ".taskdash_config.yaml"))
CACHE_DIR = Path(os.environ.get("TASKDASH_CACHE_DIR", Path.home() / ".cache" / "taskdash"))

COMPLETION_SCOPES = ("visible", "all")


@dataclass(frozen=True)
class TimewarriorSettings:
    enabled: bool = True
    tag_prefix: str = ""
    include_project: bool = True
    include_description: bool = False
    manage_intervals: bool = False


@dataclass(frozen=True)
class Settings:
    """Behaviour flags, read once at startup and never reloaded."""

    looping: bool = True
    confirm_delete: bool = True
    confirm_done: bool = False
    confirm_undo: bool = True
    confirm_modify: bool = True
    auto_insert_quotes: bool = True
    reset_filter_on_esc: bool = False
    tracking_ttl: float = 5.0
    tick_rate_ms: int = 250
    completion_scope: str = "visible"
    command_timeout: float = 10.0
    default_filter: str = "status:pending"
    report: str = "next"
    sort: str = ""
    shortcuts: Dict[str, str] = field(default_factory=dict)
    keys: Dict[str, str] = field(default_factory=dict)
    background_process: str = ""
    background_period: float = 60.0
    timewarrior: TimewarriorSettings = field(default_factory=TimewarriorSettings)
    theme: str = "dark-olive"
    lang: str = ""
    log_level: str = "INFO"


def _load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    target = path or USER_CONFIG_PATH
    if not target.exists():
        return {}
    try:
        data = yaml.safe_load(target.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return data if isinstance(data, dict) else {}


def _pick(data: Dict[str, Any], key: str, default: Any) -> Any:
    """Return ``data[key]`` when it has the default's type, else the default."""
    value = data.get(key, default)
    if isinstance(default, bool):
        return value if isinstance(value, bool) else default
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return float(value)
        return default
    if isinstance(default, int):
        return value if isinstance(value, int) and not isinstance(value, bool) and value > 0 else default
    if isinstance(default, str):
        return value if isinstance(value, str) else default
    return value


def _string_map(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items() if v not in (None, "")}


def settings_from_dict(data: Dict[str, Any]) -> Settings:
    base = Settings()
    confirm = data.get("confirm") if isinstance(data.get("confirm"), dict) else {}
    tw_raw = data.get("timewarrior") if isinstance(data.get("timewarrior"), dict) else {}
    tw_base = TimewarriorSettings()
    scope = _pick(data, "completion_scope", base.completion_scope)
    return Settings(
        looping=_pick(data, "looping", base.looping),
        confirm_delete=_pick(confirm, "delete", base.confirm_delete),
        confirm_done=_pick(confirm, "done", base.confirm_done),
        confirm_undo=_pick(confirm, "undo", base.confirm_undo),
        confirm_modify=_pick(confirm, "modify", base.confirm_modify),
        auto_insert_quotes=_pick(data, "auto_insert_quotes", base.auto_insert_quotes),
        reset_filter_on_esc=_pick(data, "reset_filter_on_esc", base.reset_filter_on_esc),
        tracking_ttl=_pick(data, "tracking_ttl", base.tracking_ttl),
        tick_rate_ms=_pick(data, "tick_rate_ms", base.tick_rate_ms),
        completion_scope=scope if scope in COMPLETION_SCOPES else base.completion_scope,
        command_timeout=_pick(data, "command_timeout", base.command_timeout),
        default_filter=_pick(data, "default_filter", base.default_filter),
        report=_pick(data, "report", base.report).strip() or base.report,
        sort=_pick(data, "sort", base.sort).strip(),
        shortcuts=_string_map(data.get("shortcuts")),
        keys=_string_map(data.get("keys")),
        background_process=_pick(data, "background_process", base.background_process),
        background_period=_pick(data, "background_period", base.background_period),
        timewarrior=TimewarriorSettings(
            enabled=_pick(tw_raw, "enabled", tw_base.enabled),
            tag_prefix=_pick(tw_raw, "tag_prefix", tw_base.tag_prefix),
            include_project=_pick(tw_raw, "include_project", tw_base.include_project),
            include_description=_pick(tw_raw, "include_description", tw_base.include_description),
            manage_intervals=_pick(tw_raw, "manage_intervals", tw_base.manage_intervals),
        ),
        theme=_pick(data, "theme", base.theme),
        lang=_pick(data, "lang", base.lang).strip(),
        log_level=_pick(data, "log_level", base.log_level).upper(),
    )


def load_settings(path: Optional[Path] = None) -> Settings:
    data = _load_config(path)
    env_level = os.getenv("TASKDASH_LOG_LEVEL")
    if env_level:
        data["log_level"] = env_level
    return settings_from_dict(data)
