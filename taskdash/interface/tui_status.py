"""Status bar builder for the dashboard."""

from datetime import datetime, timezone
from typing import List, Optional, Tuple

from taskdash.application.modes import ModeKind
from taskdash.interface.constants import TIME_FORMAT
from taskdash.interface.tui_columns import vague_delta


def _tracking_text(app, t, now: datetime) -> str:
    active = app.tracking.active
    if active is None:
        return ""
    if active.start is None:
        return t("STATUS_TRACKING", count=len(active.uuids))
    return t(
        "STATUS_TRACKING_SINCE",
        count=len(active.uuids),
        start=active.start.astimezone().strftime(TIME_FORMAT),
        duration=vague_delta((now - active.start).total_seconds(), precise=True),
    )


def build_status_text(app, t, now: Optional[datetime] = None) -> List[Tuple[str, str]]:
    table = app.table
    now = now or datetime.now(timezone.utc)
    parts: List[Tuple[str, str]] = [
        ("class:status.bar class:header", f" {app.mode.kind.value.upper()} "),
        ("class:status.bar", f" {t('FILTER_LABEL')}: {table.filter_text or '-'} "),
        ("class:status.bar class:text.dim", f"| {t('STATUS_COUNTS', visible=len(table.visible), marked=len(table.marked))} "),
    ]
    tracking = _tracking_text(app, t, now)
    if tracking:
        parts.append(("class:status.bar class:active", f"| {tracking} "))
    if app.mode.kind == ModeKind.SHORTCUT:
        parts.append(("class:status.bar class:status.info", f"| {t('RUNNING_SHORTCUT')} "))
    elif app.status_message:
        style = "class:status.error" if app.status_is_error else "class:status.info"
        parts.append((f"class:status.bar {style}", f"| {app.status_message} "))
    return parts


__all__ = ["build_status_text"]
