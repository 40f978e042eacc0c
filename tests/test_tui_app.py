from types import SimpleNamespace

from taskdash.config import Settings
from taskdash.interface import tui_app
from taskdash.interface.tui_app import DashboardTUI

from fakes import FakeTracker


def _dashboard(monkeypatch, settings, **kwargs):
    monkeypatch.setattr(tui_app, "Screen", lambda style: SimpleNamespace(size=lambda: (80, 24)))
    monkeypatch.setattr(tui_app, "HistoryStore", lambda: SimpleNamespace(load=dict))
    return DashboardTUI(settings, tracker=FakeTracker(), **kwargs)


def test_collaborators_share_the_command_timeout(monkeypatch):
    dash = _dashboard(monkeypatch, Settings(command_timeout=3.5, report="list"))
    assert dash.engine.shortcuts.timeout == 3.5
    assert dash.backend.timeout == 3.5
    assert dash.backend.report == "list"
    assert dash.background.timeout == 3.5
