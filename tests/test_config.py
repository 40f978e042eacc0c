from taskdash.config import Settings, load_settings, settings_from_dict
from taskdash.interface.i18n import effective_lang


def test_missing_file_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("TASKDASH_LOG_LEVEL", raising=False)
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings == Settings()


def test_yaml_values_are_applied(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text(
        "\n".join(
            [
                "looping: false",
                "confirm:",
                "  done: true",
                "  delete: false",
                "tracking_ttl: 2",
                "completion_scope: all",
                "shortcuts:",
                "  '1': ~/bin/report.sh",
                "keys:",
                "  done: D",
                "timewarrior:",
                "  tag_prefix: 'tw:'",
                "  manage_intervals: true",
            ]
        ),
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.looping is False
    assert settings.confirm_done is True
    assert settings.confirm_delete is False
    assert settings.tracking_ttl == 2.0
    assert settings.completion_scope == "all"
    assert settings.shortcuts == {"1": "~/bin/report.sh"}
    assert settings.keys == {"done": "D"}
    assert settings.timewarrior.tag_prefix == "tw:"
    assert settings.timewarrior.manage_intervals is True


def test_wrong_types_fall_back_per_key():
    settings = settings_from_dict(
        {"looping": "yes", "tick_rate_ms": -5, "completion_scope": "galaxy", "confirm": "nope", "theme": "dark-contrast"}
    )
    base = Settings()
    assert settings.looping == base.looping
    assert settings.tick_rate_ms == base.tick_rate_ms
    assert settings.completion_scope == "visible"
    assert settings.confirm_delete == base.confirm_delete
    assert settings.theme == "dark-contrast"


def test_broken_yaml_gives_defaults(tmp_path, monkeypatch):
    monkeypatch.delenv("TASKDASH_LOG_LEVEL", raising=False)
    path = tmp_path / "cfg.yaml"
    path.write_text("looping: [unclosed", encoding="utf-8")
    assert load_settings(path) == Settings()


def test_log_level_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("TASKDASH_LOG_LEVEL", "debug")
    assert load_settings(tmp_path / "absent.yaml").log_level == "DEBUG"


def test_lang_comes_from_the_given_config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("TASKDASH_LANG", raising=False)
    path = tmp_path / "cfg.yaml"
    path.write_text("lang: ru\n", encoding="utf-8")
    settings = load_settings(path)
    assert settings.lang == "ru"
    assert effective_lang(settings.lang) == "ru"


def test_report_sort_and_modify_confirmation():
    settings = settings_from_dict({"report": "list", "sort": "due+,urgency-", "confirm": {"modify": False}})
    assert settings.report == "list"
    assert settings.sort == "due+,urgency-"
    assert settings.confirm_modify is False
    base = Settings()
    assert (base.report, base.sort, base.confirm_modify) == ("next", "", True)
    assert settings_from_dict({"report": "  "}).report == "next"
