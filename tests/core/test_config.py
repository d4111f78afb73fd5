from __future__ import annotations

from topgamescore.core.config import Settings


def test_settings_defaults_match_free_plan_limits(monkeypatch) -> None:
    monkeypatch.delenv("FREE_QUESTION_LIMIT", raising=False)
    monkeypatch.delenv("FREE_GROUP_TTL_DAYS", raising=False)
    monkeypatch.delenv("DEFAULT_MAX_TIME_SEC", raising=False)

    settings = Settings(_env_file=None)

    assert settings.free_question_limit == 10
    assert settings.free_group_ttl_days == 7
    assert settings.default_max_time_sec == 20


def test_settings_read_environment_aliases(monkeypatch) -> None:
    monkeypatch.setenv("FREE_QUESTION_LIMIT", "5")
    monkeypatch.setenv("PLAYER_TICK_INTERVAL_MS", "100")

    settings = Settings(_env_file=None)

    assert settings.free_question_limit == 5
    assert settings.player_tick_interval_ms == 100
