from datetime import timedelta
from pathlib import Path

import pytest
from pydantic import ValidationError

from orderdesk.core.config import EnvironmentMode, ReportDispatch, Settings


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def test_defaults():
    settings = make_settings()

    assert settings.env_mode == EnvironmentMode.DEVELOPMENT
    assert settings.api_port == 3000
    assert settings.report_dispatch == ReportDispatch.INLINE
    assert settings.archive_period == timedelta(hours=24)
    assert settings.archive_at is None
    assert not settings.cook_auth_enabled


def test_paths_live_under_the_data_directory():
    settings = make_settings(data_directory="/srv/orderdesk")

    assert settings.menu_path.parent == Path("/srv/orderdesk")
    assert settings.history_path.parent == Path("/srv/orderdesk")
    assert settings.reports_path == Path("/srv/orderdesk/reports")


def test_environment_variables_are_read(monkeypatch):
    monkeypatch.setenv("ADMIN_USER", "boss")
    monkeypatch.setenv("ADMIN_PASS", "hunter2")
    monkeypatch.setenv("ARCHIVE_INTERVAL_HOURS", "0.5")

    settings = make_settings()

    assert settings.admin_user == "boss"
    assert settings.admin_pass == "hunter2"
    assert settings.archive_period == timedelta(minutes=30)


@pytest.mark.parametrize("value, expected", [("CELERY", ReportDispatch.CELERY), ("inline", ReportDispatch.INLINE)])
def test_report_dispatch_is_case_insensitive(value, expected):
    assert make_settings(report_dispatch=value).report_dispatch == expected


def test_unknown_report_dispatch():
    with pytest.raises(ValidationError):
        make_settings(report_dispatch="carrier-pigeon")


@pytest.mark.parametrize("value", ["00:00", "07:30", "23:59"])
def test_archive_at_accepts_wall_clock_times(value):
    assert make_settings(archive_at=value).archive_at == value


def test_blank_archive_at_means_interval():
    assert make_settings(archive_at="").archive_at is None


@pytest.mark.parametrize("value", ["24:00", "7:30", "23:60", "noon"])
def test_archive_at_rejects_bad_times(value):
    with pytest.raises(ValidationError):
        make_settings(archive_at=value)


def test_archive_interval_must_be_positive():
    with pytest.raises(ValidationError):
        make_settings(archive_interval_hours=0)


def test_cors_origins_list():
    settings = make_settings(cors_origins="https://a.example, https://b.example,")
    assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


def test_cook_auth_needs_both_values():
    assert not make_settings(cook_user="cook").cook_auth_enabled
    assert make_settings(cook_user="cook", cook_pass="kitchen").cook_auth_enabled


def test_production_requires_admin_credentials():
    assert make_settings(env_mode="production").validate_production_config() == ["ADMIN_USER", "ADMIN_PASS"]
    assert make_settings(env_mode="production", admin_user="a", admin_pass="b").validate_production_config() == []
    assert make_settings(env_mode="development").validate_production_config() == []
