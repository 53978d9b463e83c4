import importlib

import pytest

from config import get_settings_module
from src.crm_core.crm_core.core.enums import LeaveCategory
from src.crm_core.crm_core.leave.ledger import QuotaPolicy


@pytest.mark.parametrize(
    "env, expected",
    [
        ("production", "config.production"),
        ("prod", "config.production"),
        ("testing", "config.testing"),
        ("development", "config.development"),
        ("anything-else", "config.development"),
    ],
)
def test_settings_module_follows_app_env(monkeypatch, env, expected):
    monkeypatch.setenv("APP_ENV", env)
    assert get_settings_module() == expected


def test_allowance_table_is_read_from_environment(monkeypatch):
    monkeypatch.setenv("SICK_ALLOWANCE_DAYS", "3")
    from config import config as base

    policy = QuotaPolicy.from_settings(base.leave_allowances())

    assert policy.allowance_for(LeaveCategory.SICK) == 3
    assert policy.allowance_for(LeaveCategory.VACATION) == 5


def test_testing_settings():
    settings = importlib.import_module("config.testing")

    assert settings.TESTING is True
    assert settings.DB_CONFIG["database"]
    assert settings.LEAVE_ALLOWANCES == {"SICK": 2, "VACATION": 5}
