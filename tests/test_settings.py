import pytest

from jira_bot.core.errors import SettingsError
from jira_bot.core.settings import load_settings, parse_settings
from jira_bot.modules.registry import build_modules

YAML = """
credentials:
  server: https://jira.example.com/
  username: bot
  token: secret
issues:
  projects: [MC, MCPE]
  check_interval: 30
custom_fields:
  chk: customfield_10701
private_security_level:
  default: "10318"
  special:
    MCL: "10502"
modules:
  Privacy:
    whitelist: [MC]
    message: private now
    allowed_emails: [".+@mojang\\\\.com"]
  HideImpostors:
    whitelist: MCPE
"""


def test_load_settings_from_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML)
    settings = load_settings(path, env={})
    assert settings.credentials.username == "bot"
    assert settings.issues.projects == ["MC", "MCPE"]
    assert settings.issues.check_interval == 30
    assert settings.custom_fields.chk == "customfield_10701"
    assert settings.private_security_level.for_project("MCL") == "10502"
    assert settings.private_security_level.for_project("MC") == "10318"
    assert settings.whitelists() == {"Privacy": ["MC"], "HideImpostors": ["MCPE"]}
    assert settings.module("Privacy").get("message") == "private now"
    assert settings.module("Crash").whitelist == []


def test_env_credentials_override_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML)
    settings = load_settings(path, env={"JIRA_USERNAME": "envbot", "JIRA_API_TOKEN": "envtoken"})
    assert settings.credentials.username == "envbot"
    assert settings.credentials.token == "envtoken"


def test_missing_file_yields_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yaml", env={})
    assert settings.issues.projects == []
    assert settings.modules == {}


def test_malformed_settings_raise(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("issues: [unclosed")
    with pytest.raises(SettingsError):
        load_settings(path, env={})
    with pytest.raises(SettingsError):
        parse_settings({"modules": {"Privacy": ["MC"]}}, env={})


def test_registry_contains_every_module_in_order(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML)
    registry = build_modules(load_settings(path, env={}))
    assert list(registry)[0] == "Attachment"
    assert list(registry)[-1] == "Privacy"
    assert len(registry) == 13
    assert registry["Privacy"].message == "private now"
    assert not registry["Privacy"].matches_email("dev@mojang.com")


def test_private_level_required_where_privacy_runs():
    with pytest.raises(SettingsError, match="Privacy"):
        parse_settings({"modules": {"Privacy": {"whitelist": ["MC"]}}}, env={})
    with pytest.raises(SettingsError, match="KeepPrivate"):
        parse_settings(
            {
                "private_security_level": {"special": {"MCL": "10502"}},
                "modules": {"KeepPrivate": {"whitelist": ["MCL", "MC"]}},
            },
            env={},
        )
    settings = parse_settings(
        {"private_security_level": {"special": {"MCL": "10502"}}, "modules": {"Privacy": {"whitelist": ["MCL"]}}},
        env={},
    )
    assert settings.private_security_level.for_project("MCL") == "10502"
