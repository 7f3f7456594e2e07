"""Load bot settings from YAML (with fallbacks) and credential env vars."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .config import (
    CONFIG_PATH_ENV,
    DEFAULT_CHECK_INTERVAL_SECONDS,
    DEFAULT_CONFIG_PATH,
    DEFAULT_MAX_WORKERS,
    JIRA_DEFAULT_SERVER,
    PRIVATE_LEVEL_MODULES,
)
from .errors import SettingsError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Credentials:
    server: str = JIRA_DEFAULT_SERVER
    username: str = ""
    token: str = ""


@dataclass(slots=True)
class IssueSettings:
    projects: list[str] = field(default_factory=list)
    check_interval: int = DEFAULT_CHECK_INTERVAL_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS


@dataclass(slots=True)
class CustomFields:
    chk: str | None = None
    confirmation: str | None = None
    mojang_priority: str | None = None
    triaged_time: str | None = None


@dataclass(slots=True)
class PrivateSecurityLevel:
    default: str = ""
    special: dict[str, str] = field(default_factory=dict)

    def for_project(self, project_key: str | None) -> str:
        if project_key and project_key in self.special:
            return self.special[project_key]
        return self.default


@dataclass(slots=True)
class ModuleSettings:
    whitelist: list[str] = field(default_factory=list)
    options: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        value = self.options.get(key)
        return default if value is None else value


@dataclass(slots=True)
class BotSettings:
    credentials: Credentials = field(default_factory=Credentials)
    issues: IssueSettings = field(default_factory=IssueSettings)
    custom_fields: CustomFields = field(default_factory=CustomFields)
    private_security_level: PrivateSecurityLevel = field(default_factory=PrivateSecurityLevel)
    modules: dict[str, ModuleSettings] = field(default_factory=dict)

    def module(self, name: str) -> ModuleSettings:
        return self.modules.get(name) or ModuleSettings()

    def whitelists(self) -> dict[str, list[str]]:
        return {name: list(mod.whitelist) for name, mod in self.modules.items()}


def _section(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key) or {}
    if not isinstance(value, Mapping):
        raise SettingsError(f"Section '{key}' must be a mapping, got {type(value).__name__}")
    return dict(value)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def parse_settings(data: Mapping[str, Any], env: Mapping[str, str] | None = None) -> BotSettings:
    env = os.environ if env is None else env

    creds = _section(data, "credentials")
    credentials = Credentials(
        server=env.get("JIRA_SERVER") or creds.get("server") or JIRA_DEFAULT_SERVER,
        username=env.get("JIRA_USERNAME") or creds.get("username") or "",
        token=(
            env.get("JIRA_API_TOKEN")
            or env.get("JIRA_PASSWORD")
            or creds.get("token")
            or creds.get("password")
            or ""
        ),
    )

    issues_raw = _section(data, "issues")
    issues = IssueSettings(
        projects=_as_list(issues_raw.get("projects")),
        check_interval=int(issues_raw.get("check_interval", DEFAULT_CHECK_INTERVAL_SECONDS)),
        max_workers=int(issues_raw.get("max_workers", DEFAULT_MAX_WORKERS)),
    )

    cf = _section(data, "custom_fields")
    custom_fields = CustomFields(
        chk=cf.get("chk"),
        confirmation=cf.get("confirmation"),
        mojang_priority=cf.get("mojang_priority"),
        triaged_time=cf.get("triaged_time"),
    )

    psl = _section(data, "private_security_level")
    private_level = PrivateSecurityLevel(
        default=str(psl.get("default") or ""),
        special={str(k): str(v) for k, v in (psl.get("special") or {}).items()},
    )

    modules: dict[str, ModuleSettings] = {}
    for name, raw in _section(data, "modules").items():
        if raw is None:
            raw = {}
        if not isinstance(raw, Mapping):
            raise SettingsError(f"Module '{name}' settings must be a mapping")
        options = {k: v for k, v in raw.items() if k != "whitelist"}
        modules[str(name)] = ModuleSettings(whitelist=_as_list(raw.get("whitelist")), options=options)

    for name in PRIVATE_LEVEL_MODULES:
        module = modules.get(name)
        for project in module.whitelist if module else ():
            if not private_level.for_project(project):
                raise SettingsError(
                    f"Module '{name}' is enabled for {project} but no private security level is set"
                )

    return BotSettings(
        credentials=credentials,
        issues=issues,
        custom_fields=custom_fields,
        private_security_level=private_level,
        modules=modules,
    )


def load_settings(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> BotSettings:
    env = os.environ if env is None else env
    config_path = Path(path or env.get(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        logger.warning("Config file %s not found, using defaults", config_path)
        return parse_settings({}, env)
    try:
        data = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise SettingsError(f"{config_path} must contain a mapping at the top level")
    return parse_settings(data, env)
