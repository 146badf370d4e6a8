"""Settings for the kubenav toolkit.

Defaults are overlaid by ``<home>/config.toml`` and then by ``KUBENAV_*``
environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

try:
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError as exc:  # pragma: no cover - Python < 3.11 guard
    raise SystemExit("python 3.11+ is required to load kubenav config files") from exc

from .errors import ConfigError

ENV_HOME = "KUBENAV_HOME"
ENV_KUBECTL = "KUBENAV_KUBECTL"
ENV_FZF = "KUBENAV_FZF"
ENV_TIMEOUT = "KUBENAV_TIMEOUT"
DEFAULT_HOME = Path.home() / ".kubenav"
DEFAULT_TIMEOUT_SECS = 20
CONFIG_FILE_NAME = "config.toml"


@dataclass(slots=True)
class Settings:
    """Resolved locations and external tool settings."""

    home: Path
    kubeconfig_dir: Path
    kubectl: str = "kubectl"
    fzf: str = "fzf"
    command_timeout: int = DEFAULT_TIMEOUT_SECS

    @property
    def registry_path(self) -> Path:
        return self.home / "context_map"

    @property
    def selection_path(self) -> Path:
        return self.home / "current"

    @property
    def namespace_dir(self) -> Path:
        return self.home / "namespaces"

    @property
    def config_path(self) -> Path:
        return self.home / CONFIG_FILE_NAME

    @classmethod
    def for_home(cls, home: Path) -> "Settings":
        return cls(home=home, kubeconfig_dir=home / "kubeconfigs")


def _expand_path(value: str, *, base: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _parse_timeout(raw: object, *, source: str) -> int:
    try:
        timeout = int(str(raw))
    except ValueError as error:
        raise ConfigError(f"{source} must be an integer (received {raw!r}).") from error
    if timeout <= 0:
        raise ConfigError(f"{source} must be greater than zero (received {timeout}).")
    return timeout


def _apply_config_file(settings: Settings, path: Path) -> None:
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as error:
        raise ConfigError(f"Invalid config file {path}: {error}") from error

    base_dir = path.parent
    kubectl_section = data.get("kubectl", {})
    if not isinstance(kubectl_section, dict):
        raise ConfigError("[kubectl] must be a table.")
    if kubectl_section.get("binary"):
        settings.kubectl = str(kubectl_section["binary"])
    if kubectl_section.get("timeout") is not None:
        settings.command_timeout = _parse_timeout(
            kubectl_section["timeout"], source="kubectl.timeout"
        )

    selector_section = data.get("selector", {})
    if isinstance(selector_section, dict) and selector_section.get("binary"):
        settings.fzf = str(selector_section["binary"])

    paths_section = data.get("paths", {})
    if isinstance(paths_section, dict) and paths_section.get("kubeconfig_dir"):
        settings.kubeconfig_dir = _expand_path(
            str(paths_section["kubeconfig_dir"]), base=base_dir
        )


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env

    raw_home = env.get(ENV_HOME)
    home = Path(raw_home).expanduser().absolute() if raw_home else DEFAULT_HOME
    settings = Settings.for_home(home)

    if settings.config_path.is_file():
        _apply_config_file(settings, settings.config_path)

    if env.get(ENV_KUBECTL):
        settings.kubectl = env[ENV_KUBECTL]
    if env.get(ENV_FZF):
        settings.fzf = env[ENV_FZF]
    raw_timeout = env.get(ENV_TIMEOUT)
    if raw_timeout not in (None, ""):
        settings.command_timeout = _parse_timeout(raw_timeout, source=ENV_TIMEOUT)
    return settings
