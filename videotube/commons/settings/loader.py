"""Layered settings loading: JSON files overridden by environment variables."""

import json
import os
from pathlib import Path
from typing import Any

from videotube.commons.settings.models import Settings

ENV_PREFIX = "VIDEOTUBE__"


class SettingsLoader:
    """Builds a ``Settings`` instance from several sources.

    Later sources win:
    1. ``config/appsettings.json``
    2. ``config/appsettings.{environment}.json``
    3. ``VIDEOTUBE__SECTION__KEY`` environment variables
    """

    def __init__(
        self,
        config_dir: Path | None = None,
        environment: str | None = None,
    ) -> None:
        """Initialize the loader.

        Args:
            config_dir: Directory holding the JSON files. Defaults to
                ``VIDEOTUBE__CONFIG_DIR`` or ``./config``.
            environment: Environment name. Defaults to
                ``VIDEOTUBE__APP__ENVIRONMENT`` or ``dev``.
        """
        self.config_dir = config_dir or Path(
            os.getenv(f"{ENV_PREFIX}CONFIG_DIR", "config")
        )
        self.environment = environment or os.getenv(
            f"{ENV_PREFIX}APP__ENVIRONMENT", "dev"
        )

    def load(self) -> Settings:
        """Resolve all sources into a validated ``Settings``."""
        merged: dict[str, Any] = {}
        for layer in (
            self._read_json("appsettings.json"),
            self._read_json(f"appsettings.{self.environment}.json"),
            self._env_overrides(),
        ):
            merged = deep_merge(merged, layer)
        return Settings(**merged)

    def _env_overrides(self) -> dict[str, Any]:
        """Turn ``VIDEOTUBE__BLOB_STORAGE__BUCKET=x`` into nested dicts."""
        overrides: dict[str, Any] = {}
        for name, raw in os.environ.items():
            if not name.startswith(ENV_PREFIX) or name == f"{ENV_PREFIX}CONFIG_DIR":
                continue
            path = name[len(ENV_PREFIX) :].lower().split("__")
            node = overrides
            for part in path[:-1]:
                node = node.setdefault(part, {})
            node[path[-1]] = coerce_env_value(raw)
        return overrides

    def _read_json(self, filename: str) -> dict[str, Any]:
        path = self.config_dir / filename
        if not path.exists():
            return {}
        with path.open(encoding="utf-8") as f:
            return dict(json.load(f))


def coerce_env_value(value: str) -> Any:
    """Best-effort conversion of an environment string to a JSON-ish value."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    for cast in (int, float):
        try:
            return cast(value)
        except ValueError:
            pass
    if value.startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            pass
    return value


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = base.copy()
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result


class _SettingsHolder:
    instance: Settings | None = None


def get_settings(
    config_dir: Path | None = None,
    environment: str | None = None,
    *,
    reload: bool = False,
) -> Settings:
    """Return the process-wide settings, loading them on first use."""
    if _SettingsHolder.instance is None or reload:
        loader = SettingsLoader(config_dir=config_dir, environment=environment)
        _SettingsHolder.instance = loader.load()
    return _SettingsHolder.instance


def reset_settings() -> None:
    """Forget the cached settings. Used by tests."""
    _SettingsHolder.instance = None
