# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""User settings, layered loading, and reactive observation."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Final, Literal

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

SettingName = Literal["executable_path", "only_if_appropriate", "show_uncovered", "hyperclick_priority"]
SettingValue = str | bool | int
SettingCallback = Callable[[Any], None]

PROJECT_CONFIG_NAME: Final[str] = ".flowcov.toml"
PYPROJECT_NAME: Final[str] = "pyproject.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "flowcov"
ENV_PREFIX: Final[str] = "FLOWCOV_"
_TRUE_VALUES: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: Final[frozenset[str]] = frozenset({"0", "false", "no", "off", ""})


class Settings(BaseModel):
    """Process-wide settings controlling the coverage integration."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    executable_path: str = ""
    only_if_appropriate: bool = False
    show_uncovered: bool = False
    hyperclick_priority: int = 0


class _Subscription:
    """Disposable handle removing a callback from :class:`SettingsStore`."""

    def __init__(self, store: SettingsStore, name: SettingName, callback: SettingCallback) -> None:
        self._store = store
        self._name = name
        self._callback = callback

    def dispose(self) -> None:
        self._store._unsubscribe(self._name, self._callback)


class SettingsStore:
    """Hold the current :class:`Settings` and notify observers of changes.

    Core components never read this store directly; the package boundary
    subscribes to it and passes :meth:`snapshot` results into each lint call.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._observers: dict[str, list[SettingCallback]] = {}

    def snapshot(self) -> Settings:
        """Return an independent copy of the current settings."""
        return self._settings.model_copy()

    def get(self, name: SettingName) -> Any:
        return getattr(self._settings, name)

    def set(self, name: SettingName, value: SettingValue) -> None:
        """Update ``name`` and notify its observers when the value changed.

        Args:
            name: Setting to update.
            value: New value, validated against :class:`Settings`.

        Raises:
            ConfigError: If ``value`` is not valid for ``name``.
        """

        previous = getattr(self._settings, name)
        updated = self._settings.model_copy()
        try:
            setattr(updated, name, value)
        except ValidationError as exc:
            raise ConfigError(f"invalid value for {name}: {value!r}") from exc
        self._settings = updated
        current = getattr(updated, name)
        if current == previous:
            return
        LOGGER.debug("setting %s changed to %r", name, current)
        for callback in list(self._observers.get(name, ())):
            callback(current)

    def replace(self, settings: Settings) -> None:
        """Swap in ``settings`` wholesale, notifying observers of changed fields."""
        for name in Settings.model_fields:
            self.set(name, getattr(settings, name))  # type: ignore[arg-type]

    def observe(self, name: SettingName, callback: SettingCallback) -> _Subscription:
        """Invoke ``callback`` with the current value now and on every change.

        Args:
            name: Setting to observe.
            callback: Callable receiving the new value.

        Returns:
            _Subscription: Disposable that stops the observation.
        """

        if name not in Settings.model_fields:
            raise ConfigError(f"unknown setting '{name}'")
        self._observers.setdefault(name, []).append(callback)
        callback(getattr(self._settings, name))
        return _Subscription(self, name, callback)

    def _unsubscribe(self, name: SettingName, callback: SettingCallback) -> None:
        callbacks = self._observers.get(name, [])
        if callback in callbacks:
            callbacks.remove(callback)


def _read_toml(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"failed to parse {path}: {exc}") from exc


def _find_upward(start: Path, name: str) -> Path | None:
    for directory in (start, *start.parents):
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def _pyproject_fragment(root: Path) -> Mapping[str, Any]:
    path = _find_upward(root, PYPROJECT_NAME)
    if path is None:
        return {}
    section = _read_toml(path).get(PYPROJECT_TOOL_KEY, {}).get(PYPROJECT_SECTION_KEY, {})
    if not isinstance(section, Mapping):
        raise ConfigError(f"[tool.{PYPROJECT_SECTION_KEY}] in {path} must be a table")
    return section


def _project_fragment(root: Path) -> Mapping[str, Any]:
    path = _find_upward(root, PROJECT_CONFIG_NAME)
    return _read_toml(path) if path is not None else {}


def _coerce_env_bool(name: str, raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_fragment(env: Mapping[str, str]) -> dict[str, Any]:
    fragment: dict[str, Any] = {}
    for field_name, field in Settings.model_fields.items():
        key = f"{ENV_PREFIX}{field_name.upper()}"
        if key not in env:
            continue
        raw = env[key]
        if field.annotation is bool:
            fragment[field_name] = _coerce_env_bool(key, raw)
        else:
            fragment[field_name] = raw
    return fragment


def _normalise_keys(fragment: Mapping[str, Any]) -> dict[str, Any]:
    """Map camelCase keys onto field names so later layers override earlier ones."""
    by_alias = {to_camel(name): name for name in Settings.model_fields}
    return {by_alias.get(key, key): value for key, value in fragment.items()}


def load_settings(root: Path, *, env: Mapping[str, str] | None = None) -> Settings:
    """Resolve settings for ``root`` from defaults, files, and environment.

    Precedence, lowest first: built-in defaults, ``[tool.flowcov]`` in the
    nearest ``pyproject.toml``, the nearest ``.flowcov.toml``, then
    ``FLOWCOV_*`` environment variables.

    Args:
        root: Directory used as the starting point of the upward search.
        env: Environment mapping; defaults to :data:`os.environ`.

    Returns:
        Settings: Validated settings.

    Raises:
        ConfigError: If a source cannot be parsed or holds invalid values.
    """

    start = root.resolve()
    if start.is_file():
        start = start.parent
    merged: dict[str, Any] = {}
    for fragment in (
        _pyproject_fragment(start),
        _project_fragment(start),
        _env_fragment(env if env is not None else os.environ),
    ):
        merged.update(_normalise_keys(fragment))
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"invalid flowcov settings: {exc}") from exc


__all__ = [
    "PROJECT_CONFIG_NAME",
    "SettingName",
    "Settings",
    "SettingsStore",
    "load_settings",
]
