# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Layered frameguard configuration.

Files are merged in order (later wins) over the bundled
``frameguard-defaults.yaml``.  Reads go through :meth:`Config.get`, where a
``FRAMEGUARD_*`` environment variable overrides the file value and
``${NAME}`` / ``${NAME:default}`` placeholders are expanded from the
environment or from other config keys.
"""

from __future__ import annotations

import dataclasses
import importlib.resources
import os
import re
import tomllib
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any, TypeVar

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, ValidationError

from frameguard.kernel.exceptions import ConfigurationException

T = TypeVar("T")

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_PREFIX_ATTR = "__frameguard_config_prefix__"
_MAX_PLACEHOLDER_DEPTH = 10
_DEFAULTS_LABEL = "frameguard-defaults.yaml (framework defaults)"


def config_properties(prefix: str) -> Callable[[type[T]], type[T]]:
    """Bind a dataclass or Pydantic model to the config section at *prefix*."""

    def decorator(cls: type[T]) -> type[T]:
        setattr(cls, _PREFIX_ATTR, prefix)
        return cls

    return decorator


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(merged.get(key), dict) and isinstance(value, dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read(path: Path) -> dict[str, Any]:
    if path.suffix == ".toml":
        with open(path, "rb") as f:
            return tomllib.load(f)
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _read_defaults() -> dict[str, Any]:
    resource = importlib.resources.files("frameguard.resources").joinpath("frameguard-defaults.yaml")
    return yaml.safe_load(resource.read_text()) or {}


class Config:
    """Nested configuration data with dot-notation access."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data or {}
        self._loaded_sources: list[str] = []

    @property
    def loaded_sources(self) -> list[str]:
        """Files merged into this config, in merge order."""
        return list(self._loaded_sources)

    @classmethod
    def _load(cls, files: Iterable[tuple[Path, str]], load_defaults: bool) -> Config:
        data: dict[str, Any] = _read_defaults() if load_defaults else {}
        sources = [_DEFAULTS_LABEL] if load_defaults else []
        for path, label in files:
            if path.is_file():
                data = _merge(data, _read(path))
                sources.append(label)
        instance = cls(data)
        instance._loaded_sources = sources
        return instance

    @classmethod
    def from_sources(
        cls,
        base_dir: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Discover ``frameguard.{yaml,toml}`` under *base_dir*.

        ``config/`` is searched before *base_dir* itself, and every profile
        overlay ``frameguard-{profile}.*`` after the base files.
        """
        base_dir = Path(base_dir)
        stems = [("frameguard", "")] + [(f"frameguard-{p}", f" (profile: {p})") for p in active_profiles or []]
        files = []
        for stem, suffix in stems:
            for directory in (base_dir / "config", base_dir):
                for ext in (".yaml", ".toml"):
                    path = directory / f"{stem}{ext}"
                    files.append((path, f"{path}{suffix}"))
        return cls._load(files, load_defaults)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        active_profiles: list[str] | None = None,
        load_defaults: bool = True,
    ) -> Config:
        """Load one YAML or TOML file plus its ``{stem}-{profile}{suffix}`` overlays.

        A missing *path* yields the framework defaults only.
        """
        path = Path(path)
        files = [(path, str(path))]
        if path.is_file():
            for profile in active_profiles or []:
                overlay = path.with_name(f"{path.stem}-{profile}{path.suffix}")
                files.append((overlay, f"{overlay} (profile: {profile})"))
        return cls._load(files, load_defaults)

    def get(self, key: str, default: Any = None) -> Any:
        """Value at dot-notation *key*; ``FRAMEGUARD_<KEY>`` in the environment wins."""
        env_key = "FRAMEGUARD_" + key.removeprefix("frameguard.").upper().replace(".", "_").replace("-", "_")
        if env_key in os.environ:
            return os.environ[env_key]

        value = self._lookup(key)
        if value is None:
            return default
        return self.resolve(value) if isinstance(value, str) else value

    def get_section(self, prefix: str) -> dict[str, Any]:
        """Raw mapping under *prefix*; placeholders are left unexpanded."""
        section = self._lookup(prefix)
        return section if isinstance(section, dict) else {}

    def resolve(self, value: str) -> str:
        """Expand ``${...}`` placeholders in *value*.

        Raises:
            ConfigurationException: a placeholder has no value and no
                default, or references loop.
        """
        return self._expand(value, 0)

    def _lookup(self, key: str) -> Any:
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
        return current

    def _expand(self, value: str, depth: int) -> str:
        if "${" not in value:
            return value
        if depth > _MAX_PLACEHOLDER_DEPTH:
            raise ConfigurationException(
                f"Max recursion depth exceeded resolving placeholders in '{value}'. Check for circular references.",
                code="CONFIG_PLACEHOLDER",
                context={"value": value},
            )

        def _replace(match: re.Match[str]) -> str:
            name, has_default, fallback = match.group(1).partition(":")
            if name in os.environ:
                return os.environ[name]
            found = self._lookup(name)
            if found is not None:
                return self._expand(str(found), depth + 1)
            if has_default:
                return fallback
            raise ConfigurationException(
                f"Cannot resolve placeholder '${{{match.group(1)}}}': not found in environment or config",
                code="CONFIG_PLACEHOLDER",
                context={"placeholder": match.group(1)},
            )

        return _PLACEHOLDER_RE.sub(_replace, value)

    def bind(self, config_cls: type[T]) -> T:
        """Instantiate a ``@config_properties`` class from its section.

        Pydantic models are validated; dataclasses take the matching keys as-is.
        """
        prefix = getattr(config_cls, _PREFIX_ATTR, None)
        if prefix is None:
            raise ConfigurationException(
                f"{config_cls.__name__} is not decorated with @config_properties",
                code="CONFIG_BIND",
            )

        section = self.get_section(prefix)
        if issubclass(config_cls, BaseModel):
            try:
                return config_cls.model_validate(section)
            except ValidationError as exc:
                raise ConfigurationException(
                    f"Configuration validation failed for '{config_cls.__name__}' (prefix='{prefix}'):\n{exc}",
                    code="CONFIG_BIND",
                    context={"prefix": prefix},
                ) from exc

        names = {field.name for field in dataclasses.fields(config_cls)}  # type: ignore[arg-type]
        return config_cls(**{k: v for k, v in section.items() if k in names})
