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
"""Key-value property lookup consulted on every request.

A :class:`LayeredPropertyResolver` checks its sources in order and returns
the first value found.  The standard stack built by
:func:`default_property_resolver` is, highest precedence first:

1. :class:`SystemProperties` — in-process overrides (``-D key=value``)
2. :class:`InitParameters` — the deployment's config file section
3. :class:`EnvironmentProperties` — process environment variables

Every source is read live; nothing is cached between lookups.
"""

from __future__ import annotations

import os
from collections.abc import Iterable, Iterator, Mapping
from typing import Protocol, runtime_checkable

from frameguard.core.config import Config
from frameguard.kernel.exceptions import ConfigurationException

INIT_PARAMS_PREFIX = "frameguard.init_params"


@runtime_checkable
class PropertySource(Protocol):
    """Port for a single source of string-valued properties."""

    def get_property(self, key: str) -> str | None:
        """Return the raw value for *key*, or ``None`` when this source has none."""
        ...


class SystemProperties:
    """Mutable in-process property overrides.

    Holds plain ``str`` values; callers replace whole values, so concurrent
    readers never see a partially written entry.
    """

    def __init__(self, values: Mapping[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    @classmethod
    def from_definitions(cls, definitions: Iterable[str]) -> SystemProperties:
        """Build from ``key=value`` strings as passed to ``-D`` options.

        The value may be empty (``key=``) or contain further ``=`` signs.
        """
        values: dict[str, str] = {}
        for definition in definitions:
            key, sep, value = definition.partition("=")
            key = key.strip()
            if not sep or not key:
                raise ConfigurationException(
                    f"Invalid property definition '{definition}': expected key=value",
                    code="CONFIG_DEFINITION",
                    context={"definition": definition},
                )
            values[key] = value
        return cls(values)

    def get_property(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)

    def clear(self) -> None:
        self._values.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(dict(self._values))

    def __len__(self) -> int:
        return len(self._values)


class InitParameters:
    """Properties declared under ``frameguard.init_params`` in the loaded config.

    Keys are matched verbatim, so dotted names such as
    ``geoserver.xframe.policy`` are written as quoted flat keys.  String
    values may carry ``${NAME:default}`` placeholders, expanded on each read.
    """

    def __init__(self, config: Config, prefix: str = INIT_PARAMS_PREFIX) -> None:
        self._config = config
        self._prefix = prefix

    def get_property(self, key: str) -> str | None:
        value = self._config.get_section(self._prefix).get(key)
        if value is None:
            return None
        # YAML parses bare true/false into bools
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str) and "${" in value:
            return self._config.resolve(value)
        return str(value)


class EnvironmentProperties:
    """Environment variables looked up by the exact property name."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get_property(self, key: str) -> str | None:
        environ = os.environ if self._environ is None else self._environ
        return environ.get(key)


class LayeredPropertyResolver:
    """Resolves a key against several sources; the first non-``None`` value wins.

    An empty string still counts as found.  Interpreting it is up to the
    caller.  Exceptions raised by a source are not caught.
    """

    def __init__(self, *sources: PropertySource) -> None:
        self._sources = list(sources)

    @property
    def sources(self) -> list[PropertySource]:
        return list(self._sources)

    def get_property(self, key: str) -> str | None:
        for source in self._sources:
            value = source.get_property(key)
            if value is not None:
                return value
        return None


def default_property_resolver(
    config: Config | None = None,
    system_properties: SystemProperties | None = None,
) -> LayeredPropertyResolver:
    """Build the standard system-property / init-parameter / environment resolver."""
    return LayeredPropertyResolver(
        system_properties if system_properties is not None else SystemProperties(),
        InitParameters(config if config is not None else Config()),
        EnvironmentProperties(),
    )
