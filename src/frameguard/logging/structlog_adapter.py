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
"""StructlogAdapter — structlog over stdlib logging, configured from ``frameguard.logging``.

Output goes to *stream* (stderr by default) so command output on stdout
stays clean.  Header decisions logged by the middleware are rendered as a
single ``Name: value; ...`` field rather than a nested mapping.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import MutableMapping
from typing import IO, Any

import structlog

from frameguard.config.properties.logging import LoggingProperties
from frameguard.core.config import Config
from frameguard.kernel.exceptions import ConfigurationException
from frameguard.web.header_policy import DECISION_LOGGER, HEADER_POLICY_APPLIED

_RENDERERS: dict[str, Any] = {
    "console": structlog.dev.ConsoleRenderer,
    "json": structlog.processors.JSONRenderer,
}


def render_header_decision(
    logger: Any, method_name: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """Flatten the ``headers`` mapping of a header-policy event."""
    if event_dict.get("event") == HEADER_POLICY_APPLIED and isinstance(event_dict.get("headers"), dict):
        headers = event_dict["headers"]
        event_dict["headers"] = "; ".join(f"{name}: {value}" for name, value in headers.items()) or "none"
    return event_dict


class StructlogAdapter:
    """Default :class:`~frameguard.logging.port.LoggingPort` implementation."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream
        self._properties = LoggingProperties()

    @property
    def properties(self) -> LoggingProperties:
        """Logging settings from the last :meth:`configure` call."""
        return self._properties

    def configure(self, config: Config) -> None:
        """Apply ``frameguard.logging``: renderer, root and per-logger levels.

        ``FRAMEGUARD_LOGGING_FORMAT`` overrides the configured format.

        Raises:
            ConfigurationException: unknown format, or invalid settings.
        """
        props = config.bind(LoggingProperties)
        fmt = str(config.get("frameguard.logging.format", props.format)).lower()
        if fmt not in _RENDERERS:
            raise ConfigurationException(
                f"Unknown logging format '{fmt}' (expected one of: {', '.join(_RENDERERS)})",
                code="CONFIG_LOGGING",
                context={"format": fmt},
            )
        self._properties = props.model_copy(update={"format": fmt})

        levels = {name: level.upper() for name, level in props.level.items()}
        root_level = levels.pop("root", "INFO")
        # the decision logger follows the root level unless asked otherwise
        levels.setdefault(DECISION_LOGGER, "NOTSET")
        if props.log_decisions:
            levels[DECISION_LOGGER] = "DEBUG"

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.stdlib.filter_by_level,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                render_header_decision,
                _RENDERERS[fmt](),
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=False,
        )
        logging.basicConfig(
            format="%(message)s",
            stream=self._stream or sys.stderr,
            level=self._level(root_level),
            force=True,
        )
        for name, level in levels.items():
            self.set_level(name, level)

    def get_logger(self, name: str) -> Any:
        return structlog.get_logger(name)

    def set_level(self, name: str, level: str) -> None:
        """Set a stdlib logger's level; unknown names fall back to INFO."""
        logging.getLogger(name).setLevel(self._level(level))

    @staticmethod
    def _level(name: str) -> int:
        level = logging.getLevelName(name.upper())
        return level if isinstance(level, int) else logging.INFO
