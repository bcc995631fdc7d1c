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
"""Logging configuration properties."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from frameguard.core.config import config_properties


@config_properties(prefix="frameguard.logging")
class LoggingProperties(BaseModel):
    """Configuration for logging (frameguard.logging.*).

    ``log_decisions`` turns on the ``frameguard.web`` debug event that records
    the headers chosen for each request, whatever the root level.
    """

    format: str = "console"
    level: dict[str, str] = Field(default_factory=lambda: {"root": "INFO"})
    log_decisions: bool = False

    @field_validator("format", mode="before")
    @classmethod
    def _lower_format(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value
