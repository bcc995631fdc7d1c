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
"""Header policy — decides the anti-clickjacking and anti-sniffing headers.

Three properties drive the decision, looked up afresh on every call:

==============================  ==============  ==============================
Key                             Default         Effect
==============================  ==============  ==============================
``shouldSetPolicy``             ``true``        emit ``X-Frame-Options``
``policy``                      ``SAMEORIGIN``  value of ``X-Frame-Options``
``xContentTypeShouldSetPolicy`` ``true``        emit ``X-Content-Type-Options``
==============================  ==============  ==============================

A missing or empty value falls back to the default.  The frame policy is
passed through verbatim (``DENY``, ``SAMEORIGIN``, ``ALLOW-FROM <uri>`` or
anything else).  Framework-agnostic: adapters apply the result to their own
response types.
"""

from __future__ import annotations

from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

from frameguard.config.properties.header_policy import HeaderPolicyProperties
from frameguard.core.config import Config
from frameguard.core.properties import PropertySource, SystemProperties, default_property_resolver

X_FRAME_OPTIONS = "X-Frame-Options"
X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"

DEFAULT_SHOULD_SET_POLICY = True
DEFAULT_FRAME_POLICY = "SAMEORIGIN"
DEFAULT_CONTENT_TYPE_SHOULD_SET_POLICY = True
NOSNIFF = "nosniff"

# structlog logger and event adapters use to record each decision
DECISION_LOGGER = "frameguard.web"
HEADER_POLICY_APPLIED = "header_policy_applied"


def parse_bool(value: Any, default: bool) -> bool:
    """Interpret a property value as a boolean.

    ``None`` and ``""`` yield *default*.  Anything else is ``True`` only if
    it reads ``"true"`` case-insensitively, with no surrounding whitespace;
    ``"yes"``, ``"1"``, ``" true "`` and a blank ``"   "`` are ``False``.
    """
    if value is None or value == "":
        return default
    return str(value).lower() == "true"


@dataclass(frozen=True)
class HeaderPolicyKeys:
    """Property names consulted by :class:`HeaderPolicy`."""

    should_set_policy: str = "shouldSetPolicy"
    policy: str = "policy"
    content_type_should_set_policy: str = "xContentTypeShouldSetPolicy"

    @classmethod
    def from_properties(cls, props: HeaderPolicyProperties) -> HeaderPolicyKeys:
        return cls(
            should_set_policy=props.should_set_policy_key,
            policy=props.policy_key,
            content_type_should_set_policy=props.content_type_should_set_policy_key,
        )


@dataclass(frozen=True)
class HeaderDecision:
    """Snapshot of one header-policy evaluation."""

    frame_options_enabled: bool
    frame_options_value: str | None
    content_type_options_enabled: bool

    def headers(self) -> dict[str, str]:
        """Headers to set on the response, in emission order."""
        result: dict[str, str] = {}
        if self.frame_options_enabled and self.frame_options_value is not None:
            result[X_FRAME_OPTIONS] = self.frame_options_value
        if self.content_type_options_enabled:
            result[X_CONTENT_TYPE_OPTIONS] = NOSNIFF
        return result


class HeaderPolicy:
    """Evaluates the header policy against a live :class:`PropertySource`.

    Holds no per-request state, so one instance may serve concurrent
    requests.  Whatever the property source raises is propagated.
    """

    def __init__(self, properties: PropertySource, keys: HeaderPolicyKeys | None = None) -> None:
        self._properties = properties
        self._keys = keys or HeaderPolicyKeys()

    @classmethod
    def from_config(
        cls,
        config: Config,
        system_properties: SystemProperties | None = None,
    ) -> HeaderPolicy:
        """Build a policy over the standard resolver, with key names bound from *config*."""
        keys = HeaderPolicyKeys.from_properties(config.bind(HeaderPolicyProperties))
        return cls(default_property_resolver(config, system_properties), keys)

    @property
    def keys(self) -> HeaderPolicyKeys:
        return self._keys

    @property
    def properties(self) -> PropertySource:
        return self._properties

    def frame_options_enabled(self) -> bool:
        return parse_bool(
            self._properties.get_property(self._keys.should_set_policy),
            DEFAULT_SHOULD_SET_POLICY,
        )

    def frame_options_value(self) -> str:
        value = self._properties.get_property(self._keys.policy)
        return value if value else DEFAULT_FRAME_POLICY

    def content_type_options_enabled(self) -> bool:
        return parse_bool(
            self._properties.get_property(self._keys.content_type_should_set_policy),
            DEFAULT_CONTENT_TYPE_SHOULD_SET_POLICY,
        )

    def decide(self) -> HeaderDecision:
        """Read the current properties and decide which headers to emit."""
        frame_enabled = self.frame_options_enabled()
        return HeaderDecision(
            frame_options_enabled=frame_enabled,
            frame_options_value=self.frame_options_value() if frame_enabled else None,
            content_type_options_enabled=self.content_type_options_enabled(),
        )

    def headers(self) -> dict[str, str]:
        return self.decide().headers()

    def apply(self, headers: MutableMapping[str, str]) -> dict[str, str]:
        """Set the decided headers on *headers*, replacing same-named entries."""
        decided = self.headers()
        for name, value in decided.items():
            headers[name] = value
        return decided
