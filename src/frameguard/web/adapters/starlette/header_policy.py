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
"""Header policy middleware for Starlette — pure ASGI."""

from __future__ import annotations

from typing import Any

import structlog
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Receive, Scope, Send

from frameguard.core.properties import PropertySource
from frameguard.web.header_policy import DECISION_LOGGER, HEADER_POLICY_APPLIED, HeaderPolicy, HeaderPolicyKeys

logger = structlog.get_logger(DECISION_LOGGER)


class HeaderPolicyMiddleware:
    """Sets ``X-Frame-Options`` and ``X-Content-Type-Options`` on every HTTP response.

    The decision is taken per request, before the wrapped app runs, from
    the injected property source.  The headers are written into the
    ``http.response.start`` message of whatever response the app sends,
    error responses included.  The wrapped app is called exactly once per
    request; if the property source raises, the exception propagates and
    the app is not called.

    Accepts either a ready :class:`HeaderPolicy` or a property source
    (plus optional key names) to build one from.
    """

    def __init__(
        self,
        app: ASGIApp,
        properties: PropertySource | None = None,
        keys: HeaderPolicyKeys | None = None,
        policy: HeaderPolicy | None = None,
    ) -> None:
        if policy is None:
            if properties is None:
                raise TypeError("HeaderPolicyMiddleware requires either 'properties' or 'policy'")
            policy = HeaderPolicy(properties, keys)
        self.app = app
        self._policy = policy

    @property
    def policy(self) -> HeaderPolicy:
        return self._policy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        decided = self._policy.headers()
        logger.debug(HEADER_POLICY_APPLIED, path=scope.get("path"), headers=decided)

        async def send_with_headers(message: Any) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in decided.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_headers)
