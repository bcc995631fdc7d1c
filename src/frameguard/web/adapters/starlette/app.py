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
"""Starlette application factory with the header policy installed."""

from __future__ import annotations

from collections.abc import Sequence

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.routing import BaseRoute

from frameguard.core.config import Config
from frameguard.core.properties import SystemProperties
from frameguard.web.adapters.starlette.header_policy import HeaderPolicyMiddleware
from frameguard.web.header_policy import HeaderPolicy


def create_app(
    routes: Sequence[BaseRoute] | None = None,
    config: Config | None = None,
    system_properties: SystemProperties | None = None,
    middleware: Sequence[Middleware] = (),
    debug: bool = False,
) -> Starlette:
    """Create a Starlette application whose responses carry the header policy.

    ``HeaderPolicyMiddleware`` is the outermost user middleware, so every
    response produced inside it (404s and handled exceptions included)
    receives the headers.  Extra ``middleware`` is installed inside it.
    """
    policy = HeaderPolicy.from_config(config or Config(), system_properties)

    stack: list[Middleware] = [Middleware(HeaderPolicyMiddleware, policy=policy), *middleware]
    return Starlette(debug=debug, routes=list(routes or []), middleware=stack)
