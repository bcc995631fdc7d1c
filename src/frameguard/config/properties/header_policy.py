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
"""Header policy configuration properties."""

from __future__ import annotations

from dataclasses import dataclass

from frameguard.core.config import config_properties


@config_properties(prefix="frameguard.header_policy")
@dataclass
class HeaderPolicyProperties:
    """Names of the properties the header policy looks up (frameguard.header_policy.*).

    Override these to namespace the keys, e.g. ``geoserver.xframe.policy``.
    """

    should_set_policy_key: str = "shouldSetPolicy"
    policy_key: str = "policy"
    content_type_should_set_policy_key: str = "xContentTypeShouldSetPolicy"
