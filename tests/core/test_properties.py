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
"""Tests for property sources and the layered resolver."""

from __future__ import annotations

import pytest

from frameguard.core.config import Config
from frameguard.core.properties import (
    EnvironmentProperties,
    InitParameters,
    LayeredPropertyResolver,
    PropertySource,
    SystemProperties,
    default_property_resolver,
)
from frameguard.kernel.exceptions import ConfigurationException
from frameguard.web.header_policy import HeaderPolicy


class TestSystemProperties:
    def test_get_set_remove(self):
        props = SystemProperties({"policy": "DENY"})
        assert props.get_property("policy") == "DENY"

        props.set("policy", "SAMEORIGIN")
        assert props.get_property("policy") == "SAMEORIGIN"

        props.remove("policy")
        assert props.get_property("policy") is None
        props.remove("policy")

    def test_clear_and_container_protocol(self):
        props = SystemProperties({"a": "1", "b": "2"})
        assert "a" in props
        assert sorted(props) == ["a", "b"]
        assert len(props) == 2
        props.clear()
        assert len(props) == 0

    def test_from_definitions(self):
        props = SystemProperties.from_definitions(
            ["policy=ALLOW-FROM https://example.com/?a=b", "shouldSetPolicy=", " xContentTypeShouldSetPolicy =false"]
        )
        assert props.get_property("policy") == "ALLOW-FROM https://example.com/?a=b"
        assert props.get_property("shouldSetPolicy") == ""
        assert props.get_property("xContentTypeShouldSetPolicy") == "false"

    @pytest.mark.parametrize("definition", ["policy", "=DENY", "  =x"])
    def test_from_definitions_rejects_malformed(self, definition):
        with pytest.raises(ConfigurationException) as exc_info:
            SystemProperties.from_definitions([definition])
        assert exc_info.value.code == "CONFIG_DEFINITION"
        assert exc_info.value.context == {"definition": definition}


class TestInitParameters:
    def test_string_values(self):
        params = InitParameters(Config({"frameguard": {"init_params": {"policy": "DENY"}}}))
        assert params.get_property("policy") == "DENY"
        assert params.get_property("missing") is None

    def test_yaml_booleans_lowercased(self):
        params = InitParameters(Config({"frameguard": {"init_params": {"on": True, "off": False}}}))
        assert params.get_property("on") == "true"
        assert params.get_property("off") == "false"

    def test_dotted_keys_matched_verbatim(self):
        config = Config({"frameguard": {"init_params": {"geoserver.xframe.policy": "DENY"}}})
        assert InitParameters(config).get_property("geoserver.xframe.policy") == "DENY"

    def test_custom_prefix(self):
        config = Config({"servlet": {"params": {"policy": "DENY"}}})
        assert InitParameters(config, prefix="servlet.params").get_property("policy") == "DENY"

    def test_no_section(self):
        assert InitParameters(Config({})).get_property("policy") is None

    def test_placeholder_resolved_from_environment(self, monkeypatch):
        monkeypatch.setenv("XF", "DENY")
        config = Config({"frameguard": {"init_params": {"policy": "${XF:SAMEORIGIN}"}}})
        assert InitParameters(config).get_property("policy") == "DENY"

    def test_placeholder_default(self, monkeypatch):
        monkeypatch.delenv("XF", raising=False)
        config = Config({"frameguard": {"init_params": {"policy": "${XF:SAMEORIGIN}"}}})
        assert InitParameters(config).get_property("policy") == "SAMEORIGIN"

    def test_placeholder_read_live(self, monkeypatch):
        config = Config({"frameguard": {"init_params": {"shouldSetPolicy": "${XF_ON:true}"}}})
        params = InitParameters(config)
        monkeypatch.setenv("XF_ON", "false")
        assert params.get_property("shouldSetPolicy") == "false"
        monkeypatch.delenv("XF_ON")
        assert params.get_property("shouldSetPolicy") == "true"

    def test_unresolvable_placeholder_raises(self, monkeypatch):
        monkeypatch.delenv("XF_MISSING", raising=False)
        config = Config({"frameguard": {"init_params": {"policy": "${XF_MISSING}"}}})
        with pytest.raises(ConfigurationException) as exc_info:
            InitParameters(config).get_property("policy")
        assert exc_info.value.code == "CONFIG_PLACEHOLDER"

    def test_placeholder_reaches_header_policy(self, monkeypatch):
        monkeypatch.setenv("XF", "DENY")
        config = Config({"frameguard": {"init_params": {"policy": "${XF:SAMEORIGIN}"}}})
        assert HeaderPolicy.from_config(config).headers()["X-Frame-Options"] == "DENY"


class TestEnvironmentProperties:
    def test_reads_os_environ_live(self, monkeypatch):
        monkeypatch.delenv("xContentTypeShouldSetPolicy", raising=False)
        env = EnvironmentProperties()
        assert env.get_property("xContentTypeShouldSetPolicy") is None

        monkeypatch.setenv("xContentTypeShouldSetPolicy", "false")
        assert env.get_property("xContentTypeShouldSetPolicy") == "false"

    def test_explicit_mapping(self):
        env = EnvironmentProperties({"policy": "DENY"})
        assert env.get_property("policy") == "DENY"
        assert env.get_property("shouldSetPolicy") is None


class TestLayeredPropertyResolver:
    def test_sources_conform_to_protocol(self):
        for source in (SystemProperties(), InitParameters(Config()), EnvironmentProperties({})):
            assert isinstance(source, PropertySource)
        assert isinstance(LayeredPropertyResolver(), PropertySource)

    def test_first_source_wins(self):
        resolver = LayeredPropertyResolver(
            SystemProperties({"policy": "DENY"}),
            EnvironmentProperties({"policy": "SAMEORIGIN", "shouldSetPolicy": "false"}),
        )
        assert resolver.get_property("policy") == "DENY"
        assert resolver.get_property("shouldSetPolicy") == "false"
        assert resolver.get_property("missing") is None

    def test_empty_string_counts_as_found(self):
        resolver = LayeredPropertyResolver(
            SystemProperties({"policy": ""}),
            EnvironmentProperties({"policy": "DENY"}),
        )
        assert resolver.get_property("policy") == ""

    def test_source_errors_propagate(self):
        class _Broken:
            def get_property(self, key):
                raise OSError("unreachable")

        with pytest.raises(OSError):
            LayeredPropertyResolver(_Broken()).get_property("policy")

    def test_sources_returned_as_copy(self):
        resolver = LayeredPropertyResolver(SystemProperties())
        resolver.sources.clear()
        assert len(resolver.sources) == 1


class TestDefaultPropertyResolver:
    def test_precedence(self, monkeypatch):
        monkeypatch.setenv("policy", "from-env")
        monkeypatch.setenv("shouldSetPolicy", "from-env")
        monkeypatch.setenv("xContentTypeShouldSetPolicy", "from-env")
        config = Config({"frameguard": {"init_params": {"policy": "from-init", "shouldSetPolicy": "from-init"}}})
        resolver = default_property_resolver(config, SystemProperties({"policy": "from-system"}))

        assert resolver.get_property("policy") == "from-system"
        assert resolver.get_property("shouldSetPolicy") == "from-init"
        assert resolver.get_property("xContentTypeShouldSetPolicy") == "from-env"

    def test_without_arguments(self, monkeypatch):
        monkeypatch.delenv("policy", raising=False)
        assert default_property_resolver().get_property("policy") is None
