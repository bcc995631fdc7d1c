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
"""frameguard CLI — inspect the header policy a deployment would apply."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from rich.markup import escape
from rich.table import Table

from frameguard.cli.console import console
from frameguard.core.config import Config
from frameguard.core.properties import SystemProperties
from frameguard.kernel.exceptions import ConfigurationException
from frameguard.logging.port import LoggingPort
from frameguard.logging.structlog_adapter import StructlogAdapter
from frameguard.web.header_policy import HeaderPolicy


def _policy_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that evaluates the policy."""
    func = click.option(
        "-D",
        "definitions",
        multiple=True,
        metavar="KEY=VALUE",
        help="System property override (highest precedence). Repeatable.",
    )(func)
    func = click.option(
        "--profile",
        "profiles",
        multiple=True,
        help="Active configuration profile. Repeatable.",
    )(func)
    func = click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="YAML or TOML config file (defaults to frameguard.yaml lookup in the current directory).",
    )(func)
    return func


def _load_policy(
    config_path: Path | None, profiles: tuple[str, ...], definitions: tuple[str, ...]
) -> tuple[Config, HeaderPolicy]:
    try:
        system_properties = SystemProperties.from_definitions(definitions)
    except ConfigurationException as exc:
        raise click.UsageError(str(exc)) from exc

    try:
        if config_path is not None:
            config = Config.from_file(config_path, active_profiles=list(profiles))
        else:
            config = Config.from_sources(Path.cwd(), active_profiles=list(profiles))
        logging_port: LoggingPort = StructlogAdapter()
        logging_port.configure(config)
        return config, HeaderPolicy.from_config(config, system_properties)
    except ConfigurationException as exc:
        raise click.ClickException(str(exc)) from exc


@click.group()
@click.version_option(package_name="frameguard")
def cli() -> None:
    """frameguard — anti-clickjacking and anti-sniffing response headers."""


@cli.command("headers")
@_policy_options
def headers_command(config_path: Path | None, profiles: tuple[str, ...], definitions: tuple[str, ...]) -> None:
    """Show the headers a response would receive right now."""
    _, policy = _load_policy(config_path, profiles, definitions)
    decided = policy.headers()

    if not decided:
        console.print("[warning]No headers would be set.[/warning]")
        return

    table = Table(title="Response Headers", border_style="dim")
    table.add_column("Header", style="info")
    table.add_column("Value")
    for name, value in decided.items():
        table.add_row(name, escape(value))
    console.print(table)


@cli.command("properties")
@_policy_options
def properties_command(config_path: Path | None, profiles: tuple[str, ...], definitions: tuple[str, ...]) -> None:
    """Show each policy property, its raw value and the effective value."""
    config, policy = _load_policy(config_path, profiles, definitions)
    keys = policy.keys
    properties = policy.properties

    frame_enabled = policy.frame_options_enabled()
    rows = [
        (keys.should_set_policy, properties.get_property(keys.should_set_policy), str(frame_enabled).lower()),
        (
            keys.policy,
            properties.get_property(keys.policy),
            escape(policy.frame_options_value()) if frame_enabled else "[dim]unused[/dim]",
        ),
        (
            keys.content_type_should_set_policy,
            properties.get_property(keys.content_type_should_set_policy),
            str(policy.content_type_options_enabled()).lower(),
        ),
    ]

    table = Table(title="Header Policy Properties", border_style="dim")
    table.add_column("Key", style="info")
    table.add_column("Raw")
    table.add_column("Effective")
    for key, raw, effective in rows:
        table.add_row(key, "[dim]unset[/dim]" if raw is None else escape(repr(raw)), effective)
    console.print(table)
    console.print(f"[dim]Sources: {escape(', '.join(config.loaded_sources))}[/dim]")
