"""``imagetrust config`` -- Show the effective evaluation configuration.

Exit Codes:
    0 -- Configuration loaded and displayed.
    3 -- Configuration file is unreadable or invalid.
"""

from __future__ import annotations

import json
import sys

import click

from imagetrust.config import config_to_dict, load_config
from imagetrust.core.scoring import ExitCode
from imagetrust.exceptions import ConfigError


@click.command("config")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False),
    envvar="IMAGETRUST_CONFIG",
    default=None,
    help="YAML configuration file (env: IMAGETRUST_CONFIG).",
)
@click.option(
    "--format", "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format (default: text).",
)
def config_command(config_path: str | None, output_format: str) -> None:
    """Show trusted vendors, registries and thresholds in effect."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        if output_format == "json":
            click.echo(json.dumps({"error": str(exc)}))
        else:
            click.echo(f"Error: {exc}", err=True)
        sys.exit(int(ExitCode.ERROR))

    data = config_to_dict(config)
    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        from imagetrust.cli.output import print_config
        print_config(data)
