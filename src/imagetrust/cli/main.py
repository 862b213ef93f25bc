"""imagetrust CLI -- Trust scoring for container image allowlist requests.

Entry point for the ``imagetrust`` command-line tool. Registers all
subcommands under a single Click group.

Commands:
    evaluate -- Score an image and recommend an admission decision.
    config   -- Show the effective configuration.

Usage::

    imagetrust evaluate hashicorp/vault:1.15
    imagetrust evaluate quay.io/argoproj/argocd:v2.10.0 --format json
    imagetrust -v evaluate ghcr.io/fluxcd/source-controller:v1.2.0
    imagetrust config --config ./imagetrust.yaml
"""

from __future__ import annotations

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from imagetrust import __version__
from imagetrust.cli.config_cmd import config_command
from imagetrust.cli.evaluate_cmd import evaluate_command


def _configure_logging(verbosity: int) -> None:
    """Send log records to stderr; WARNING by default, -v INFO, -vv DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log verbosity (-v, -vv).")
def cli(verbose: int) -> None:
    """imagetrust: Trust scoring for container images.

    Combine vendor identity, recency, adoption, vulnerability and
    signature signals into a 0-100 score and an admission decision for
    an approved-registry allowlist.
    """
    _configure_logging(verbose)


# Register all subcommands
cli.add_command(evaluate_command)
cli.add_command(config_command)
