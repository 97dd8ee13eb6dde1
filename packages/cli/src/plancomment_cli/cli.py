"""CLI entry point for plancomment.

Commands:
  comment: post or refresh the plan comment on a pull request
  render:  print the comment body for a plan without posting it
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from plancomment_cli.commands.comment import comment_cmd
from plancomment_cli.commands.render import render_cmd


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("plancomment"),
    prog_name="plancomment",
)
@click.option(
    "--config",
    "config_path",
    default=".plancomment.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PLANCOMMENT_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Keep a single, up-to-date Terraform plan comment on a GitHub pull request."""
    from plancomment_core.config import load_config
    from plancomment_cli.auth import resolve_github_token

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except ValueError as e:
        raise click.UsageError(str(e))

    # Resolve once here so every subcommand sees the same token.
    if not config.get("github_token"):
        config["github_token"] = resolve_github_token()

    ctx.obj["config"] = config


main.add_command(comment_cmd)
main.add_command(render_cmd)
