"""render command: print the comment body for a plan."""

from __future__ import annotations

import click

from plancomment_core.commenter import build_comment
from plancomment_core.errors import PlanCommentError


@click.command("render")
@click.option(
    "--plan",
    "plan_path",
    type=click.Path(dir_okay=False),
    required=True,
    help="Plan output: `terraform plan`/`show` text or `terraform show -json` output.",
)
@click.option("--header", default=None, help="Comment header.")
@click.option("--max-size", "max_comment_size", type=click.IntRange(min=1), default=None)
@click.pass_context
def render_cmd(ctx, plan_path: str, header: str | None, max_comment_size: int | None):
    """Print the comment that `comment` would post, exactly as rendered."""
    config = dict(ctx.obj["config"]) if ctx.obj else {}
    if header is not None:
        config["header"] = header
    if max_comment_size is not None:
        config["max_comment_size"] = max_comment_size

    try:
        comment, _ = build_comment(plan_path, config)
    except (PlanCommentError, ValueError) as e:
        raise click.ClickException(str(e))

    # Plain echo: the body is piped into files and must not carry rich markup.
    click.echo(comment.render())
