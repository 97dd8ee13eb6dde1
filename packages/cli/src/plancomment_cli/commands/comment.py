"""comment command: post or refresh the plan comment on a pull request."""

from __future__ import annotations

import tempfile
from pathlib import Path

import click
from rich.console import Console

from plancomment_cli.github_env import detect_pr_number, detect_repo, write_outputs
from plancomment_cli.terraform import render_plan_file
from plancomment_core.commenter import CommentSummary, run_plan_comment
from plancomment_core.errors import PlanCommentError
from plancomment_core.gh.comments import GitHubCommentClient
from plancomment_core.reconciler import CREATED, SKIPPED, UPDATED

console = Console()

_OUTCOME_STYLE = {CREATED: "green", UPDATED: "cyan", SKIPPED: "yellow"}


def _summary_outputs(summary: CommentSummary) -> dict[str, str]:
    """Map a CommentSummary to the step outputs downstream jobs read."""
    outcome = summary.outcome
    return {
        "has-changes": "true" if summary.has_changes else "false",
        "outcome": outcome.action if outcome else "shadow",
        "comment-id": str(outcome.comment_id) if outcome and outcome.comment_id is not None else "",
        "truncated": "true" if summary.comment.truncated else "false",
        "markdown": summary.markdown,
    }


def _print_outcome(summary: CommentSummary, pr_number: int | None) -> None:
    outcome = summary.outcome
    if outcome is None:
        return
    style = _OUTCOME_STYLE.get(outcome.action, "white")
    if outcome.action == SKIPPED:
        console.print(f"[{style}]Comment skipped: {outcome.reason}.[/{style}]", highlight=False)
    else:
        console.print(
            f"[{style}]Comment {outcome.action} on #{pr_number} (id {outcome.comment_id}).[/{style}]",
            highlight=False,
        )


@click.command("comment")
@click.option(
    "--plan",
    "plan_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Plan output to post: `terraform plan`/`show` text or `terraform show -json` output.",
)
@click.option(
    "--plan-file",
    "plan_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Saved binary plan (terraform plan -out=...). Rendered with `terraform show` first.",
)
@click.option("--repo", default=None, help="GitHub repository in owner/name format. Defaults to $GITHUB_REPOSITORY.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Defaults to the pull request of the triggering Actions event.",
)
@click.option("--header", default=None, help="Comment header. Also identifies the comment across runs.")
@click.option(
    "--skip-on-no-changes/--no-skip-on-no-changes",
    "skip_on_no_changes",
    default=None,
    help="Do not create or update the comment when the plan has no changes.",
)
@click.option(
    "--max-size",
    "max_comment_size",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum comment size in characters. Overrides config file.",
)
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print the comment without posting to GitHub.",
)
@click.pass_context
def comment_cmd(
    ctx,
    plan_path: str | None,
    plan_file: str | None,
    repo: str | None,
    pr_number: int | None,
    header: str | None,
    skip_on_no_changes: bool | None,
    max_comment_size: int | None,
    shadow: bool,
):
    """Post the plan as a pull request comment, updating the previous one.

    The comment is recognised on later runs by a hidden marker derived from
    the header, so each distinct header keeps exactly one comment.

    \b
    Required environment variables (unless --shadow):
      GITHUB_TOKEN         GitHub token with pull-requests: write (or use gh CLI)
    """
    if bool(plan_path) == bool(plan_file):
        raise click.UsageError("Pass exactly one of --plan or --plan-file.")

    config = dict(ctx.obj["config"]) if ctx.obj else {}
    for key, value in (
        ("header", header),
        ("skip_on_no_changes", skip_on_no_changes),
        ("max_comment_size", max_comment_size),
    ):
        if value is not None:
            config[key] = value

    client = None
    if not shadow:
        repo = repo or detect_repo()
        if not repo:
            raise click.UsageError("No repository given. Pass --repo or set GITHUB_REPOSITORY.")
        pr_number = pr_number or detect_pr_number()
        if not pr_number:
            raise click.UsageError("No pull request number given and none found in the GitHub Actions event.")
        token = config.get("github_token")
        if not token:
            raise click.UsageError(
                "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
                "Create a token at https://github.com/settings/tokens"
            )

    try:
        with tempfile.TemporaryDirectory(prefix="plancomment-") as tmp:
            if plan_file:
                binary = config.get("terraform_binary", "terraform")
                plan_path = str(render_plan_file(plan_file, Path(tmp) / "plan.txt", binary=binary))
            if not shadow:
                client = GitHubCommentClient.from_token(repo, pr_number, token)
            summary = run_plan_comment(plan_path, config, client=client, shadow=shadow)
    except (PlanCommentError, ValueError) as e:
        raise click.ClickException(str(e))

    _print_outcome(summary, pr_number)
    write_outputs(_summary_outputs(summary))
