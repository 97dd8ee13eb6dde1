"""Render a saved binary plan with `terraform show`."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from plancomment_core.errors import FormatError, ReadError

logger = logging.getLogger(__name__)

_SHOW_TIMEOUT = 300  # seconds; large plans with many providers are slow to load


def render_plan_file(plan_file: str | Path, output_path: str | Path, binary: str = "terraform") -> Path:
    """Write the human-readable form of ``plan_file`` to ``output_path``.

    Must run inside the working directory the plan was created in, since
    terraform needs the initialised providers to decode it.
    """
    plan_file = Path(plan_file)
    if not plan_file.is_file():
        raise ReadError(str(plan_file))

    cmd = [binary, "show", "-no-color", str(plan_file)]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=_SHOW_TIMEOUT)
    except FileNotFoundError as e:
        raise FormatError(f"Could not run `{binary}` to render {plan_file}: executable not found.") from e
    except subprocess.TimeoutExpired as e:
        raise FormatError(f"`{binary} show` timed out after {_SHOW_TIMEOUT}s rendering {plan_file}.") from e

    if result.returncode != 0:
        raise FormatError(f"`{binary} show` failed for {plan_file}: {result.stderr.strip() or 'no error output'}")

    output_path = Path(output_path)
    output_path.write_text(result.stdout, encoding="utf-8")
    return output_path
