import os
from pathlib import Path
from typing import Optional

import yaml

from plancomment_core.formatter import MAX_COMMENT_SIZE

DEFAULT_CONFIG: dict = {
    "header": None,  # None = no visible header; the marker uses the built-in default
    "skip_on_no_changes": False,
    "max_comment_size": MAX_COMMENT_SIZE,
    "terraform_binary": "terraform",  # used to render --plan-file; "tofu" works too
}


def load_config(config_path: str = ".plancomment.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .plancomment.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping of settings.")
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    size = config["max_comment_size"]
    if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
        raise ValueError(f"max_comment_size must be a positive integer, got {size!r}.")

    header = config["header"]
    if header is not None and not isinstance(header, str):
        raise ValueError(f"header must be a string, got {header!r}. Quote it in the config file.")

    config["github_token"] = os.environ.get("GITHUB_TOKEN") or os.environ.get("GH_TOKEN")

    return config
