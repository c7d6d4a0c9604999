import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "project_root": None,  # None = current working directory
    "data_dir": None,  # None = <project_root>/.review/data
    "list_limit": 20,
}

REVIEW_DIR_NAME = ".review"

_ENV_KEYS = {
    "project_root": "REVTRACK_PROJECT_ROOT",
    "data_dir": "REVTRACK_DATA_DIR",
}


def load_config(config_path: str = ".revtrack.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .revtrack.yml in the current directory
      3. REVTRACK_* environment variables
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        if not isinstance(file_config, dict):
            raise ValueError(f"{config_path} must contain a mapping, got {type(file_config).__name__}")
        config.update(file_config)

    for key, env_var in _ENV_KEYS.items():
        value = os.environ.get(env_var)
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    return config


def resolve_data_dir(config: dict) -> Path:
    """
    Resolve the directory that holds the reviews/ and tasks/ collections.

    Called once per process (or per call when a caller targets another
    workspace); the result is passed to the stores explicitly.
    """
    if config.get("data_dir"):
        return Path(config["data_dir"]).expanduser().resolve()
    root = Path(config.get("project_root") or os.getcwd()).expanduser().resolve()
    return root / REVIEW_DIR_NAME / "data"
