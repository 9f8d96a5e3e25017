import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "db_path": None,  # None = let the shell pick the per-user app directory
    "keychain_service": "PRTracker",
    "keychain_account": "github_token",
    "github_api_url": "https://api.github.com",
    "user_agent": "PRTracker/1.0",
}


def load_config(config_path: str = ".prtracker.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prtracker.yml in the current directory
      3. PRTRACKER_DB environment variable (database path only)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    env_db = os.environ.get("PRTRACKER_DB")
    if env_db:
        config["db_path"] = env_db

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config
