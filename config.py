import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_CONFIG_PATH = "favicon_config.json"

# Environment variables recognised as defaults, by settings key
ENV_KEYS = {
    "path_prefix": "FAVICON_PATH_PREFIX",
    "app_name": "FAVICON_APP_NAME",
    "app_short_name": "FAVICON_APP_SHORT_NAME",
    "theme_color": "FAVICON_THEME_COLOR",
    "background_color": "FAVICON_BACKGROUND_COLOR",
    "workers": "FAVICON_WORKERS",
    "log_dir": "FAVICON_LOG_DIR",
}


class Config:
    """Default values for command-line options, read from a JSON file and the environment."""

    def __init__(self, config_path=None, env_file=None):
        self.config_path = config_path
        self.env_file = env_file
        self._load_config()

    def _load_config(self):
        """Loads configuration from .env and JSON files."""
        load_dotenv(self.env_file)
        self.settings = {}

        path = Path(self.config_path or DEFAULT_CONFIG_PATH)
        try:
            with open(path, "r", encoding="utf-8") as file:
                self.settings.update(json.load(file))
        except FileNotFoundError:
            # Only an explicitly requested file must exist
            if self.config_path is not None:
                raise

    def get(self, key, default=None):
        """Get a config value from the JSON file, then the environment."""
        if key in self.settings:
            return self.settings[key]
        env_key = ENV_KEYS.get(key)
        if env_key is not None and os.getenv(env_key):
            return os.getenv(env_key)
        return default


@dataclass(frozen=True)
class Settings:
    """Everything a single run needs, built once at startup."""
    input_path: Path
    output_path: Path
    overwrite: bool = False
    path_prefix: str = "/"
    no_sharpen: bool = False
    app_name: str = "App"
    app_short_name: Optional[str] = None
    theme_color: Optional[str] = None
    background_color: Optional[str] = None
    workers: Optional[int] = None
    log_dir: Optional[Path] = None
    verbose: bool = False
