"""Configuration management for gitfeed."""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlparse

DEFAULT_APP_URL = "http://localhost:3000/"


@dataclass
class FeedConfig:
    """Settings the feed converter depends on."""

    app_url: str = DEFAULT_APP_URL
    app_sub_url: str = ""
    locale_file: str = ""
    log_level: str = "INFO"


def sub_url_from_app_url(app_url: str) -> str:
    """Return the path part of the public URL without a trailing slash.

    "https://example.com/git/" gives "/git"; a root install gives "".
    """
    return urlparse(app_url).path.rstrip("/")


class Config:
    """Main configuration manager."""

    def __init__(self):
        """Initialize configuration from environment variables."""
        self.app_url = os.getenv("GITFEED_APP_URL", DEFAULT_APP_URL)
        sub_url = os.getenv("GITFEED_APP_SUB_URL")
        if sub_url is None:
            sub_url = sub_url_from_app_url(self.app_url)
        self.app_sub_url = sub_url.rstrip("/")
        self.locale_file = os.getenv("GITFEED_LOCALE_FILE", "")
        self.log_level = os.getenv("LOG_LEVEL", "INFO")

    def get_feed_config(self) -> FeedConfig:
        """Get feed configuration."""
        return FeedConfig(
            app_url=self.app_url,
            app_sub_url=self.app_sub_url,
            locale_file=self.locale_file,
            log_level=self.log_level,
        )

    def load_messages(self) -> dict[str, str] | None:
        """Load the translation catalog named by GITFEED_LOCALE_FILE.

        Returns:
            Mapping of message keys to format strings, or None when no
            catalog file is configured

        Raises:
            FileNotFoundError: If the configured file does not exist
            ValueError: If the file is not a JSON object of strings
        """
        if not self.locale_file:
            return None

        catalog_file = Path(self.locale_file)
        if not catalog_file.exists():
            raise FileNotFoundError(f"Locale file not found: {self.locale_file}")

        try:
            with open(catalog_file, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in locale file: {e}")

        if not isinstance(data, dict):
            raise ValueError("Locale file must contain a JSON object")

        return {str(key): str(value) for key, value in data.items()}
