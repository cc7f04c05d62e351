"""Configuration management for OmniSearch."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx

from omnisearch import template


DEFAULT_CONFIG_PATH = "~/.omnisearch/config.json"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "OmniSearch/1.0"


@dataclass
class Config:
    """Application configuration."""

    application_name: str = template.DEFAULT_APPLICATION_NAME
    language: str | None = None  # None: derive from the locale
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, path: str = DEFAULT_CONFIG_PATH) -> "Config":
        """Load config from a JSON file, or return defaults if not found."""
        config_path = Path(path).expanduser()

        if not config_path.exists():
            return cls()

        try:
            data = json.loads(config_path.read_text())
            return cls(
                application_name=data.get("application_name", template.DEFAULT_APPLICATION_NAME),
                language=data.get("language"),
                timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
                user_agent=data.get("user_agent", DEFAULT_USER_AGENT),
                extra=data.get("extra", {}),
            )
        except (json.JSONDecodeError, AttributeError, TypeError, ValueError):
            return cls()

    def save(self, path: str = DEFAULT_CONFIG_PATH) -> None:
        """Save config to a JSON file."""
        config_path = Path(path).expanduser()
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "application_name": self.application_name,
            "language": self.language,
            "timeout": self.timeout,
            "user_agent": self.user_agent,
            "extra": self.extra,
        }
        config_path.write_text(json.dumps(data, indent=2))

    def apply(self) -> None:
        """Make the application name and language visible to URL templates."""
        template.set_application_name(self.application_name)
        template.set_language(self.language)

    def create_client(self) -> httpx.AsyncClient:
        """Create an HTTP client for engine network requests."""
        return httpx.AsyncClient(headers={"User-Agent": self.user_agent})
