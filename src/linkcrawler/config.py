"""
Crawler configuration: defaults, environment overrides, validation.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "CRAWLER_"

_TRUE_VALUES = frozenset(("1", "true", "yes", "on"))


@dataclass(slots=True)
class CrawlerConfig:
    """Settings shared by the CLI, the HTTP control surface and the engine."""
    start_endpoint: Optional[str] = None
    core_pool_size: int = 5
    max_pool_size: int = 10
    request_timeout: float = 10.0
    user_agent: str = "LinkCrawler/1.0"
    follow_redirects: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CrawlerConfig":
        """
        Build a config from CRAWLER_* environment variables.

        Unset variables keep their defaults; malformed numbers raise ValueError.
        """
        env = os.environ if environ is None else environ
        config = cls()

        def get(name: str) -> Optional[str]:
            value = env.get(ENV_PREFIX + name)
            if value is None or not value.strip():
                return None
            return value.strip()

        if (value := get("START_ENDPOINT")) is not None:
            config.start_endpoint = value
        if (value := get("CORE_POOL_SIZE")) is not None:
            config.core_pool_size = int(value)
        if (value := get("MAX_POOL_SIZE")) is not None:
            config.max_pool_size = int(value)
        if (value := get("REQUEST_TIMEOUT")) is not None:
            config.request_timeout = float(value)
        if (value := get("USER_AGENT")) is not None:
            config.user_agent = value
        if (value := get("FOLLOW_REDIRECTS")) is not None:
            config.follow_redirects = value.lower() in _TRUE_VALUES
        return config

    def validate(self) -> "CrawlerConfig":
        """Raise ValueError on unusable pool sizes or timeouts; return self."""
        if self.core_pool_size < 1:
            raise ValueError(f"core_pool_size must be >= 1 (got {self.core_pool_size})")
        if self.max_pool_size < self.core_pool_size:
            raise ValueError(
                f"max_pool_size ({self.max_pool_size}) must be >= core_pool_size ({self.core_pool_size})"
            )
        if self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive (got {self.request_timeout})")
        return self
