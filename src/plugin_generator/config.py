"""Runtime configuration for plugin_generator.

Settings come from keyword arguments, falling back to environment variables
and then to built-in defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from plugin_generator.repositories import (
    NUGET_ORG_FEED,
    BasePackageRepository,
    LocalFeedRepository,
    NuGetRepository,
)
from plugin_generator.resolver import DEFAULT_MAX_CONCURRENCY

ENV_FEED = "PLUGIN_GENERATOR_FEED"
ENV_MAX_CONCURRENCY = "PLUGIN_GENERATOR_MAX_CONCURRENCY"
ENV_TIMEOUT = "PLUGIN_GENERATOR_TIMEOUT"

DEFAULT_TIMEOUT = 30.0


@dataclass
class GeneratorSettings:
    """Settings shared by every generation run.

    Attributes:
        feed: URL of a NuGet V3 service index or path of a local package folder.
        max_concurrency: Maximum number of packages fetched at once.
        request_timeout: Total timeout in seconds for one HTTP request.
        download_dir: Directory for downloaded packages. If None, each run
            uses a fresh temporary directory that is removed afterwards.
    """

    feed: str = NUGET_ORG_FEED
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    request_timeout: float = DEFAULT_TIMEOUT
    download_dir: Optional[Path] = None

    @classmethod
    def from_env(cls, **overrides) -> "GeneratorSettings":
        """Build settings from the environment.

        Keyword arguments that are not None take precedence over the
        environment.

        Raises:
            ValueError: If an environment variable holds an invalid number.
        """
        values = {
            "feed": os.environ.get(ENV_FEED, NUGET_ORG_FEED),
            "max_concurrency": int(os.environ.get(ENV_MAX_CONCURRENCY, DEFAULT_MAX_CONCURRENCY)),
            "request_timeout": float(os.environ.get(ENV_TIMEOUT, DEFAULT_TIMEOUT)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    def create_repository(self) -> BasePackageRepository:
        """Return the repository for the configured feed.

        An existing directory is read as a local feed; anything else is
        treated as the URL of a NuGet V3 service index.
        """
        feed_path = Path(self.feed).expanduser()
        if feed_path.is_dir():
            return LocalFeedRepository(feed_path)
        return NuGetRepository(self.feed, timeout=self.request_timeout)
