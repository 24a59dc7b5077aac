"""Package repositories for fetching package metadata and payloads.

This module provides repositories for NuGet V3 feeds and local package
folders.
"""

from plugin_generator.repositories.base import BasePackageRepository
from plugin_generator.repositories.local import LocalFeedRepository
from plugin_generator.repositories.nuget import NUGET_ORG_FEED, NuGetRepository

__all__ = [
    "BasePackageRepository",
    "LocalFeedRepository",
    "NUGET_ORG_FEED",
    "NuGetRepository",
]
