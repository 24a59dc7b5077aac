"""Base interface for package repositories.

Repositories are responsible for fetching package metadata and materializing
package payloads from a package feed such as nuget.org or a local folder.
"""

from abc import ABC, abstractmethod
from pathlib import Path

from plugin_generator.models import PackageMetadata, PackageRef


class BasePackageRepository(ABC):
    """Abstract base class for package repositories.

    Repositories are async-compatible so the dependency resolver can fetch
    independent packages concurrently.
    """

    @abstractmethod
    async def get_metadata(self, ref: PackageRef) -> PackageMetadata:
        """Fetch the metadata of one package version.

        Args:
            ref: Package to look up.

        Returns:
            PackageMetadata with the license flag and direct dependencies.

        Raises:
            PackageNotFoundError: If the feed has no such package version.
            FetchError: If the feed could not be queried.
        """
        ...

    @abstractmethod
    async def download_payload(self, ref: PackageRef, destination_dir: Path) -> Path:
        """Materialize the package file into destination_dir.

        Args:
            ref: Package to download.
            destination_dir: Directory the payload is written to.

        Returns:
            Path of the downloaded payload.

        Raises:
            FetchError: If the payload could not be downloaded.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the repository name for logging/debugging."""
        ...

    async def close(self) -> None:
        """Release any resources held by the repository."""

    async def __aenter__(self) -> "BasePackageRepository":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()


def payload_file_name(ref: PackageRef) -> str:
    """Return the conventional file name of a package payload."""
    return f"{ref.id.lower()}.{ref.version.lower()}.nupkg"
