"""Repository backed by a local folder of ``.nupkg`` files.

Supports both flat feeds (every package in one directory) and the
hierarchical ``{id}/{version}/`` layout produced by ``nuget add``.
"""

import asyncio
import logging
import shutil
from pathlib import Path
from typing import Optional

from plugin_generator.exceptions import FetchError, PackageNotFoundError
from plugin_generator.models import PackageMetadata, PackageRef
from plugin_generator.repositories.base import BasePackageRepository, payload_file_name
from plugin_generator.repositories.nuspec import read_nuspec

logger = logging.getLogger(__name__)


class LocalFeedRepository(BasePackageRepository):
    """Repository reading packages from a local directory.

    The feed is indexed on first use by reading the manifest of every
    ``.nupkg`` file below the root directory. Files that are not valid
    packages are skipped with a warning.

    Attributes:
        root: Directory holding the packages.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the local feed.

        Args:
            root: Directory holding the packages.
        """
        self.root = root
        self._index: Optional[dict[PackageRef, tuple[Path, PackageMetadata]]] = None

    @property
    def name(self) -> str:
        return f"local feed {self.root}"

    def _build_index(self) -> dict[PackageRef, tuple[Path, PackageMetadata]]:
        index: dict[PackageRef, tuple[Path, PackageMetadata]] = {}
        for package_path in sorted(self.root.rglob("*.nupkg")):
            try:
                metadata = read_nuspec(package_path)
            except ValueError as e:
                logger.warning("Skipping %s: %s", package_path, e)
                continue
            index[metadata.ref] = (package_path, metadata)

        logger.debug("Indexed %d packages in %s", len(index), self.root)
        return index

    def _lookup(self, ref: PackageRef) -> tuple[Path, PackageMetadata]:
        if self._index is None:
            if not self.root.is_dir():
                raise FetchError(ref, f"feed directory {self.root} does not exist")
            try:
                self._index = self._build_index()
            except OSError as e:
                raise FetchError(ref, f"could not index {self.root}: {e}") from e

        entry = self._index.get(ref)
        if entry is None:
            raise PackageNotFoundError(ref, self.name)
        return entry

    async def get_metadata(self, ref: PackageRef) -> PackageMetadata:
        _, metadata = self._lookup(ref)
        return metadata

    async def download_payload(self, ref: PackageRef, destination_dir: Path) -> Path:
        source, _ = self._lookup(ref)
        destination = destination_dir / payload_file_name(ref)

        try:
            destination_dir.mkdir(parents=True, exist_ok=True)
            await asyncio.to_thread(shutil.copyfile, source, destination)
        except OSError as e:
            raise FetchError(ref, f"could not copy {source}: {e}") from e

        logger.debug("Copied %s to %s", source, destination)
        return destination
