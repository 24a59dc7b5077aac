"""NuGet V3 repository client.

Fetches package metadata from the registration resource of a NuGet V3 feed
and downloads ``.nupkg`` files from its package base address (flat
container).
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Any, Optional

import aiohttp

from plugin_generator.exceptions import FetchError, PackageNotFoundError
from plugin_generator.licenses import normalize_license
from plugin_generator.models import PackageMetadata, PackageRef
from plugin_generator.repositories.base import payload_file_name
from plugin_generator.repositories.http import HttpRepository
from plugin_generator.repositories.nuspec import parse_version_range, unique_refs
from plugin_generator.versions import normalize_version

logger = logging.getLogger(__name__)

NUGET_ORG_FEED = "https://api.nuget.org/v3/index.json"

HEADERS_JSON = {"Accept": "application/json"}

# Resource types in order of preference
REGISTRATION_TYPES = (
    "RegistrationsBaseUrl/3.6.0",
    "RegistrationsBaseUrl/3.4.0",
    "RegistrationsBaseUrl/3.0.0-rc",
    "RegistrationsBaseUrl",
)
PACKAGE_BASE_TYPES = ("PackageBaseAddress/3.0.0",)

CHUNK_SIZE = 64 * 1024


class NuGetRepository(HttpRepository):
    """Repository client for NuGet V3 feeds such as nuget.org.

    The service index is fetched once per repository instance and the
    registration and package base addresses are read from it.

    Attributes:
        feed_url: URL of the feed's V3 service index.
    """

    def __init__(self, feed_url: str = NUGET_ORG_FEED, timeout: float = 30) -> None:
        """Initialize the NuGet repository.

        Args:
            feed_url: URL of the V3 service index (``.../v3/index.json``).
            timeout: Total timeout in seconds for a single request.
        """
        super().__init__(timeout=timeout)
        self.feed_url = feed_url
        self._resources: Optional[dict[str, str]] = None
        self._resources_lock = asyncio.Lock()

    @property
    def name(self) -> str:
        return f"NuGet feed {self.feed_url}"

    async def _get_json(self, url: str, ref: PackageRef) -> Any:
        logger.debug("Fetching %s", url)
        try:
            session = await self._get_session()
            async with session.get(url, headers=HEADERS_JSON) as response:
                if response.status == 404:
                    raise PackageNotFoundError(ref, self.name)
                if response.status != 200:
                    raise FetchError(ref, f"{url} returned status {response.status}")
                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    raise FetchError(ref, f"invalid JSON from {url}: {e}") from e
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(ref, f"network error fetching {url}: {e}") from e

    async def _get_object(self, url: str, ref: PackageRef) -> dict[str, Any]:
        document = await self._get_json(url, ref)
        if not isinstance(document, dict):
            raise FetchError(ref, f"expected a JSON object from {url}, got {type(document).__name__}")
        return document

    async def _get_resources(self, ref: PackageRef) -> dict[str, str]:
        async with self._resources_lock:
            if self._resources is None:
                index = await self._get_object(self.feed_url, ref)
                resources: dict[str, str] = {}
                for resource in index.get("resources") or []:
                    if not isinstance(resource, dict):
                        continue
                    types = resource.get("@type")
                    if isinstance(types, str):
                        types = [types]
                    if not isinstance(types, list):
                        continue
                    for resource_type in types:
                        resources.setdefault(resource_type, resource.get("@id", ""))
                self._resources = resources
            return self._resources

    async def _resource_url(self, ref: PackageRef, candidates: tuple[str, ...]) -> str:
        resources = await self._get_resources(ref)
        for resource_type in candidates:
            url = resources.get(resource_type)
            if url:
                return url if url.endswith("/") else url + "/"
        raise FetchError(ref, f"feed {self.feed_url} does not provide {candidates[0]}")

    async def get_metadata(self, ref: PackageRef) -> PackageMetadata:
        base = await self._resource_url(ref, REGISTRATION_TYPES)
        leaf_url = f"{base}{ref.id.lower()}/{normalize_version(ref.version)}.json"
        leaf = await self._get_object(leaf_url, ref)

        entry = leaf.get("catalogEntry")
        if isinstance(entry, str):
            entry = await self._get_object(entry, ref)
        if not isinstance(entry, dict):
            raise FetchError(ref, f"registration leaf {leaf_url} has no catalog entry")

        try:
            return self._parse_catalog_entry(entry, ref)
        except ValueError as e:
            raise FetchError(ref, f"invalid metadata: {e}") from e

    def _parse_catalog_entry(self, entry: dict, ref: PackageRef) -> PackageMetadata:
        """Parse a registration catalog entry into PackageMetadata.

        Args:
            entry: The ``catalogEntry`` document.
            ref: Package the entry was requested for.

        Returns:
            Parsed PackageMetadata.

        Raises:
            ValueError: If a dependency declaration is malformed.
        """
        dependencies = []
        for group in entry.get("dependencyGroups") or []:
            if not isinstance(group, dict):
                raise ValueError("dependency group is not an object")
            for dependency in group.get("dependencies") or []:
                if not isinstance(dependency, dict):
                    raise ValueError("dependency is not an object")
                dep_id = dependency.get("id")
                if not dep_id:
                    raise ValueError("dependency without id")
                dep_range = dependency.get("range") or "0.0.0"
                dependencies.append(PackageRef(dep_id, parse_version_range(dep_range)))

        authors = entry.get("authors")
        if isinstance(authors, list):
            authors = ", ".join(authors)

        return PackageMetadata(
            ref=PackageRef(entry.get("id") or ref.id, entry.get("version") or ref.version),
            license_required=bool(entry.get("requireLicenseAcceptance", False)),
            dependencies=unique_refs(dependencies),
            title=entry.get("title") or None,
            description=entry.get("description") or None,
            authors=authors or None,
            license=normalize_license(entry.get("licenseExpression")),
            license_url=entry.get("licenseUrl") or None,
            project_url=entry.get("projectUrl") or None,
        )

    async def download_payload(self, ref: PackageRef, destination_dir: Path) -> Path:
        base = await self._resource_url(ref, PACKAGE_BASE_TYPES)
        package_id = ref.id.lower()
        version = normalize_version(ref.version)
        url = f"{base}{package_id}/{version}/{package_id}.{version}.nupkg"

        destination_dir.mkdir(parents=True, exist_ok=True)
        destination = destination_dir / payload_file_name(ref)
        partial = destination.with_name(destination.name + ".partial")

        logger.debug("Downloading %s", url)
        try:
            session = await self._get_session()
            async with session.get(url) as response:
                if response.status == 404:
                    raise PackageNotFoundError(ref, self.name)
                if response.status != 200:
                    raise FetchError(ref, f"{url} returned status {response.status}")
                with open(partial, "wb") as f:
                    async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                        f.write(chunk)
            os.replace(partial, destination)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(ref, f"network error downloading {url}: {e}") from e
        except OSError as e:
            raise FetchError(ref, f"could not write {destination}: {e}") from e
        finally:
            if partial.exists():
                partial.unlink()

        return destination
