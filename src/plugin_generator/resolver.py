"""Dependency closure resolution.

Walks the dependency graph of a root package through a package repository,
fetching every distinct package exactly once and downloading its payload
into the run's download directory.
"""

import asyncio
import logging
from pathlib import Path

from plugin_generator.models import DependencyClosure, PackageNode, PackageRef
from plugin_generator.repositories.base import BasePackageRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 4


class DependencyClosureResolver:
    """Builds the transitive dependency closure of a package.

    Resolution strategy:
    1. A reference is marked visited before its fetch is scheduled, so a
       package reached through several paths (or a cycle) is fetched once.
    2. Independent packages are fetched concurrently, bounded by
       ``max_concurrency``.
    3. The first fetch failure cancels every in-flight fetch and is raised;
       no partial closure is ever returned.

    Attributes:
        repository: Repository the packages are fetched from.
        download_dir: Directory the payloads are downloaded into.
        max_concurrency: Maximum number of concurrent fetches.
    """

    def __init__(
        self,
        repository: BasePackageRepository,
        download_dir: Path,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")
        self.repository = repository
        self.download_dir = download_dir
        self.max_concurrency = max_concurrency

    async def _fetch_node(self, ref: PackageRef, semaphore: asyncio.Semaphore) -> PackageNode:
        async with semaphore:
            logger.debug("Fetching %s from %s", ref, self.repository.name)
            metadata = await self.repository.get_metadata(ref)
            payload_path = await self.repository.download_payload(ref, self.download_dir)
        return PackageNode(ref=ref, metadata=metadata, payload_path=payload_path)

    async def resolve(self, root: PackageRef) -> DependencyClosure:
        """Resolve the full dependency closure of root.

        Args:
            root: Package to start from.

        Returns:
            DependencyClosure holding every package reachable from root.

        Raises:
            FetchError: If any package in the closure could not be fetched.
        """
        logger.info("Resolving dependency closure of %s", root)

        semaphore = asyncio.Semaphore(self.max_concurrency)
        nodes: dict[PackageRef, PackageNode] = {}
        visited: set[PackageRef] = set()
        pending: set[asyncio.Task] = set()
        scheduled: dict[asyncio.Task, PackageRef] = {}

        def schedule(ref: PackageRef) -> None:
            if ref in visited:
                return
            visited.add(ref)
            task = asyncio.create_task(self._fetch_node(ref, semaphore))
            scheduled[task] = ref
            pending.add(task)

        schedule(root)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)

                # fetches failing together report the lowest reference
                failed = sorted(
                    (task for task in done if task.exception() is not None), key=scheduled.__getitem__
                )
                if failed:
                    raise failed[0].exception()

                for task in done:
                    node = task.result()
                    nodes[node.ref] = node
                    for dependency in node.dependencies:
                        schedule(dependency)
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        logger.info("Resolved %d package(s) for %s", len(nodes), root)
        return DependencyClosure(root=root, nodes=nodes)
