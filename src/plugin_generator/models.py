"""Core data models for plugin_generator.

This module defines the fundamental data structures used throughout the
generation pipeline: package references, resolved package nodes, the
dependency closure and the arguments of a generation run.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from plugin_generator.versions import NuGetVersion, parse_version

SUPPORTED_LANGUAGES = ("cs", "vb")


@dataclass(frozen=True, eq=False)
class PackageRef:
    """Immutable reference to one version of a package.

    Two references are the same node when their ids match case-insensitively
    and their versions normalize to the same NuGet version ("1.0", "1.0.0"
    and "1.0.0.0" are equal). The original strings are kept for display and
    file naming.

    Attributes:
        id: Package identifier (e.g., "Newtonsoft.Json").
        version: Version string as published (e.g., "13.0.1").
    """

    id: str
    version: str

    def __post_init__(self) -> None:
        if not self.id or not self.id.strip():
            raise ValueError("Package id must not be empty")
        try:
            parse_version(self.version)
        except ValueError as e:
            raise ValueError(f"Invalid package version '{self.version}': {e}") from e

    @property
    def nuget_version(self) -> NuGetVersion:
        """Return the parsed NuGet version."""
        return parse_version(self.version)

    @property
    def _identity(self) -> tuple:
        return (self.id.lower(), self.nuget_version.sort_key)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PackageRef):
            return NotImplemented
        return self._identity == other._identity

    def __hash__(self) -> int:
        return hash(self._identity)

    def __lt__(self, other: "PackageRef") -> bool:
        return self._identity < other._identity

    def __str__(self) -> str:
        return f"{self.id} {self.version}"


@dataclass
class LicenseLink:
    """A normalized license reference.

    Attributes:
        spdx_id: Normalized SPDX identifier (e.g., "MIT", "Apache-2.0").
        name: License text as published by the package.
        url: URL to the license text or SPDX page.
    """

    spdx_id: str
    name: str
    url: str


@dataclass
class PackageMetadata:
    """Metadata reported by a package repository for one package version.

    Attributes:
        ref: The package reference this metadata describes.
        license_required: True if the package requires license acceptance.
        dependencies: Direct dependencies in declaration order.
        title: Optional display title.
        description: Optional package description.
        authors: Optional author list as published.
        license: Optional normalized license.
        license_url: Optional URL of the license, when no expression is given.
        project_url: Optional project homepage.
    """

    ref: PackageRef
    license_required: bool = False
    dependencies: list[PackageRef] = field(default_factory=list)
    title: Optional[str] = None
    description: Optional[str] = None
    authors: Optional[str] = None
    license: Optional[LicenseLink] = None
    license_url: Optional[str] = None
    project_url: Optional[str] = None


@dataclass(frozen=True)
class PackageNode:
    """One resolved package in a dependency closure.

    Created once by the resolver and never mutated afterwards.

    Attributes:
        ref: Identity of the package.
        metadata: Metadata fetched from the repository.
        payload_path: Local path of the downloaded package payload.
    """

    ref: PackageRef
    metadata: PackageMetadata
    payload_path: Path

    @property
    def license_required(self) -> bool:
        return self.metadata.license_required

    @property
    def dependencies(self) -> list[PackageRef]:
        return self.metadata.dependencies


@dataclass
class DependencyClosure:
    """The transitive dependency set of a root package.

    Nodes are keyed by PackageRef, so diamond dependencies collapse to a
    single node. Iteration yields nodes in sorted reference order.

    Attributes:
        root: Reference of the package the closure was resolved from.
        nodes: Mapping of every reachable reference to its node.
    """

    root: PackageRef
    nodes: dict[PackageRef, PackageNode] = field(default_factory=dict)

    def __contains__(self, ref: object) -> bool:
        return ref in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[PackageNode]:
        return iter(self.nodes[ref] for ref in sorted(self.nodes))

    def get(self, ref: PackageRef) -> Optional[PackageNode]:
        return self.nodes.get(ref)

    @property
    def root_node(self) -> PackageNode:
        return self.nodes[self.root]

    @property
    def refs(self) -> frozenset[PackageRef]:
        return frozenset(self.nodes)


@dataclass(frozen=True)
class AnalyzerAssembly:
    """An analyzer assembly found inside a package payload.

    Attributes:
        package: Package that contributes the assembly.
        entry: Archive entry name of the assembly inside the payload.
        payload_path: Local path of the payload holding the entry.
    """

    package: PackageRef
    entry: str
    payload_path: Path

    @property
    def file_name(self) -> str:
        return self.entry.rsplit("/", 1)[-1]


@dataclass
class GenerationArgs:
    """Validated arguments of one generation run.

    Attributes:
        package_id: Id of the package to generate a plugin for.
        package_version: Version of that package.
        language: Target language tag ("cs" or "vb").
        sqale_file: Optional existing sqale file to embed instead of a
            generated template.
        accept_licenses: True if the user accepts every license in the
            dependency closure.
        output_dir: Directory the artifacts are written to.
    """

    package_id: str
    package_version: str
    language: str = "cs"
    sqale_file: Optional[Path] = None
    accept_licenses: bool = False
    output_dir: Path = field(default_factory=Path.cwd)

    def __post_init__(self) -> None:
        if self.language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language '{self.language}'. "
                f"Supported languages: {', '.join(SUPPORTED_LANGUAGES)}"
            )
        # validates the id and version
        PackageRef(self.package_id, self.package_version)

    @property
    def package_ref(self) -> PackageRef:
        return PackageRef(self.package_id, self.package_version)
