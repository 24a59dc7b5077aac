"""Pytest configuration and fixtures."""

import zipfile
from pathlib import Path
from typing import Callable, Optional

import pytest

from plugin_generator.models import (
    DependencyClosure,
    LicenseLink,
    PackageMetadata,
    PackageNode,
    PackageRef,
)
from plugin_generator.repositories import LocalFeedRepository

NUSPEC_NS = "http://schemas.microsoft.com/packaging/2013/05/nuspec.xsd"

SQALE_XML = """<?xml version="1.0" encoding="utf-8"?>
<sqale>
  <chc>
    <key>MAINTAINABILITY</key>
    <name>Maintainability</name>
    <chc>
      <key>READABILITY</key>
      <name>Readability</name>
      <chc>
        <rule-repo>roslyn.contosoanalyzers</rule-repo>
        <rule-key>CA1000</rule-key>
        <prop>
          <key>remediationFunction</key>
          <txt>CONSTANT_ISSUE</txt>
        </prop>
        <prop>
          <key>offset</key>
          <val>10</val>
          <txt>mn</txt>
        </prop>
      </chc>
    </chc>
  </chc>
</sqale>
"""


def build_nuspec(
    package_id: str,
    version: str,
    dependencies: Optional[list[tuple[str, str]]] = None,
    license_required: bool = False,
    license_expression: Optional[str] = None,
    description: str = "Test package",
) -> str:
    """Return the XML of a minimal .nuspec manifest."""
    lines = [
        '<?xml version="1.0" encoding="utf-8"?>',
        f'<package xmlns="{NUSPEC_NS}">',
        "  <metadata>",
        f"    <id>{package_id}</id>",
        f"    <version>{version}</version>",
        "    <authors>Test Authors</authors>",
        f"    <description>{description}</description>",
        f"    <requireLicenseAcceptance>{str(license_required).lower()}</requireLicenseAcceptance>",
    ]
    if license_expression:
        lines.append(f'    <license type="expression">{license_expression}</license>')
    if dependencies:
        lines.append("    <dependencies>")
        lines.append('      <group targetFramework=".NETStandard2.0">')
        for dep_id, dep_version in dependencies:
            lines.append(f'        <dependency id="{dep_id}" version="{dep_version}" />')
        lines.append("      </group>")
        lines.append("    </dependencies>")
    lines += ["  </metadata>", "</package>"]
    return "\n".join(lines)


def build_nupkg(
    directory: Path,
    package_id: str,
    version: str,
    dependencies: Optional[list[tuple[str, str]]] = None,
    license_required: bool = False,
    analyzers: Optional[list[str]] = None,
    license_expression: Optional[str] = None,
) -> Path:
    """Write a .nupkg archive into directory.

    Args:
        directory: Feed directory.
        package_id: Package id.
        version: Package version.
        dependencies: (id, version range) pairs.
        license_required: Value of requireLicenseAcceptance.
        analyzers: Archive entries of analyzer assemblies, e.g.
            "analyzers/dotnet/cs/Foo.dll". Packages without analyzers get a
            plain content file instead.
        license_expression: Optional SPDX license expression.

    Returns:
        Path of the written archive.
    """
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{package_id}.{version}.nupkg"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(
            f"{package_id}.nuspec",
            build_nuspec(
                package_id,
                version,
                dependencies=dependencies,
                license_required=license_required,
                license_expression=license_expression,
            ),
        )
        for entry in analyzers or []:
            archive.writestr(entry, b"MZ" + entry.encode("utf-8"))
        if not analyzers:
            archive.writestr("content/dummy.txt", "no analyzers here")
    return path


@pytest.fixture
def nupkg_builder() -> Callable[..., Path]:
    """Return the function writing .nupkg archives."""
    return build_nupkg


@pytest.fixture
def feed_dir(tmp_path: Path) -> Path:
    """Return an empty local feed directory."""
    path = tmp_path / "feed"
    path.mkdir()
    return path


@pytest.fixture
def add_package(feed_dir: Path) -> Callable[..., Path]:
    """Return a function adding a package to the local feed."""

    def _add(package_id: str, version: str, **kwargs) -> Path:
        return build_nupkg(feed_dir, package_id, version, **kwargs)

    return _add


@pytest.fixture
def local_repository(feed_dir: Path) -> LocalFeedRepository:
    """Return a repository reading from the local feed directory."""
    return LocalFeedRepository(feed_dir)


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Return the directory generated artifacts are written to."""
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture
def sqale_file(tmp_path: Path) -> Path:
    """Return a valid user-supplied sqale file."""
    path = tmp_path / "custom.sqale.xml"
    path.write_text(SQALE_XML, encoding="utf-8")
    return path


@pytest.fixture
def make_closure(tmp_path: Path) -> Callable[..., DependencyClosure]:
    """Return a function building a closure from (id, version, license_required) tuples.

    The first tuple is the root. Payloads are real archives; analyzers are
    added for the ids listed in ``with_analyzers``.
    """

    def _make(
        packages: list[tuple[str, str, bool]],
        with_analyzers: tuple[str, ...] = (),
    ) -> DependencyClosure:
        payload_dir = tmp_path / "payloads"
        nodes = {}
        for package_id, version, license_required in packages:
            ref = PackageRef(package_id, version)
            analyzers = [f"analyzers/dotnet/cs/{package_id}.dll"] if package_id in with_analyzers else None
            payload = build_nupkg(
                payload_dir, package_id, version, license_required=license_required, analyzers=analyzers
            )
            metadata = PackageMetadata(
                ref=ref,
                license_required=license_required,
                description=f"{package_id} description",
                authors="Contoso",
                license=LicenseLink(
                    spdx_id="MIT", name="MIT", url="https://spdx.org/licenses/MIT.html"
                ),
            )
            nodes[ref] = PackageNode(ref=ref, metadata=metadata, payload_path=payload)
        root = PackageRef(packages[0][0], packages[0][1])
        return DependencyClosure(root=root, nodes=nodes)

    return _make
