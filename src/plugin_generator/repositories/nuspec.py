"""Parsing helpers for NuGet package manifests.

Reads ``.nuspec`` documents (the manifest embedded in every ``.nupkg``) and
NuGet version ranges into the plugin_generator data model.
"""

import logging
import re
import zipfile
from pathlib import Path
from typing import Iterable, Optional
from xml.etree import ElementTree as ET

from plugin_generator.licenses import normalize_license
from plugin_generator.models import PackageMetadata, PackageRef

logger = logging.getLogger(__name__)

# Matches interval notation such as "[1.0, 2.0)", "(1.0,)" or "[1.2.3]"
RANGE_PATTERN = re.compile(r"^\s*([\[(])\s*([^,\])]*?)\s*(?:,\s*([^\])]*?)\s*)?([\])])\s*$")


def parse_version_range(range_text: str) -> str:
    """Return the version a NuGet dependency range resolves to.

    NuGet picks the lowest applicable version, so a range resolves to its
    inclusive lower bound. A bare version ("1.0") is a minimum-inclusive
    range. When a range has no lower bound its inclusive upper bound is used.

    Args:
        range_text: Version or interval from a dependency declaration.

    Returns:
        The version string to fetch.

    Raises:
        ValueError: If the range has no usable bound, or if the bound it
            resolves to is exclusive and so cannot name a single version
            without listing the feed.
    """
    text = range_text.strip()
    match = RANGE_PATTERN.match(text)
    if not match:
        if not text:
            raise ValueError("Empty version range")
        return text

    opening, lower, upper, closing = match.groups()
    if lower:
        if opening == "(":
            raise ValueError(f"Version range '{range_text}' has an exclusive lower bound")
        return lower
    if upper:
        if closing == ")":
            raise ValueError(f"Version range '{range_text}' has an exclusive upper bound and no lower bound")
        logger.debug("Version range '%s' has no lower bound, using upper bound", range_text)
        return upper
    raise ValueError(f"Version range '{range_text}' has no bounds")


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            return child
    return None


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    child = _child(element, name)
    if child is None or child.text is None:
        return None
    return child.text.strip() or None


def unique_refs(refs: Iterable[PackageRef]) -> list[PackageRef]:
    """Deduplicate references while keeping their first-seen order."""
    seen: set[PackageRef] = set()
    result = []
    for ref in refs:
        if ref not in seen:
            seen.add(ref)
            result.append(ref)
    return result


def parse_nuspec(content: bytes | str) -> PackageMetadata:
    """Parse a ``.nuspec`` document.

    Dependencies declared in framework-specific groups are flattened into a
    single ordered list.

    Args:
        content: Raw XML of the manifest.

    Returns:
        PackageMetadata read from the manifest.

    Raises:
        ValueError: If the document is not a valid manifest.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Invalid nuspec XML: {e}") from e

    metadata = _child(root, "metadata")
    if metadata is None:
        raise ValueError("nuspec has no <metadata> element")

    package_id = _child_text(metadata, "id")
    version = _child_text(metadata, "version")
    if not package_id or not version:
        raise ValueError("nuspec is missing the package id or version")

    dependencies: list[PackageRef] = []
    deps_element = _child(metadata, "dependencies")
    if deps_element is not None:
        for element in deps_element.iter():
            if _local_name(element.tag) != "dependency":
                continue
            dep_id = element.get("id")
            dep_range = element.get("version")
            if not dep_id or not dep_range:
                raise ValueError(f"Dependency without id or version in {package_id}")
            dependencies.append(PackageRef(dep_id, parse_version_range(dep_range)))

    license_text = None
    license_element = _child(metadata, "license")
    if license_element is not None and license_element.get("type") == "expression":
        license_text = (license_element.text or "").strip() or None

    require_acceptance = _child_text(metadata, "requireLicenseAcceptance") or "false"

    return PackageMetadata(
        ref=PackageRef(package_id, version),
        license_required=require_acceptance.lower() == "true",
        dependencies=unique_refs(dependencies),
        title=_child_text(metadata, "title"),
        description=_child_text(metadata, "description"),
        authors=_child_text(metadata, "authors"),
        license=normalize_license(license_text),
        license_url=_child_text(metadata, "licenseUrl"),
        project_url=_child_text(metadata, "projectUrl"),
    )


def read_nuspec(package_path: Path) -> PackageMetadata:
    """Read the manifest embedded in a ``.nupkg`` archive.

    Raises:
        ValueError: If the archive cannot be read, is not a package or has no
            manifest.
    """
    try:
        with zipfile.ZipFile(package_path) as archive:
            names = [n for n in archive.namelist() if "/" not in n and n.endswith(".nuspec")]
            if not names:
                raise ValueError(f"No .nuspec found in {package_path.name}")
            content = archive.read(names[0])
    except zipfile.BadZipFile as e:
        raise ValueError(f"{package_path.name} is not a valid package archive: {e}") from e
    except OSError as e:
        raise ValueError(f"could not read {package_path.name}: {e}") from e

    return parse_nuspec(content)
