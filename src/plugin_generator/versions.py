"""NuGet version parsing and normalization.

NuGet versions have up to four numeric components and an optional
case-insensitive prerelease label. Two spellings name the same version when
their normalized forms match: "1.0", "1.0.0" and "1.0.0.0" are one version,
"1.0.0.1" is a different one. Build metadata is ignored.
"""

import re
from dataclasses import dataclass
from functools import cached_property, lru_cache

import semantic_version

VERSION_PATTERN = re.compile(
    r"^\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?"
    r"(?:-([0-9A-Za-z][0-9A-Za-z.-]*))?"
    r"(?:\+[0-9A-Za-z.-]+)?\s*$"
)


@dataclass(frozen=True)
class NuGetVersion:
    """A parsed NuGet version.

    Attributes:
        major: First numeric component.
        minor: Second numeric component.
        patch: Third numeric component.
        revision: Fourth numeric component (0 when absent).
        prerelease: Lowercased prerelease label, empty for releases.
    """

    major: int
    minor: int
    patch: int
    revision: int = 0
    prerelease: str = ""

    @cached_property
    def sort_key(self) -> tuple[int, int, int, int, semantic_version.Version]:
        """Return the key versions are compared and hashed by.

        The prerelease label is ranked with semver precedence rules, so a
        release sorts after any of its prereleases.
        """
        label = semantic_version.Version(f"0.0.0-{self.prerelease}" if self.prerelease else "0.0.0")
        return (self.major, self.minor, self.patch, self.revision, label)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.revision:
            text += f".{self.revision}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        return text


@lru_cache(maxsize=1024)
def parse_version(text: str) -> NuGetVersion:
    """Parse a NuGet version string.

    Raises:
        ValueError: If text is not a NuGet version.
    """
    match = VERSION_PATTERN.match(text) if isinstance(text, str) else None
    if not match:
        raise ValueError(f"'{text}' is not a NuGet version")

    major, minor, patch, revision, prerelease = match.groups()
    version = NuGetVersion(
        major=int(major),
        minor=int(minor or 0),
        patch=int(patch or 0),
        revision=int(revision or 0),
        prerelease=(prerelease or "").lower(),
    )
    # rejects labels semver precedence cannot rank, such as "beta..1"
    version.sort_key
    return version


def normalize_version(version: str) -> str:
    """Return the NuGet-normalized, lowercased form of a version.

    NuGet URLs use at least three numeric components ("1.0" -> "1.0.0"), drop
    a zero fourth component and drop build metadata.
    """
    return str(parse_version(version))
