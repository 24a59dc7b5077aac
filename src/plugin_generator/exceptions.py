"""Exception hierarchy for plugin_generator."""

from pathlib import Path
from typing import Optional

from plugin_generator.models import PackageRef


class PluginGeneratorError(Exception):
    """Base class for all errors raised by plugin_generator."""


class FetchError(PluginGeneratorError):
    """A package could not be fetched from the repository.

    Attributes:
        ref: The package that could not be fetched.
        reason: Human-readable cause.
    """

    def __init__(self, ref: PackageRef, reason: str) -> None:
        self.ref = ref
        self.reason = reason
        super().__init__(f"Failed to fetch package {ref}: {reason}")


class PackageNotFoundError(FetchError):
    """The repository does not contain the requested package version."""

    def __init__(self, ref: PackageRef, source: Optional[str] = None) -> None:
        reason = f"not found in {source}" if source else "not found"
        super().__init__(ref, reason)


class TemplateParseError(PluginGeneratorError):
    """A sqale file could not be parsed.

    Attributes:
        path: The offending file.
        reason: Parser message.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid sqale file '{path}': {reason}")
