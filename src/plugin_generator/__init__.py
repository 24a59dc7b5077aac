"""Plugin Generator - Build analyzer plugins from NuGet packages.

This package resolves the dependency closure of a NuGet package, checks
that every license in it has been accepted, and packages the analyzers it
contains as a plugin for a static analysis host.
"""

__version__ = "0.1.0"

from plugin_generator.models import (
    DependencyClosure,
    GenerationArgs,
    PackageMetadata,
    PackageNode,
    PackageRef,
)

__all__ = [
    "__version__",
    "DependencyClosure",
    "GenerationArgs",
    "PackageMetadata",
    "PackageNode",
    "PackageRef",
]
