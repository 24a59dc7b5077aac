"""Base interface for output writers.

Writers render the files produced by a generation run (the plugin archive
and the sqale template) from a PluginJob.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from importlib.resources import files
from pathlib import Path
from typing import Callable, Optional

from jinja2 import Environment, FileSystemLoader, Template

from plugin_generator.fileutils import atomic_write
from plugin_generator.models import AnalyzerAssembly, DependencyClosure, PackageMetadata


def load_template(
    name: str,
    template_path: Optional[Path] = None,
    autoescape: bool = False,
    filters: Optional[dict[str, Callable]] = None,
) -> Template:
    """Load a Jinja2 template.

    Args:
        name: File name of the bundled template.
        template_path: Optional path to a custom template to use instead.
        autoescape: Whether to escape rendered values.
        filters: Extra Jinja2 filters the template uses.

    Returns:
        The loaded template.
    """
    if template_path:
        env = Environment(
            loader=FileSystemLoader(template_path.parent),
            autoescape=autoescape,
            keep_trailing_newline=True,
        )
        env.filters.update(filters or {})
        return env.get_template(template_path.name)

    template_content = (
        files("plugin_generator.templates").joinpath(name).read_text(encoding="utf-8")
    )
    env = Environment(autoescape=autoescape, keep_trailing_newline=True)
    env.filters.update(filters or {})
    return env.from_string(template_content)


def plugin_key(package_id: str) -> str:
    """Derive the plugin key from a package id ("My.Analyzers" -> "myanalyzers")."""
    return re.sub(r"[^a-z0-9]", "", package_id.lower())


@dataclass
class PluginJob:
    """Everything needed to render the outputs of one run.

    Attributes:
        closure: The allowed dependency closure.
        assemblies: Analyzer assemblies to package.
        language: Target language tag.
        sqale_xml: Sqale document to embed in the plugin, if any.
    """

    closure: DependencyClosure
    assemblies: frozenset[AnalyzerAssembly]
    language: str
    sqale_xml: Optional[bytes] = None

    @property
    def package(self) -> PackageMetadata:
        return self.closure.root_node.metadata

    @property
    def plugin_key(self) -> str:
        return plugin_key(self.closure.root.id)

    @property
    def sorted_assemblies(self) -> list[AnalyzerAssembly]:
        return sorted(self.assemblies, key=lambda a: (a.package, a.entry))


class BaseWriter(ABC):
    """Abstract base class for output writers."""

    @abstractmethod
    def render(self, job: PluginJob) -> bytes:
        """Render the output file content.

        Args:
            job: The generation job.

        Returns:
            Complete file content.
        """
        ...

    @abstractmethod
    def file_name(self, job: PluginJob) -> str:
        """Return the output file name for job."""
        ...

    def write(self, job: PluginJob, output_dir: Path) -> Path:
        """Render and write the output file atomically.

        Args:
            job: The generation job.
            output_dir: Directory to write into.

        Returns:
            Path of the written file.
        """
        output_path = output_dir / self.file_name(job)
        atomic_write(output_path, self.render(job))
        return output_path
