"""Analyzer discovery in package payloads.

NuGet packages ship Roslyn analyzers under ``analyzers/dotnet/`` with an
optional language folder (``analyzers/dotnet/cs/``, ``analyzers/dotnet/vb/``).
Assemblies outside a language folder apply to every language.
"""

import logging
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from plugin_generator.diagnostics import DiagnosticLog, MessageKind
from plugin_generator.models import SUPPORTED_LANGUAGES, AnalyzerAssembly, DependencyClosure

logger = logging.getLogger(__name__)

ANALYZERS_FOLDER = "analyzers/"


class BaseAnalyzerInspector(ABC):
    """Abstract base class for analyzer inspectors.

    Inspectors decide whether a package payload contributes analyzer
    assemblies.
    """

    @abstractmethod
    def find_analyzers(self, payload_path: Path, language: Optional[str] = None) -> list[str]:
        """Return the analyzer assembly entries of a payload.

        Args:
            payload_path: Local path of the package payload.
            language: Restrict to assemblies usable for this language, or
                None for any language.

        Returns:
            Entry names of the analyzer assemblies, sorted.
        """
        ...

    def has_analyzer(self, payload_path: Path) -> bool:
        """Return True if the payload contains any analyzer assembly."""
        return bool(self.find_analyzers(payload_path))


class NuGetLayoutInspector(BaseAnalyzerInspector):
    """Finds analyzer assemblies by the NuGet analyzer folder convention."""

    def _matches_language(self, entry: str, language: Optional[str]) -> bool:
        if language is None:
            return True
        # analyzers/dotnet/{language}/X.dll, analyzers/dotnet/X.dll, analyzers/X.dll
        folders = entry[len(ANALYZERS_FOLDER):].split("/")[:-1]
        language_folders = [f for f in folders if f in SUPPORTED_LANGUAGES]
        return not language_folders or language in language_folders

    def find_analyzers(self, payload_path: Path, language: Optional[str] = None) -> list[str]:
        try:
            with zipfile.ZipFile(payload_path) as archive:
                names = archive.namelist()
        except (zipfile.BadZipFile, OSError) as e:
            logger.warning("Could not inspect %s: %s", payload_path.name, e)
            return []

        return sorted(
            name
            for name in names
            if name.lower().startswith(ANALYZERS_FOLDER)
            and name.lower().endswith(".dll")
            and self._matches_language(name.lower(), language)
        )


class AnalyzerPayloadExtractor:
    """Collects the analyzer assemblies of every package in a closure.

    Attributes:
        inspector: Inspector deciding which payload entries are analyzers.
        language: Target language tag.
    """

    def __init__(
        self,
        inspector: Optional[BaseAnalyzerInspector] = None,
        language: Optional[str] = None,
    ) -> None:
        self.inspector = inspector or NuGetLayoutInspector()
        self.language = language

    def extract(self, closure: DependencyClosure, log: DiagnosticLog) -> frozenset[AnalyzerAssembly]:
        """Find the analyzer assemblies contributed by the closure.

        Records a single warning when no package contributes an analyzer.

        Args:
            closure: An allowed dependency closure.
            log: Diagnostic log of the current run.

        Returns:
            All analyzer assemblies found; empty if there are none.
        """
        assemblies = set()
        for node in closure:
            entries = self.inspector.find_analyzers(node.payload_path, self.language)
            logger.debug("%s contributes %d analyzer assembly(ies)", node.ref, len(entries))
            assemblies.update(
                AnalyzerAssembly(package=node.ref, entry=entry, payload_path=node.payload_path)
                for entry in entries
            )

        if not assemblies:
            log.warning(
                MessageKind.NO_ANALYZERS_FOUND,
                f"No analyzers were found in package {closure.root} or its dependencies",
                package=closure.root,
            )

        return frozenset(assemblies)
