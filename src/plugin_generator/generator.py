"""Plugin generation pipeline.

Sequences dependency resolution, the license compliance check, analyzer
extraction and artifact emission. Each stage either hands its result to the
next one or ends the run with a failed GenerationResult; the diagnostics of
the run explain why.
"""

import contextlib
import logging
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

from plugin_generator.analyzers import AnalyzerPayloadExtractor, BaseAnalyzerInspector
from plugin_generator.compliance import LicenseComplianceAggregator
from plugin_generator.diagnostics import DiagnosticLog, MessageKind
from plugin_generator.exceptions import FetchError, TemplateParseError
from plugin_generator.fileutils import atomic_write
from plugin_generator.models import (
    AnalyzerAssembly,
    DependencyClosure,
    GenerationArgs,
    PackageRef,
)
from plugin_generator.repositories.base import BasePackageRepository
from plugin_generator.resolver import DEFAULT_MAX_CONCURRENCY, DependencyClosureResolver
from plugin_generator.sqale import SqaleSerializer
from plugin_generator.writers import PluginJob, PluginWriter, SqaleTemplateWriter

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one generation run.

    Attributes:
        success: True if the plugin was written.
        diagnostics: Everything reported during the run, in order.
        plugin_path: Path of the written plugin, on success.
        sqale_template_path: Path of the generated sqale template, if one
            was generated.
    """

    success: bool
    diagnostics: DiagnosticLog = field(default_factory=DiagnosticLog)
    plugin_path: Optional[Path] = None
    sqale_template_path: Optional[Path] = None

    def __bool__(self) -> bool:
        return self.success


class ArtifactGenerator:
    """Generates an analyzer plugin from a package and its dependencies.

    Attributes:
        repository: Repository the packages are fetched from.
        download_dir: Directory for downloaded packages, or None to use a
            temporary directory per run.
        max_concurrency: Maximum number of packages fetched at once.
    """

    def __init__(
        self,
        repository: BasePackageRepository,
        download_dir: Optional[Path] = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        inspector: Optional[BaseAnalyzerInspector] = None,
        serializer: Optional[SqaleSerializer] = None,
        plugin_writer: Optional[PluginWriter] = None,
        sqale_writer: Optional[SqaleTemplateWriter] = None,
    ) -> None:
        self.repository = repository
        self.download_dir = download_dir
        self.max_concurrency = max_concurrency
        self.inspector = inspector
        self.aggregator = LicenseComplianceAggregator()
        self.serializer = serializer or SqaleSerializer()
        self.plugin_writer = plugin_writer or PluginWriter()
        self.sqale_writer = sqale_writer or SqaleTemplateWriter()

    @contextlib.contextmanager
    def _run_download_dir(self) -> Iterator[Path]:
        if self.download_dir is not None:
            self.download_dir.mkdir(parents=True, exist_ok=True)
            yield self.download_dir
        else:
            with tempfile.TemporaryDirectory(prefix="plugin-generator-") as tmp:
                yield Path(tmp)

    async def resolve(
        self, root: PackageRef, download_dir: Path, log: DiagnosticLog
    ) -> Optional[DependencyClosure]:
        """Resolve the dependency closure of root.

        Returns:
            The closure, or None after recording an error if a package could
            not be fetched.
        """
        resolver = DependencyClosureResolver(self.repository, download_dir, self.max_concurrency)
        try:
            return await resolver.resolve(root)
        except FetchError as e:
            log.error(
                MessageKind.PACKAGE_FETCH_FAILED,
                f"Could not fetch package {e.ref}: {e.reason}",
                package=e.ref,
            )
            return None

    async def generate(self, args: GenerationArgs) -> GenerationResult:
        """Run the whole pipeline for args.

        Args:
            args: Validated generation arguments.

        Returns:
            GenerationResult; success is True only if the plugin was written.
        """
        log = DiagnosticLog()
        logger.info("Generating plugin for %s (%s)", args.package_ref, args.language)

        with self._run_download_dir() as download_dir:
            closure = await self.resolve(args.package_ref, download_dir, log)
            if closure is None:
                return GenerationResult(success=False, diagnostics=log)

            decision = self.aggregator.evaluate(closure, args.accept_licenses)
            log.extend(decision.diagnostics)
            if not decision.allowed:
                return GenerationResult(success=False, diagnostics=log)

            extractor = AnalyzerPayloadExtractor(self.inspector, args.language)
            assemblies = extractor.extract(closure, log)
            if not assemblies:
                return GenerationResult(success=False, diagnostics=log)

            return self._package(args, closure, assemblies, log)

    def _package(
        self,
        args: GenerationArgs,
        closure: DependencyClosure,
        assemblies: frozenset[AnalyzerAssembly],
        log: DiagnosticLog,
    ) -> GenerationResult:
        job = PluginJob(closure=closure, assemblies=assemblies, language=args.language)

        if args.sqale_file is not None:
            try:
                model = self.serializer.parse(args.sqale_file)
            except TemplateParseError as e:
                log.error(
                    MessageKind.INVALID_SQALE_FILE,
                    f"The sqale file {e.path} is not valid: {e.reason}",
                    path=e.path,
                )
                return GenerationResult(success=False, diagnostics=log)
            job.sqale_xml = self.serializer.to_bytes(model)

        template_path = None
        try:
            if job.sqale_xml is None:
                job.sqale_xml = self.sqale_writer.render(job)
                template_path = args.output_dir / self.sqale_writer.file_name(job)
                atomic_write(template_path, job.sqale_xml)
            plugin_path = self.plugin_writer.write(job, args.output_dir)
        except (OSError, zipfile.BadZipFile) as e:
            if template_path is not None:
                template_path.unlink(missing_ok=True)
            log.error(
                MessageKind.OUTPUT_WRITE_FAILED,
                f"Failed to write the plugin for {closure.root}: {e}",
                package=closure.root,
            )
            return GenerationResult(success=False, diagnostics=log)

        if template_path is not None:
            log.info(
                MessageKind.SQALE_TEMPLATE_GENERATED,
                f"Generated sqale template file: {template_path}",
                path=template_path,
            )
        log.info(MessageKind.PLUGIN_CREATED, f"Created plugin: {plugin_path}", path=plugin_path)

        return GenerationResult(
            success=True,
            diagnostics=log,
            plugin_path=plugin_path,
            sqale_template_path=template_path,
        )
