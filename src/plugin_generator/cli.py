"""Command-line interface for plugin_generator.

Provides the main entry point and subcommands for generating analyzer
plugins and checking the licenses of a package's dependency closure.
"""

import asyncio
import logging
import tempfile
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from plugin_generator.compliance import LicenseComplianceAggregator
from plugin_generator.config import ENV_FEED, ENV_MAX_CONCURRENCY, GeneratorSettings
from plugin_generator.diagnostics import DiagnosticLog
from plugin_generator.generator import ArtifactGenerator, GenerationResult
from plugin_generator.models import DependencyClosure, GenerationArgs, PackageRef

app = typer.Typer(
    name="plugin-generator",
    help="Generate static analysis plugins from NuGet analyzer packages.",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

# Configure logging
logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
)
logger = logging.getLogger("plugin_generator")


def _setup_logging(verbose: bool) -> None:
    """Configure logging level based on verbosity flag."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.getLogger("plugin_generator").setLevel(level)
    # diagnostics are user-facing and always shown, Info included
    logging.getLogger("plugin_generator.diagnostics").setLevel(logging.INFO)


PackageIdOption = Annotated[
    str,
    typer.Option("--id", "-i", help="Id of the NuGet package containing the analyzers"),
]
PackageVersionOption = Annotated[
    str,
    typer.Option("--version", help="Version of the NuGet package"),
]
AcceptLicensesOption = Annotated[
    bool,
    typer.Option(
        "--accept-licenses",
        help="Accept the licenses of all packages that require license acceptance",
    ),
]
FeedOption = Annotated[
    Optional[str],
    typer.Option(
        "--feed",
        envvar=ENV_FEED,
        help="NuGet V3 service index URL or local package folder (default: nuget.org)",
    ),
]
MaxConcurrencyOption = Annotated[
    Optional[int],
    typer.Option(
        "--max-concurrency",
        envvar=ENV_MAX_CONCURRENCY,
        min=1,
        help="Maximum number of packages fetched at once",
    ),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]


async def _run_generate(
    args: GenerationArgs,
    settings: GeneratorSettings,
) -> GenerationResult:
    """Async implementation of the generate command."""
    async with settings.create_repository() as repository:
        generator = ArtifactGenerator(
            repository,
            download_dir=settings.download_dir,
            max_concurrency=settings.max_concurrency,
        )
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Generating plugin for {args.package_ref}...", total=None)
            return await generator.generate(args)


@app.command()
def generate(
    package_id: PackageIdOption,
    package_version: PackageVersionOption,
    language: Annotated[
        str,
        typer.Option("--language", "-l", help="Target language of the plugin (cs or vb)"),
    ] = "cs",
    sqale: Annotated[
        Optional[Path],
        typer.Option(
            "--sqale",
            help="Existing sqale file to embed instead of generating a template",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    accept_licenses: AcceptLicensesOption = False,
    output_dir: Annotated[
        Path,
        typer.Option("--output-dir", "-o", help="Directory the plugin is written to", file_okay=False),
    ] = Path("."),
    feed: FeedOption = None,
    download_dir: Annotated[
        Optional[Path],
        typer.Option(
            "--download-dir",
            help="Directory for downloaded packages (default: a temporary directory)",
            file_okay=False,
        ),
    ] = None,
    max_concurrency: MaxConcurrencyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Generate an analyzer plugin from a NuGet package.

    Resolves the package and its dependencies, checks their licenses,
    and packages the analyzers found into a plugin.

    Exit codes:
        0 - Plugin generated
        1 - Generation failed
    """
    _setup_logging(verbose)

    try:
        args = GenerationArgs(
            package_id=package_id,
            package_version=package_version,
            language=language,
            sqale_file=sqale,
            accept_licenses=accept_licenses,
            output_dir=output_dir,
        )
        settings = GeneratorSettings.from_env(
            feed=feed, max_concurrency=max_concurrency, download_dir=download_dir
        )
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    result = asyncio.run(_run_generate(args, settings))

    if not result.success:
        err_console.print(f"[red]Plugin generation failed for {args.package_ref}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]Generated:[/green] {result.plugin_path}")
    if result.sqale_template_path:
        console.print(f"[green]Sqale template:[/green] {result.sqale_template_path}")
    raise typer.Exit(code=0)


async def _resolve_closure(
    root: PackageRef, settings: GeneratorSettings, log: DiagnosticLog
) -> Optional[DependencyClosure]:
    """Async implementation of the check command's resolution step."""
    async with settings.create_repository() as repository:
        generator = ArtifactGenerator(repository, max_concurrency=settings.max_concurrency)
        with tempfile.TemporaryDirectory(prefix="plugin-generator-") as tmp:
            return await generator.resolve(root, Path(tmp), log)


@app.command()
def check(
    package_id: PackageIdOption,
    package_version: PackageVersionOption,
    accept_licenses: AcceptLicensesOption = False,
    feed: FeedOption = None,
    max_concurrency: MaxConcurrencyOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Check the licenses of a package and its dependencies.

    Lists every package in the dependency closure and whether it requires
    license acceptance. No plugin is generated.

    Exit codes:
        0 - All licenses acceptable
        1 - License acceptance required or an error occurred
    """
    _setup_logging(verbose)

    try:
        root = PackageRef(package_id, package_version)
        settings = GeneratorSettings.from_env(feed=feed, max_concurrency=max_concurrency)
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    log = DiagnosticLog()
    closure = asyncio.run(_resolve_closure(root, settings, log))
    if closure is None:
        raise typer.Exit(code=1)

    console.print(f"Resolved [bold]{len(closure)}[/bold] packages")
    for node in closure:
        marker = "[yellow]license acceptance required[/yellow]" if node.license_required else ""
        license_link = node.metadata.license
        license_text = license_link.spdx_id if license_link else node.metadata.license_url or "unknown"
        console.print(f"  - {node.ref.id}=={node.ref.version}: {license_text} {marker}".rstrip())

    decision = LicenseComplianceAggregator().evaluate(closure, accept_licenses)
    log.extend(decision.diagnostics)

    if decision.allowed:
        console.print(f"\n[green]All {len(closure)} packages can be used![/green]")
        raise typer.Exit(code=0)

    raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
