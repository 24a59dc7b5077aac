"""Tests for the plugin archive writer."""

import zipfile

import pytest

from plugin_generator import __version__
from plugin_generator.analyzers import AnalyzerPayloadExtractor
from plugin_generator.diagnostics import DiagnosticLog
from plugin_generator.writers import PluginJob, PluginWriter
from plugin_generator.writers.plugin import MANIFEST_ENTRY, PACKAGES_ENTRY, SQALE_ENTRY


@pytest.fixture
def writer():
    """Create a PluginWriter instance."""
    return PluginWriter()


@pytest.fixture
def job(make_closure) -> PluginJob:
    closure = make_closure(
        [("Contoso.Analyzers", "1.2.0", False), ("Contoso.Core", "1.0.0", False), ("Contoso.Data", "2.0.0", False)],
        with_analyzers=("Contoso.Analyzers", "Contoso.Core"),
    )
    assemblies = AnalyzerPayloadExtractor(language="cs").extract(closure, DiagnosticLog())
    return PluginJob(closure=closure, assemblies=assemblies, language="cs", sqale_xml=b"<sqale/>")


def test_file_name(writer, job):
    assert writer.file_name(job) == "contosoanalyzers-plugin.1.2.0.jar"


def test_render_manifest(writer, job):
    manifest = writer.render_manifest(job)

    assert manifest.startswith("Manifest-Version: 1.0\n")
    assert f"Created-By: plugin-generator {__version__}" in manifest
    assert "Plugin-Key: contosoanalyzers" in manifest
    assert "Plugin-Name: Contoso.Analyzers" in manifest
    assert "Plugin-Version: 1.2.0" in manifest
    assert "Plugin-Language: cs" in manifest
    assert "Plugin-Description: Contoso.Analyzers description" in manifest
    assert "Plugin-Organization: Contoso" in manifest
    assert "Plugin-License: MIT" in manifest
    assert "Plugin-Homepage" not in manifest


def test_render_manifest_flattens_multiline_values(writer, job):
    job.package.description = "First line\n  second line"

    manifest = writer.render_manifest(job)

    assert "Plugin-Description: First line second line" in manifest


def test_write_packages_analyzers_and_sqale(writer, job, tmp_path):
    path = writer.write(job, tmp_path)

    with zipfile.ZipFile(path) as jar:
        names = jar.namelist()
        assert names[0] == MANIFEST_ENTRY
        assert "static/Contoso.Analyzers.1.2.0/analyzers/dotnet/cs/Contoso.Analyzers.dll" in names
        assert "static/Contoso.Core.1.0.0/analyzers/dotnet/cs/Contoso.Core.dll" in names
        assert not any(name.startswith("static/Contoso.Data") for name in names)
        assert jar.read(SQALE_ENTRY) == b"<sqale/>"
        assert jar.read(PACKAGES_ENTRY).decode("utf-8").splitlines() == [
            "Contoso.Analyzers 1.2.0",
            "Contoso.Core 1.0.0",
            "Contoso.Data 2.0.0",
        ]
        assert jar.read("static/Contoso.Core.1.0.0/analyzers/dotnet/cs/Contoso.Core.dll").startswith(b"MZ")


def test_write_without_sqale(writer, job, tmp_path):
    job.sqale_xml = None

    path = writer.write(job, tmp_path)

    with zipfile.ZipFile(path) as jar:
        assert SQALE_ENTRY not in jar.namelist()


def test_write_leaves_no_temporary_files(writer, job, output_dir):
    path = writer.write(job, output_dir)

    assert list(output_dir.iterdir()) == [path]
