"""Writer for the plugin archive.

The plugin is a jar (zip) archive holding a manifest describing the
package, the analyzer assemblies of the closure, the sqale document and the
list of packages it was built from.
"""

import io
import zipfile

from plugin_generator import __version__
from plugin_generator.writers.base import BaseWriter, PluginJob, load_template

MANIFEST_ENTRY = "META-INF/MANIFEST.MF"
SQALE_ENTRY = "resources/sqale.xml"
PACKAGES_ENTRY = "resources/packages.txt"


def _oneline(value: object) -> str:
    return " ".join(str(value).split())


class PluginWriter(BaseWriter):
    """Assembles the plugin jar in memory and writes it atomically."""

    def __init__(self) -> None:
        self.manifest_template = load_template("MANIFEST.MF.j2", filters={"oneline": _oneline})

    def render_manifest(self, job: PluginJob) -> str:
        package = job.package
        if package.license is not None:
            license_text = package.license.spdx_id
        else:
            license_text = package.license_url
        return self.manifest_template.render(
            generator_version=__version__,
            plugin_key=job.plugin_key,
            name=package.title or package.ref.id,
            package=package,
            language=job.language,
            license=license_text,
        )

    def render(self, job: PluginJob) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as jar:
            jar.writestr(MANIFEST_ENTRY, self.render_manifest(job))

            for assembly in job.sorted_assemblies:
                with zipfile.ZipFile(assembly.payload_path) as payload:
                    data = payload.read(assembly.entry)
                ref = assembly.package
                jar.writestr(f"static/{ref.id}.{ref.version}/{assembly.entry}", data)

            if job.sqale_xml is not None:
                jar.writestr(SQALE_ENTRY, job.sqale_xml)

            jar.writestr(
                PACKAGES_ENTRY,
                "".join(f"{node.ref.id} {node.ref.version}\n" for node in job.closure),
            )
        return buffer.getvalue()

    def file_name(self, job: PluginJob) -> str:
        return f"{job.plugin_key}-plugin.{job.closure.root.version}.jar"
