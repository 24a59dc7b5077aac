"""Writer for the default sqale template.

The template lists one rule characteristic per analyzer assembly with a
constant remediation cost, ready to be edited by the plugin author.
"""

from pathlib import Path
from typing import Optional

from plugin_generator.models import PackageRef
from plugin_generator.writers.base import BaseWriter, PluginJob, load_template

DEFAULT_REMEDIATION_MINUTES = "5"


def sqale_template_file_name(ref: PackageRef) -> str:
    """Return the name of the generated template ("{id}.{version}.sqale.template.xml")."""
    return f"{ref.id}.{ref.version}.sqale.template.xml"


class SqaleTemplateWriter(BaseWriter):
    """Renders the sqale template with Jinja2.

    Attributes:
        template: The Jinja2 template to use for rendering.
    """

    def __init__(self, template_path: Optional[Path] = None) -> None:
        """Initialize the writer.

        Args:
            template_path: Optional path to a custom Jinja2 template.
                If not provided, uses the default bundled template.
        """
        self.template = load_template("sqale.template.xml.j2", template_path, autoescape=True)

    def render(self, job: PluginJob) -> bytes:
        rules = [
            {
                "repo": f"roslyn.{job.plugin_key}",
                "key": assembly.file_name.rsplit(".", 1)[0],
                "package": assembly.package,
            }
            for assembly in job.sorted_assemblies
        ]
        return self.template.render(
            package=job.package,
            plugin_key=job.plugin_key,
            language=job.language,
            rules=rules,
            remediation_minutes=DEFAULT_REMEDIATION_MINUTES,
        ).encode("utf-8")

    def file_name(self, job: PluginJob) -> str:
        return sqale_template_file_name(job.closure.root)
