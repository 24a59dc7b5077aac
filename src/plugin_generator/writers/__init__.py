"""Output writers for the files produced by a generation run.

This module provides writers for the plugin archive and the default sqale
template.
"""

from plugin_generator.writers.base import BaseWriter, PluginJob, plugin_key
from plugin_generator.writers.plugin import PluginWriter
from plugin_generator.writers.sqale import SqaleTemplateWriter, sqale_template_file_name

__all__ = [
    "BaseWriter",
    "PluginJob",
    "PluginWriter",
    "SqaleTemplateWriter",
    "plugin_key",
    "sqale_template_file_name",
]
