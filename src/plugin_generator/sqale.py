"""Sqale (technical debt) model and its XML serialization.

A sqale file has a ``<sqale>`` root holding ``<chc>`` characteristics. A
characteristic has a key and a name and contains sub-characteristics or
rule-level entries (``<rule-repo>``, ``<rule-key>`` and ``<prop>``
remediation properties).
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from xml.etree import ElementTree as ET

from plugin_generator.exceptions import TemplateParseError
from plugin_generator.fileutils import atomic_write

logger = logging.getLogger(__name__)


@dataclass
class SqaleProperty:
    key: str
    value: Optional[str] = None
    text: Optional[str] = None


@dataclass
class SqaleCharacteristic:
    """One ``<chc>`` element.

    Characteristics with a rule_key describe a single rule; the others
    group sub-characteristics.
    """

    key: Optional[str] = None
    name: Optional[str] = None
    rule_repo: Optional[str] = None
    rule_key: Optional[str] = None
    properties: list[SqaleProperty] = field(default_factory=list)
    children: list["SqaleCharacteristic"] = field(default_factory=list)

    def iter_rules(self):
        if self.rule_key is not None:
            yield self
        for child in self.children:
            yield from child.iter_rules()


@dataclass
class SqaleModel:
    characteristics: list[SqaleCharacteristic] = field(default_factory=list)

    def rules(self) -> list[SqaleCharacteristic]:
        return [rule for chc in self.characteristics for rule in chc.iter_rules()]


def _text(element: ET.Element, name: str) -> Optional[str]:
    child = element.find(name)
    if child is None or child.text is None:
        return None
    return child.text.strip()


class SqaleSerializer:
    """Reads and writes sqale files."""

    ROOT_TAG = "sqale"

    def parse(self, path: Path) -> SqaleModel:
        """Parse a sqale file.

        Args:
            path: File to read.

        Returns:
            The parsed model.

        Raises:
            TemplateParseError: If the file cannot be read or is not a sqale
                document.
        """
        try:
            root = ET.parse(path).getroot()
        except ET.ParseError as e:
            raise TemplateParseError(path, str(e)) from e
        except OSError as e:
            raise TemplateParseError(path, f"cannot read file: {e.strerror or e}") from e

        if root.tag != self.ROOT_TAG:
            raise TemplateParseError(path, f"expected <{self.ROOT_TAG}> root element, found <{root.tag}>")

        model = SqaleModel(characteristics=[self._parse_chc(chc) for chc in root.findall("chc")])
        logger.debug("Parsed %s: %d rule(s)", path, len(model.rules()))
        return model

    def _parse_chc(self, element: ET.Element) -> SqaleCharacteristic:
        return SqaleCharacteristic(
            key=_text(element, "key"),
            name=_text(element, "name"),
            rule_repo=_text(element, "rule-repo"),
            rule_key=_text(element, "rule-key"),
            properties=[
                SqaleProperty(key=_text(prop, "key") or "", value=_text(prop, "val"), text=_text(prop, "txt"))
                for prop in element.findall("prop")
            ],
            children=[self._parse_chc(child) for child in element.findall("chc")],
        )

    def _build_chc(self, parent: ET.Element, chc: SqaleCharacteristic) -> None:
        element = ET.SubElement(parent, "chc")
        for tag, value in (
            ("key", chc.key),
            ("name", chc.name),
            ("rule-repo", chc.rule_repo),
            ("rule-key", chc.rule_key),
        ):
            if value is not None:
                ET.SubElement(element, tag).text = value
        for prop in chc.properties:
            prop_element = ET.SubElement(element, "prop")
            ET.SubElement(prop_element, "key").text = prop.key
            if prop.value is not None:
                ET.SubElement(prop_element, "val").text = prop.value
            if prop.text is not None:
                ET.SubElement(prop_element, "txt").text = prop.text
        for child in chc.children:
            self._build_chc(element, child)

    def to_bytes(self, model: SqaleModel) -> bytes:
        root = ET.Element(self.ROOT_TAG)
        for chc in model.characteristics:
            self._build_chc(root, chc)
        ET.indent(root)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)

    def save(self, model: SqaleModel, path: Path) -> None:
        """Write model to path atomically."""
        atomic_write(path, self.to_bytes(model))
