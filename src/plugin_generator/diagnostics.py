"""Diagnostics collected during a generation run.

Every component reports user-facing problems as Diagnostic values instead of
logging them directly. A DiagnosticLog keeps them in order, so callers and
tests can inspect exactly what was reported, and forwards each one to the
``plugin_generator.diagnostics`` logger with a matching level.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, Optional

from plugin_generator.models import PackageRef

logger = logging.getLogger("plugin_generator.diagnostics")

LICENSES_ACCEPTED_MESSAGE = (
    "The licenses of all packages that require license acceptance have been accepted"
)


class Severity(Enum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


class MessageKind(Enum):
    """What a diagnostic is about."""

    PACKAGE_FETCH_FAILED = "package-fetch-failed"
    LICENSE_REQUIRED = "license-required"
    LICENSE_NOT_ACCEPTED = "license-not-accepted"
    LICENSES_ACCEPTED = "licenses-accepted"
    NO_ANALYZERS_FOUND = "no-analyzers-found"
    INVALID_SQALE_FILE = "invalid-sqale-file"
    SQALE_TEMPLATE_GENERATED = "sqale-template-generated"
    PLUGIN_CREATED = "plugin-created"
    OUTPUT_WRITE_FAILED = "output-write-failed"


@dataclass(frozen=True)
class Diagnostic:
    """A single reported message.

    Attributes:
        severity: Info, Warning or Error.
        kind: Category of the message.
        message: Rendered text.
        package: Package the message is about, if any.
        path: File the message is about, if any.
    """

    severity: Severity
    kind: MessageKind
    message: str
    package: Optional[PackageRef] = None
    path: Optional[Path] = None

    def mentions(self, text: str) -> bool:
        """Return True if the rendered message contains text."""
        return text in self.message


class DiagnosticLog:
    """Ordered collection of diagnostics for one run."""

    def __init__(self) -> None:
        self._items: list[Diagnostic] = []

    def add(self, diagnostic: Diagnostic) -> Diagnostic:
        self._items.append(diagnostic)
        logger.log(diagnostic.severity.value, "%s", diagnostic.message)
        return diagnostic

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def info(
        self,
        kind: MessageKind,
        message: str,
        package: Optional[PackageRef] = None,
        path: Optional[Path] = None,
    ) -> Diagnostic:
        return self.add(Diagnostic(Severity.INFO, kind, message, package, path))

    def warning(
        self,
        kind: MessageKind,
        message: str,
        package: Optional[PackageRef] = None,
        path: Optional[Path] = None,
    ) -> Diagnostic:
        return self.add(Diagnostic(Severity.WARNING, kind, message, package, path))

    def error(
        self,
        kind: MessageKind,
        message: str,
        package: Optional[PackageRef] = None,
        path: Optional[Path] = None,
    ) -> Diagnostic:
        return self.add(Diagnostic(Severity.ERROR, kind, message, package, path))

    def by_severity(self, severity: Severity) -> list[Diagnostic]:
        return [d for d in self._items if d.severity is severity]

    @property
    def infos(self) -> list[Diagnostic]:
        return self.by_severity(Severity.INFO)

    @property
    def warnings(self) -> list[Diagnostic]:
        return self.by_severity(Severity.WARNING)

    @property
    def errors(self) -> list[Diagnostic]:
        return self.by_severity(Severity.ERROR)

    @property
    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self._items)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
