"""License compliance evaluation over a dependency closure.

Acceptance is a single switch over the whole closure: accepting licenses
means accepting every license that requires acceptance, there is no
per-package acceptance.
"""

import logging
from dataclasses import dataclass

from plugin_generator.diagnostics import (
    LICENSES_ACCEPTED_MESSAGE,
    Diagnostic,
    MessageKind,
    Severity,
)
from plugin_generator.models import DependencyClosure, PackageNode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of a compliance evaluation.

    Attributes:
        allowed: True if generation may proceed.
        diagnostics: Messages to report, in order.
    """

    allowed: bool
    diagnostics: tuple[Diagnostic, ...] = ()


def _describe_license(node: PackageNode) -> str:
    license_link = node.metadata.license
    if license_link is not None:
        return f"{license_link.spdx_id} ({license_link.url})"
    if node.metadata.license_url:
        return node.metadata.license_url
    return "license not specified"


class LicenseComplianceAggregator:
    """Decides whether the packages of a closure may be used.

    Every package that requires license acceptance yields exactly one
    warning, however many paths lead to it. Without acceptance the decision
    is Deny and one error names the root package; with acceptance the
    decision is Allow and a summary warning records that licenses were
    accepted.
    """

    def evaluate(self, closure: DependencyClosure, accept_licenses: bool) -> Decision:
        """Evaluate the license requirements of closure.

        Args:
            closure: Resolved dependency closure.
            accept_licenses: True if the user accepts all required licenses.

        Returns:
            Decision with the diagnostics to report.
        """
        gated = [node for node in closure if node.license_required]
        if not gated:
            logger.debug("No package in the closure of %s requires license acceptance", closure.root)
            return Decision(allowed=True)

        logger.debug(
            "%d package(s) in the closure of %s require license acceptance",
            len(gated),
            closure.root,
        )

        diagnostics = []
        if accept_licenses:
            diagnostics.append(
                Diagnostic(Severity.WARNING, MessageKind.LICENSES_ACCEPTED, LICENSES_ACCEPTED_MESSAGE)
            )
        else:
            diagnostics.append(
                Diagnostic(
                    Severity.ERROR,
                    MessageKind.LICENSE_NOT_ACCEPTED,
                    f"Package {closure.root} or one of its dependencies requires license "
                    "acceptance. Review the licenses listed below and rerun with "
                    "--accept-licenses to accept them.",
                    package=closure.root,
                )
            )

        # closure iteration is sorted and keyed by ref, so each gated
        # package appears once regardless of how often it is depended on
        for node in gated:
            diagnostics.append(
                Diagnostic(
                    Severity.WARNING,
                    MessageKind.LICENSE_REQUIRED,
                    f"Package {node.ref} requires license acceptance: {_describe_license(node)}",
                    package=node.ref,
                )
            )

        return Decision(allowed=accept_licenses, diagnostics=tuple(diagnostics))
