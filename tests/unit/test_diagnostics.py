import logging
from pathlib import Path

from plugin_generator.diagnostics import Diagnostic, DiagnosticLog, MessageKind, Severity
from plugin_generator.models import PackageRef


def test_log_keeps_order_and_filters_by_severity():
    log = DiagnosticLog()
    ref = PackageRef("Foo", "1.0.0")
    log.warning(MessageKind.LICENSE_REQUIRED, "first", package=ref)
    log.error(MessageKind.LICENSE_NOT_ACCEPTED, "second", package=ref)
    log.info(MessageKind.PLUGIN_CREATED, "third", path=Path("x.jar"))

    assert [d.message for d in log] == ["first", "second", "third"]
    assert len(log) == 3
    assert [d.message for d in log.warnings] == ["first"]
    assert [d.message for d in log.errors] == ["second"]
    assert [d.message for d in log.infos] == ["third"]
    assert log.has_errors is True


def test_empty_log_has_no_errors():
    log = DiagnosticLog()
    assert log.has_errors is False
    assert len(log) == 0


def test_extend_appends_diagnostics():
    log = DiagnosticLog()
    diagnostics = (
        Diagnostic(Severity.WARNING, MessageKind.LICENSES_ACCEPTED, "accepted"),
        Diagnostic(Severity.WARNING, MessageKind.LICENSE_REQUIRED, "gated"),
    )
    log.extend(diagnostics)
    assert list(log) == list(diagnostics)


def test_diagnostic_mentions():
    diagnostic = Diagnostic(Severity.ERROR, MessageKind.INVALID_SQALE_FILE, "The sqale file a.xml is not valid")
    assert diagnostic.mentions("a.xml")
    assert not diagnostic.mentions("b.xml")


def test_diagnostics_are_logged_with_matching_level(caplog):
    """Test that each diagnostic is forwarded to the diagnostics logger."""
    log = DiagnosticLog()
    with caplog.at_level(logging.INFO, logger="plugin_generator.diagnostics"):
        log.info(MessageKind.PLUGIN_CREATED, "created")
        log.warning(MessageKind.NO_ANALYZERS_FOUND, "nothing found")
        log.error(MessageKind.PACKAGE_FETCH_FAILED, "fetch failed")

    levels = [(r.levelno, r.getMessage()) for r in caplog.records if r.name == "plugin_generator.diagnostics"]
    assert levels == [
        (logging.INFO, "created"),
        (logging.WARNING, "nothing found"),
        (logging.ERROR, "fetch failed"),
    ]
