import logging

from extender.app.core.reporting import (
    LoggingErrorReporter,
    NullErrorReporter,
    safe_report,
)


def test_logging_reporter_forwards_exception(caplog):
    reporter = LoggingErrorReporter(logging.getLogger("extender.test.errors"))

    with caplog.at_level("ERROR", logger="extender.test.errors"):
        reporter.report(
            ValueError("bad container"),
            "signing_container_load_failed",
            {"error_kind": "credential_unavailable"},
        )

    (record,) = caplog.records
    assert record.getMessage() == "signing_container_load_failed"
    assert record.error_type == "ValueError"
    assert record.context == {"error_kind": "credential_unavailable"}
    assert record.exc_info[0] is ValueError


def test_null_reporter_is_silent():
    assert NullErrorReporter().report(RuntimeError("x"), "event") is None


def test_safe_report_swallows_sink_failures(caplog):
    class BrokenReporter:
        def report(self, exc, message, context=None):
            raise ConnectionError("sink down")

    with caplog.at_level("WARNING", logger="extender.errors"):
        safe_report(BrokenReporter(), RuntimeError("x"), "event")

    assert [r.getMessage() for r in caplog.records] == [
        "error_reporter_failed"
    ]
