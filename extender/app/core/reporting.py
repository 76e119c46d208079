from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Protocol


class ErrorReporter(Protocol):
    """
    Interface for forwarding handled failures to an external error sink.

    Implementations must be:
    - synchronous and minimally blocking
    - fail-safe (reporting failures must not escape)
    - observational only
    """

    def report(
        self,
        exc: BaseException,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        ...


class NullErrorReporter:
    """
    A safe no-op reporter.

    Used when no external sink is configured and in tests that do not
    care about reporting.
    """

    def report(
        self,
        exc: BaseException,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        return


class LoggingErrorReporter:
    """
    Reporter that forwards handled failures to a dedicated logger.

    Intended for deployments where the log pipeline is the error sink.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("extender.errors")

    def report(
        self,
        exc: BaseException,
        message: str,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.logger.error(
            message,
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={
                "error_type": type(exc).__name__,
                "context": dict(context or {}),
            },
        )


def safe_report(
    reporter: ErrorReporter,
    exc: BaseException,
    message: str,
    context: Optional[Mapping[str, Any]] = None,
) -> None:
    """Report a failure, swallowing errors raised by the sink itself."""
    try:
        reporter.report(exc, message, context)
    except Exception:
        logging.getLogger("extender.errors").warning(
            "error_reporter_failed",
            extra={"reporter": type(reporter).__name__},
        )
