from __future__ import annotations

import logging
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)


class ErrorReporter(Protocol):
    def capture(
        self,
        message_or_exception: str | BaseException,
        context: Mapping[str, Any],
        tags: Mapping[str, Any],
    ) -> None:
        ...


class LoggingErrorReporter:
    """File error reports as ERROR log records.

    Exceptions are logged with their traceback; plain messages without one.
    """

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    def capture(
        self,
        message_or_exception: str | BaseException,
        context: Mapping[str, Any],
        tags: Mapping[str, Any],
    ) -> None:
        if isinstance(message_or_exception, BaseException):
            self._log.error(
                "error report: %s: %s context=%s tags=%s",
                type(message_or_exception).__name__,
                message_or_exception,
                dict(context),
                dict(tags),
                exc_info=message_or_exception,
            )
            return

        self._log.error(
            "error report: %s context=%s tags=%s",
            message_or_exception,
            dict(context),
            dict(tags),
        )
