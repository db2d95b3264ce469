import logging
import logging.config
import re
from collections.abc import Mapping

PII_PATTERNS = [
    re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"),
    re.compile(r"\+?\b1\d{10}\b"),
    re.compile(r"\b(?:\+1[-.\s]?)?(?:\(?\d{3}\)?[-.\s]?)\d{3}[-.\s]?\d{4}\b"),
    re.compile(r"(?i)((?:door_code|verification_code)['\"]?\s*[=:]\s*['\"]?)([^,'\"\s}]+)"),
]


class PIISafeFilter(logging.Filter):
    """Redact recipient addresses and message secrets from log records."""

    def _sanitize(self, value: object) -> object:
        # Containers and exceptions are redacted through their %s form.
        if isinstance(value, (Mapping, list, tuple, set, frozenset, BaseException)):
            value = str(value)
        if not isinstance(value, str):
            return value

        redacted = value
        for pattern in PII_PATTERNS:
            if pattern.groups:
                redacted = pattern.sub(r"\1[REDACTED]", redacted)
            else:
                redacted = pattern.sub("[REDACTED]", redacted)
        return redacted

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = self._sanitize(record.msg)

        if isinstance(record.args, tuple):
            record.args = tuple(self._sanitize(item) for item in record.args)
        elif isinstance(record.args, dict):
            record.args = {key: self._sanitize(value) for key, value in record.args.items()}

        if record.exc_info and not record.exc_text:
            record.exc_text = self._sanitize(logging.Formatter().formatException(record.exc_info))

        return True


# Chatty third-party loggers kept at WARNING so request lines never carry recipients.
QUIET_LOGGERS = ("uvicorn.access", "httpx", "httpcore", "sqlalchemy.engine")


def build_logging_config(level: str, log_format: str) -> dict:
    loggers: dict[str, dict] = {"": {"handlers": ["console"], "level": level.upper()}}
    for name in QUIET_LOGGERS:
        loggers[name] = {"handlers": ["console"], "level": "WARNING", "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"pii_safe": {"()": PIISafeFilter}},
        "formatters": {"default": {"format": log_format}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["pii_safe"],
            }
        },
        "loggers": loggers,
    }


def setup_logging() -> None:
    from notifier.core.settings import get_settings

    settings = get_settings()
    logging.config.dictConfig(build_logging_config(settings.log_level, settings.log_format))
