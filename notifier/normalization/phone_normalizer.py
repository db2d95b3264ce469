"""Phone number normalizer.

Converts a raw phone string to the 11-digit North American form the SMS
provider expects (e.g. ``"14155551234"``): a leading ``+`` and every
non-digit character are removed, and the result must match ``1`` followed
by ten digits.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_NON_DIGITS = re.compile(r"[^\d]")
_NANP_11_DIGITS = re.compile(r"^1\d{10}$")


def strip_phone(raw: object) -> str:
    """Return *raw* with a leading ``+`` and all non-digits removed.

    Non-string input strips to ``""``.
    """
    if not isinstance(raw, str):
        return ""
    return _NON_DIGITS.sub("", raw.strip().removeprefix("+"))


def normalize_phone(raw: object) -> str | None:
    """Return *raw* as an 11-digit NANP string, or ``None`` if invalid.

    Never raises.
    """
    digits = strip_phone(raw)
    if not digits or not _NANP_11_DIGITS.match(digits):
        # SAFETY: do not log raw value
        logger.debug("phone_normalizer: rejected input (normalized length=%d)", len(digits))
        return None
    return digits
