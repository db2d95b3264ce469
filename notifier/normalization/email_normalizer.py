"""Email normalizer.

Strips surrounding whitespace and lowercases the domain.  The local part
is kept as given: mailbox names are case-sensitive in principle, and
providers route on the exact address.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_EMAIL_SHAPE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9-]+(?:\.[A-Za-z0-9-]+)*\.[A-Za-z]{2,}$")


def normalize_email(raw: object) -> str | None:
    """Return *raw* in canonical form, or ``None`` if it is not an address.

    Never raises.
    """
    if not isinstance(raw, str):
        return None

    stripped = raw.strip()
    if not stripped or "@" not in stripped:
        logger.debug("normalize_email: no '@' found (length=%d)", len(stripped))
        return None

    local, _, domain = stripped.rpartition("@")
    candidate = f"{local}@{domain.lower()}"
    if not _EMAIL_SHAPE.match(candidate):
        logger.debug("normalize_email: rejected input (length=%d)", len(stripped))
        return None
    return candidate
