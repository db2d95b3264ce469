"""Recipient normalization.

One normalizer per message type.  Each takes the caller-supplied recipient
and returns the canonical address the provider expects, or ``None`` when
the value cannot be delivered to::

    def normalize_x(raw: object) -> str | None:
        ...
"""
