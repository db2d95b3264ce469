from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SendOutcome:
    """What the provider said about one send call."""

    ok: bool
    provider_message_id: str | None = None
    reason: str | None = None

    @classmethod
    def success(cls, provider_message_id: str | None) -> SendOutcome:
        return cls(ok=True, provider_message_id=provider_message_id)

    @classmethod
    def failure(cls, reason: str) -> SendOutcome:
        return cls(ok=False, reason=reason)


class ExternalSenderAdapter(Protocol):
    def send(self, recipient: str, body: str) -> SendOutcome:
        ...
