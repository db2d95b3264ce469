"""Job-body handler for an external at-least-once job runner.

The runner owns scheduling and backoff.  This handler only maps job args to
``SendCoordinator.send`` and tells the runner whether to retry:

- success (new or duplicate)             -> returns the ``Success``
- invalid recipient / unknown template   -> returns the ``Failure`` (no retry)
- send / persistence / unexpected failure -> raises ``RetryableSendError``

Retrying is safe because a failed attempt never leaves a ledger entry, and
the runner must pass the same ``idempotency_key`` on every retry.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from notifier.core.constants import MessageType
from notifier.delivery.coordinator import SendCoordinator
from notifier.delivery.outcomes import Failure, Result

logger = logging.getLogger(__name__)

REQUIRED_JOB_KEYS: tuple[str, ...] = ("message_type", "recipient", "idempotency_key", "template")


class InvalidJobArgs(ValueError):
    """Raised when job args are missing required fields or malformed."""


class RetryableSendError(RuntimeError):
    """Raised so the job runner retries the send with the same key."""

    def __init__(self, failure: Failure) -> None:
        super().__init__(f"{failure.reason.value}: {failure.detail}")
        self.failure = failure


def perform_send_job(
    args: Mapping[str, Any],
    coordinators: Mapping[MessageType, SendCoordinator],
) -> Result:
    """Run one send job.  *args* use string keys, as serialized job args do."""
    missing = [key for key in REQUIRED_JOB_KEYS if not args.get(key)]
    if missing:
        logger.error("Send job received invalid args: missing=%s", missing)
        raise InvalidJobArgs(f"Invalid job args: missing required fields {missing}")

    try:
        message_type = MessageType(args["message_type"])
    except ValueError as exc:
        raise InvalidJobArgs(f"Invalid job args: unknown message_type {args['message_type']!r}") from exc

    coordinator = coordinators.get(message_type)
    if coordinator is None:
        raise InvalidJobArgs(f"No coordinator configured for message_type {message_type.value!r}")

    params = args.get("params") or {}
    if not isinstance(params, Mapping):
        raise InvalidJobArgs("Invalid job args: params must be an object")

    result = coordinator.send(
        args["recipient"],
        str(args["idempotency_key"]),
        str(args["template"]),
        params,
        args.get("user_id"),
    )

    if isinstance(result, Failure) and result.retryable:
        raise RetryableSendError(result)
    return result
