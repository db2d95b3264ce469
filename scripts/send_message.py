#!/usr/bin/env python3
"""Send one notification through the idempotent pipeline.

Usage:
    python scripts/send_message.py sms +14155551234 key-1 booking_checkin_reminder \
        --param first_name=Ada --param door_code=4321
    python scripts/send_message.py email ada@example.com key-2 password_changed --create-tables

Uses DATABASE_URL and provider settings from env / .env.  Running the same
command twice sends once and reports ``already_sent=True`` the second time.
"""
from __future__ import annotations

import argparse
import sys

# Ensure project root is on sys.path
sys.path.insert(0, ".")

from notifier.core.constants import MessageType
from notifier.core.logging import setup_logging
from notifier.db.base import Base
from notifier.db.session import get_engine, get_session_factory
from notifier.delivery.factory import build_coordinator
from notifier.delivery.outcomes import Failure


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Send one idempotent notification.")
    parser.add_argument("message_type", choices=[member.value for member in MessageType])
    parser.add_argument("recipient")
    parser.add_argument("idempotency_key")
    parser.add_argument("template")
    parser.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Template parameter; may be repeated.",
    )
    parser.add_argument("--user-id", default=None)
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create the ledger table before sending (local databases only).",
    )
    return parser.parse_args(argv)


def parse_params(pairs: list[str]) -> dict[str, str]:
    params: dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key:
            raise SystemExit(f"--param expects KEY=VALUE, got {pair!r}")
        params[key] = value
    return params


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging()

    if args.create_tables:
        Base.metadata.create_all(bind=get_engine())

    coordinator = build_coordinator(MessageType(args.message_type), session_factory=get_session_factory())
    result = coordinator.send(
        args.recipient,
        args.idempotency_key,
        args.template,
        parse_params(args.param),
        args.user_id,
    )

    if isinstance(result, Failure):
        print(f"[FAILED] reason={result.reason.value} detail={result.detail}")
        return 1

    print(f"[SENT] already_sent={result.already_sent} provider_message_id={result.provider_message_id}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
