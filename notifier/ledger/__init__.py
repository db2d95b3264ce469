"""Idempotency ledger: the persisted record of delivery attempts."""
