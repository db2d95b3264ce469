"""Idempotent SMS and email notification delivery."""
