"""Idempotent delivery pipeline.

``SendCoordinator.send`` validates and renders a message, runs one atomic
ledger attempt, classifies the result, dispatches telemetry and error
reports, and returns a caller-facing ``Success`` or ``Failure``.
"""
