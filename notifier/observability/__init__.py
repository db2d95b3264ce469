"""Telemetry and error-report sinks used by the delivery effect layer."""
