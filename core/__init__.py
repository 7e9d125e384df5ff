"""Core runtime utilities: logging, errors, telemetry and backpressure."""
