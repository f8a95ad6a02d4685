"""Core infrastructure: configuration, exceptions and the execution engine."""
