"""Core configuration, exceptions and application lifecycle."""
