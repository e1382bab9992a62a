"""Agent Bridge - read, redact and compare local AI coding agent sessions."""

__version__ = "0.4.0"
