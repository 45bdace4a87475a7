"""Mailquest: round-resolution and incident engine for an email-deliverability training game."""

__version__ = "0.1.0"
