"""Mailforge - MJML email template editor engine."""

__version__ = "0.1.0"
