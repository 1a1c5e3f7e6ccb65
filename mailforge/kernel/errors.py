"""
Mailforge Kernel - Exceptions

The validator, sanitizer, generator and reducer never raise.
The parser is the one place a hard failure reaches the caller.
"""

from __future__ import annotations


class MailforgeError(Exception):
    """Base class for kernel errors."""

    pass


class ParseError(MailforgeError):
    """Markup could not be structurally parsed, or lacks the <mjml> root."""

    pass


class StorageError(MailforgeError):
    """A persistence backend failed to read or write a template."""

    pass
