# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Exception hierarchy for the mail composer.

Decode errors carry the offset and the offending bytes so callers can
report exactly where an encoded body or header went wrong. Encoding
well-formed in-memory data never fails except through
:class:`UnsupportedEncoding` at configuration time.
"""

from __future__ import annotations


class MailComposerError(Exception):
    """Base class for every error raised by this package."""


class QuotedPrintableError(MailComposerError, ValueError):
    """Raised when quoted-printable data cannot be decoded."""

    def __init__(self, message: str, *, offset: int = -1, data: bytes = b""):
        super().__init__(message)
        self.offset = offset
        self.data = data


class MalformedInput(QuotedPrintableError):
    """Invalid hex digit after ``=`` or a byte not allowed unescaped."""


class UnexpectedEnd(QuotedPrintableError):
    """An ``=XX`` escape was truncated by the end of the input."""


class UnsupportedEncoding(MailComposerError, ValueError):
    """Raised when an RFC 2047 sub-encoding is neither Q nor B."""

    def __init__(self, encoding: str):
        super().__init__(f"RFC 2047 encoding not supported: {encoding!r}")
        self.encoding = encoding


class CharsetConflict(MailComposerError):
    """Encoded-words in a single header value use different charsets."""

    def __init__(self, first: str, second: str):
        super().__init__(
            f"multiple charsets in header are not supported: {first!r} and {second!r} used"
        )
        self.first = first
        self.second = second


class UpstreamError(MailComposerError):
    """Failure reported by an external collaborator (file reader, SMTP server)."""

    def __init__(self, collaborator: str, message: str):
        super().__init__(f"{collaborator}: {message}")
        self.collaborator = collaborator


class InvalidMessage(MailComposerError, ValueError):
    """The exported message cannot be routed (e.g. no sender address)."""


__all__ = [
    "CharsetConflict",
    "InvalidMessage",
    "MailComposerError",
    "MalformedInput",
    "QuotedPrintableError",
    "UnexpectedEnd",
    "UnsupportedEncoding",
    "UpstreamError",
]
