# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""In-memory message model consumed by the assembler.

A :class:`Message` holds an ordered header mapping, an ordered list of
textual body parts and an ordered list of attachments. Header values are
run through the message's RFC 2047 encoder as they are stored, so the
mapping always holds wire-ready values.

Example:
    Building a message with an HTML alternative and one attachment::

        msg = Message()
        msg.set_address_header("From", "alex@example.com", "Alex")
        msg.set_header("To", "bob@example.com")
        msg.set_header("Subject", "Hello!")
        msg.set_body("text/plain", "Hello Bob!")
        msg.add_alternative("text/html", "Hello <b>Bob</b>!")
        msg.attach("/home/alex/lolcat.jpg")
"""

from __future__ import annotations

import io
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import TYPE_CHECKING

from .attachments import Base64Fetcher
from .header import B, Q, HeaderEncoder

if TYPE_CHECKING:
    from .config import MessageConfig

QUOTED_PRINTABLE = "quoted-printable"
"""The quoted-printable transfer encoding defined in RFC 2045."""

BASE64 = "base64"
"""The base64 transfer encoding defined in RFC 2045."""


@dataclass
class Part:
    """A textual body variant."""

    content_type: str
    body: io.BytesIO = field(default_factory=io.BytesIO)


@dataclass
class Attachment:
    """An attachment: either in-memory ``content`` or a ``source`` read at export."""

    filename: str
    content: bytes | None = None
    source: str | None = None


def _as_bytes(body: str | bytes) -> bytes:
    return body.encode("utf-8") if isinstance(body, str) else bytes(body)


def format_date(date: datetime) -> str:
    """Format ``date`` for a header; naive datetimes are taken as UTC."""
    if date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return format_datetime(date)


class Message:
    """A mail message.

    Args:
        charset: Charset label of the bodies and encoded headers. Bodies are
            taken as already encoded in it; no conversion happens.
        encoding: Body transfer encoding, ``"quoted-printable"`` or
            ``"base64"``. Headers use Q or B encoding to match.
    """

    def __init__(self, charset: str = "UTF-8", encoding: str = QUOTED_PRINTABLE):
        if encoding not in (QUOTED_PRINTABLE, BASE64):
            raise ValueError(f"Unsupported transfer encoding: {encoding!r}")
        self.charset = charset
        self.encoding = encoding
        self.header_encoder = HeaderEncoder(charset, B if encoding == BASE64 else Q)
        self.header: dict[str, list[str]] = {}
        self.parts: list[Part] = []
        self.attachments: list[Attachment] = []

    @classmethod
    def from_config(cls, config: MessageConfig) -> Message:
        return cls(charset=config.charset, encoding=config.encoding)

    def __repr__(self) -> str:
        return (
            f"Message(charset={self.charset!r}, encoding={self.encoding!r}, "
            f"parts={len(self.parts)}, attachments={len(self.attachments)})"
        )

    # ---------------------------------------------------------------- headers
    def encode_header(self, value: str) -> str:
        return self.header_encoder.encode_header(value)

    def set_header(self, field: str, value: str) -> None:
        """Set ``field`` to a single value, replacing any previous one."""
        self.header[field] = [self.encode_header(value)]

    def add_header(self, field: str, value: str) -> None:
        """Append a value to ``field``."""
        self.header.setdefault(field, []).append(self.encode_header(value))

    def set_address_header(self, field: str, address: str, name: str = "") -> None:
        self.header[field] = [self.build_address_header(address, name)]

    def add_address_header(self, field: str, address: str, name: str = "") -> None:
        self.header.setdefault(field, []).append(self.build_address_header(address, name))

    def build_address_header(self, address: str, name: str = "") -> str:
        if not name:
            return address
        return f"{self.encode_header(name)} <{address}>"

    def set_date_header(self, field: str, date: datetime) -> None:
        self.header[field] = [format_date(date)]

    def add_date_header(self, field: str, date: datetime) -> None:
        self.header.setdefault(field, []).append(format_date(date))

    def get_header(self, field: str) -> list[str]:
        """Return the values of ``field``, or an empty list."""
        return list(self.header.get(field, []))

    def del_header(self, field: str) -> None:
        self.header.pop(field, None)

    # ------------------------------------------------------------------ bodies
    def set_body(self, content_type: str, body: str | bytes) -> None:
        """Replace every body part with a single one."""
        self.parts = [Part(content_type, io.BytesIO(_as_bytes(body)))]

    def add_alternative(self, content_type: str, body: str | bytes) -> None:
        """Add an alternative body, usually an HTML version of a text body."""
        self.parts.append(Part(content_type, io.BytesIO(_as_bytes(body))))

    def get_body_writer(self, content_type: str) -> io.BytesIO:
        """Add an empty body part and return the buffer to write it into.

        Useful with template engines rendering into a stream::

            w = msg.get_body_writer("text/plain")
            w.write(template.render(name="Bob").encode("utf-8"))
        """
        part = Part(content_type)
        self.parts.append(part)
        return part.body

    # ------------------------------------------------------------- attachments
    def attach(self, path: str | os.PathLike[str], filename: str | None = None) -> None:
        """Attach a file. It is read when the message is exported.

        Args:
            path: Source handed to the export's ``read_file`` collaborator.
            filename: Name shown to the recipient; defaults to the path's
                base name.
        """
        source = os.fspath(path)
        self.attachments.append(
            Attachment(filename or os.path.basename(source), source=source)
        )

    def attach_content(self, filename: str, content: str | bytes) -> None:
        """Attach in-memory content under ``filename``.

        A ``str`` is taken as base64 text and decoded right away, so invalid
        input raises ``ValueError`` here rather than at export.
        """
        if isinstance(content, str):
            content = Base64Fetcher().fetch(content)
        self.attachments.append(Attachment(filename, content=bytes(content)))


__all__ = ["Attachment", "BASE64", "Message", "Part", "QUOTED_PRINTABLE", "format_date"]
