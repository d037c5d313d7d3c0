# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Multipart assembler turning a :class:`~mail_composer.message.Message` into wire form.

The envelope shape is decided once, before anything is written, because the
top-level ``Content-Type`` (and its boundary) must be known first:

- ``mixed`` when the message has body parts and attachments, or more than
  one attachment;
- ``alternative`` when it has more than one body part.

Both may apply, in which case the alternative entity is the first part of
the mixed one. With neither, the single part's headers are merged into the
top-level header and its body becomes the message body.

Example:
    Exporting a message and flattening it for a transport::

        exported = export(msg)
        raw = exported.as_bytes()
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from .attachments import AttachmentManager
from .errors import UpstreamError
from .linewriter import Base64LineWriter, QuotedPrintableLineWriter
from .logger import get_logger
from .message import BASE64, QUOTED_PRINTABLE, Message, format_date
from .multipart import BoundaryFactory, MultipartWriter, make_boundary
from .quotedprintable import QuotedPrintableWriter

logger = get_logger("MailComposer.export")

Header = dict[str, list[str]]
ReadFile = Callable[[str], bytes]
Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def flatten_header(header: Header, bcc: str = "") -> bytes:
    """Render ``header`` followed by the blank line ending it.

    The ``Bcc`` field is left out, unless ``bcc`` is given: then only the
    ``Bcc`` values containing that address are kept, one line each.
    """
    lines = []
    for field, values in header.items():
        if field != "Bcc":
            lines.append(f"{field}: {', '.join(values)}\r\n")
        elif bcc:
            lines.extend(f"{field}: {value}\r\n" for value in values if bcc in value)
    lines.append("\r\n")
    return "".join(lines).encode("utf-8")


@dataclass
class ExportedMessage:
    """A finished message: top-level header plus the encoded body."""

    header: Header
    body: bytes

    def as_bytes(self, bcc: str = "") -> bytes:
        """Return header, blank line and body, without the ``Bcc`` field.

        See :func:`flatten_header` for ``bcc``.
        """
        return flatten_header(self.header, bcc) + self.body


class MessageWriter:
    """Write parts into a buffer, nesting multipart entities on a stack."""

    def __init__(self, header: Header, boundary: BoundaryFactory):
        self.header = header
        self.buf = io.BytesIO()
        self.writers: list[MultipartWriter] = []
        self._boundary = boundary
        self._part_sink: Any = self.buf

    @property
    def depth(self) -> int:
        return len(self.writers)

    def open_multipart(self, subtype: str) -> None:
        writer = MultipartWriter(self.buf, self._boundary())
        content_type = writer.content_type(subtype)
        if self.depth == 0:
            self.header["Content-Type"] = [content_type]
        else:
            self._create_part({"Content-Type": [content_type]})
        self.writers.append(writer)
        logger.debug("Opened multipart/%s at depth %d", subtype, self.depth)

    def close_multipart(self) -> None:
        if self.writers:
            self.writers.pop().close()

    def write_header(self, header: Header) -> None:
        if self.depth == 0:
            self.header.update(header)
        else:
            self._create_part(header)

    def _create_part(self, header: Header) -> None:
        self._part_sink = self.writers[-1].create_part(header)

    def write_body(self, body: bytes, encoding: str) -> None:
        sink = self.buf if self.depth == 0 else self._part_sink
        if encoding == BASE64:
            Base64LineWriter(sink).write(base64.b64encode(body))
        else:
            QuotedPrintableWriter(QuotedPrintableLineWriter(sink)).write(body)

    def export(self) -> ExportedMessage:
        return ExportedMessage(header=self.header, body=self.buf.getvalue())


def is_mixed(message: Message) -> bool:
    return (bool(message.parts) and bool(message.attachments)) or len(message.attachments) > 1


def is_alternative(message: Message) -> bool:
    return len(message.parts) > 1


def _base_header(message: Message, now: Clock) -> Header:
    # Copied so that exporting never alters the message.
    header = {field: list(values) for field, values in message.header.items()}
    header.setdefault("Mime-Version", ["1.0"])
    if "Date" not in header:
        header["Date"] = [format_date(now())]
    return header


def _read_attachment(read_file: ReadFile, source: str) -> bytes:
    try:
        return read_file(source)
    except Exception as exc:
        raise UpstreamError("read_file", f"Cannot read attachment {source!r}: {exc}") from exc


def export(
    message: Message,
    *,
    now: Clock | None = None,
    read_file: ReadFile | None = None,
    boundary: BoundaryFactory | None = None,
) -> ExportedMessage:
    """Assemble ``message`` into a top-level header and an encoded body.

    Args:
        message: The message to export; it is not modified.
        now: Returns the datetime used for a missing ``Date`` header.
        read_file: Returns the content of an attachment added with
            :meth:`Message.attach`; defaults to
            :meth:`AttachmentManager.fetch`.
        boundary: Returns a fresh boundary for each multipart entity.

    Returns:
        The exported message.

    Raises:
        UpstreamError: If an attachment cannot be read. Nothing is
            returned in that case.
    """
    now = now or _utcnow
    read_file = read_file or AttachmentManager().fetch
    w = MessageWriter(_base_header(message, now), boundary or make_boundary)

    mixed = is_mixed(message)
    alternative = is_alternative(message)
    logger.debug(
        "Exporting %r (mixed=%s, alternative=%s)", message, mixed, alternative
    )

    if mixed:
        w.open_multipart("mixed")
    if alternative:
        w.open_multipart("alternative")

    transfer_encoding = BASE64 if message.encoding == BASE64 else QUOTED_PRINTABLE
    for part in message.parts:
        w.write_header({
            "Content-Type": [f"{part.content_type}; charset={message.charset}"],
            "Content-Transfer-Encoding": [transfer_encoding],
        })
        w.write_body(part.body.getvalue(), transfer_encoding)
    if alternative:
        w.close_multipart()

    for attachment in message.attachments:
        if attachment.content is not None:
            content = attachment.content
        else:
            content = _read_attachment(read_file, attachment.source)
        name = message.encode_header(attachment.filename)
        w.write_header({
            "Content-Type": [f'{AttachmentManager.guess_mime(attachment.filename)}; name="{name}"'],
            "Content-Disposition": [f'attachment; filename="{name}"'],
            "Content-Transfer-Encoding": [BASE64],
        })
        w.write_body(content, BASE64)
    if mixed:
        w.close_multipart()

    return w.export()


__all__ = ["ExportedMessage", "MessageWriter", "export", "flatten_header", "is_alternative", "is_mixed"]
