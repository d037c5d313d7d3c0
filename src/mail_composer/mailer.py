# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Envelope handling on top of a transport.

The :class:`Mailer` works out the envelope sender and recipients from the
exported header and sends one copy to the ``To``/``Cc`` recipients without
the ``Bcc`` header, then one copy per ``Bcc`` recipient carrying only the
``Bcc`` value that names them.
"""

from __future__ import annotations

from email.utils import parseaddr
from typing import Protocol, Sequence

from .attachments import AttachmentManager
from .config import ComposerConfig, SmtpConfig
from .errors import InvalidMessage
from .export import BoundaryFactory, Clock, ExportedMessage, ReadFile, export, flatten_header
from .logger import get_logger
from .message import Message
from .transport import SmtpTransport

logger = get_logger("MailComposer.mailer")

DESTINATION_FIELDS = ("Bcc", "To", "Cc")


class Transport(Protocol):
    async def send(self, sender: str, recipients: Sequence[str], raw: bytes) -> None: ...


def parse_address(value: str) -> str | None:
    """Return the address part of ``value``, or ``None`` if there is none."""
    _, address = parseaddr(value)
    if not address or "@" not in address:
        return None
    return address


def get_sender(header: dict[str, list[str]]) -> str:
    """Envelope sender: ``Sender`` if present, else ``From``."""
    for field in ("Sender", "From"):
        values = header.get(field)
        if values and values[0]:
            address = parse_address(values[0])
            if address is None:
                raise InvalidMessage(f"Invalid {field!r} address: {values[0]!r}")
            return address
    raise InvalidMessage('Invalid message, "From" field is absent')


def get_recipients(header: dict[str, list[str]]) -> tuple[list[str], list[str]]:
    """Return ``(recipients, bcc)`` without duplicates, in header order."""
    recipients: list[str] = []
    bcc: list[str] = []
    for field in DESTINATION_FIELDS:
        for value in header.get(field, []):
            address = parse_address(value)
            if address is None:
                logger.warning("Skipping unparseable %s value %r", field, value)
                continue
            if field == "Bcc":
                if address not in bcc:
                    bcc.append(address)
            elif address not in bcc and address not in recipients:
                recipients.append(address)
    return recipients, bcc


class Mailer:
    """Send messages through ``transport``.

    The optional collaborators are passed to :func:`~mail_composer.export.export`
    when :meth:`send` receives a :class:`Message`.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        now: Clock | None = None,
        read_file: ReadFile | None = None,
        boundary: BoundaryFactory | None = None,
    ):
        self.transport = transport
        self._now = now
        self._read_file = read_file
        self._boundary = boundary

    @classmethod
    def from_config(cls, config: SmtpConfig | ComposerConfig, **kwargs) -> Mailer:
        """Build a mailer over an :class:`SmtpTransport`.

        Given a full :class:`ComposerConfig`, attachments are also read
        relative to its ``attachments.base_dir``.
        """
        if isinstance(config, ComposerConfig):
            kwargs.setdefault("read_file", AttachmentManager(config.attachments.base_dir).fetch)
            config = config.smtp
        return cls(SmtpTransport.from_config(config), **kwargs)

    async def send(self, message: Message | ExportedMessage) -> None:
        """Deliver ``message`` to every ``To``, ``Cc`` and ``Bcc`` recipient.

        Raises:
            InvalidMessage: If the message has no usable sender.
            UpstreamError: Propagated from the transport or the file reader.
        """
        if isinstance(message, Message):
            message = export(
                message, now=self._now, read_file=self._read_file, boundary=self._boundary
            )

        sender = get_sender(message.header)
        recipients, bcc = get_recipients(message.header)
        logger.debug("Envelope from %s: %d recipient(s), %d bcc", sender, len(recipients), len(bcc))

        if recipients:
            await self.transport.send(sender, recipients, message.as_bytes())
        for to in bcc:
            await self.transport.send(sender, [to], message.as_bytes(to))


__all__ = ["DESTINATION_FIELDS", "Mailer", "Transport", "flatten_header", "get_recipients", "get_sender", "parse_address"]
