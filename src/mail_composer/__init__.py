# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Compose MIME email messages and send them over SMTP.

The building blocks, from the bottom up:

- :mod:`.quotedprintable` - quoted-printable codec and stream adapters
- :mod:`.header` - RFC 2047 encoded-words
- :mod:`.linewriter` - line length limits for encoded bodies
- :mod:`.multipart` - boundary-delimited parts
- :mod:`.message` and :mod:`.export` - message model and assembler
- :mod:`.mailer` and :mod:`.transport` - envelope handling and SMTP delivery

Example:
    Composing and sending a message::

        from mail_composer import Mailer, Message, load_settings

        msg = Message()
        msg.set_address_header("From", "alex@example.com", "Alex")
        msg.set_header("To", "bob@example.com")
        msg.set_header("Subject", "¡Hola!")
        msg.set_body("text/plain", "¡Hola, señor!")

        mailer = Mailer.from_config(load_settings())
        await mailer.send(msg)
"""

from .attachments import AttachmentManager, Base64Fetcher, FilesystemFetcher
from .config import AttachmentsConfig, ComposerConfig, MessageConfig, SmtpConfig
from .config_loader import load_settings
from .errors import (
    CharsetConflict,
    InvalidMessage,
    MailComposerError,
    MalformedInput,
    QuotedPrintableError,
    UnexpectedEnd,
    UnsupportedEncoding,
    UpstreamError,
)
from .export import ExportedMessage, export
from .header import B, Q, STD_HEADER_ENCODER, HeaderEncoder, decode_header, encode_header
from .linewriter import MAX_LINE_LEN, Base64LineWriter, QuotedPrintableLineWriter
from .logger import get_logger
from .mailer import Mailer, flatten_header
from .message import BASE64, QUOTED_PRINTABLE, Message
from .multipart import MultipartWriter, make_boundary
from .quotedprintable import QuotedPrintableReader, QuotedPrintableWriter
from .transport import SmtpTransport

__version__ = "0.1.0"

__all__ = [
    "AttachmentManager",
    "AttachmentsConfig",
    "B",
    "BASE64",
    "Base64Fetcher",
    "Base64LineWriter",
    "CharsetConflict",
    "ComposerConfig",
    "ExportedMessage",
    "FilesystemFetcher",
    "HeaderEncoder",
    "InvalidMessage",
    "MAX_LINE_LEN",
    "MailComposerError",
    "Mailer",
    "MalformedInput",
    "Message",
    "MessageConfig",
    "MultipartWriter",
    "Q",
    "QUOTED_PRINTABLE",
    "QuotedPrintableError",
    "QuotedPrintableLineWriter",
    "QuotedPrintableReader",
    "QuotedPrintableWriter",
    "STD_HEADER_ENCODER",
    "SmtpConfig",
    "SmtpTransport",
    "UnexpectedEnd",
    "UnsupportedEncoding",
    "UpstreamError",
    "decode_header",
    "encode_header",
    "export",
    "flatten_header",
    "get_logger",
    "load_settings",
    "make_boundary",
]
