# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Configuration dataclasses for the mail composer.

Settings are grouped by concern:
- config.message.charset / config.message.encoding
- config.smtp.host / config.smtp.port / config.smtp.start_tls
- config.attachments.base_dir
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .message import BASE64, QUOTED_PRINTABLE


@dataclass
class MessageConfig:
    """Defaults for new messages."""

    charset: str = "UTF-8"
    """Charset label of bodies and encoded headers."""

    encoding: str = QUOTED_PRINTABLE
    """Body transfer encoding: quoted-printable or base64."""

    def __post_init__(self):
        self.encoding = self.encoding.lower()
        if self.encoding not in (QUOTED_PRINTABLE, BASE64):
            raise ValueError(f"Unsupported transfer encoding: {self.encoding!r}")


@dataclass
class SmtpConfig:
    """SMTP server used by the mailer."""

    host: str = "localhost"
    """SMTP server hostname or IP address."""

    port: int = 25
    """SMTP server port."""

    user: str | None = None
    """Login user; no authentication when unset."""

    password: str | None = None
    """Login password."""

    use_tls: bool = False
    """Connect with implicit TLS."""

    start_tls: bool = False
    """Upgrade the connection with STARTTLS."""

    timeout: float = 10.0
    """Seconds allowed for each SMTP command."""


@dataclass
class AttachmentsConfig:
    """Attachment reading settings."""

    base_dir: str | None = None
    """Directory relative attachment paths are resolved against."""


@dataclass
class ComposerConfig:
    """Top-level configuration container."""

    message: MessageConfig = field(default_factory=MessageConfig)
    smtp: SmtpConfig = field(default_factory=SmtpConfig)
    attachments: AttachmentsConfig = field(default_factory=AttachmentsConfig)


__all__ = ["AttachmentsConfig", "ComposerConfig", "MessageConfig", "SmtpConfig"]
