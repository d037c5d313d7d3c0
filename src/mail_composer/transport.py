# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""SMTP delivery of exported messages.

Each :meth:`SmtpTransport.send` opens a connection, authenticates when
credentials are configured, hands the raw message over and quits. There
is no pooling and no retry: a failure is reported once, as
:class:`~mail_composer.errors.UpstreamError`.

Example:
    Sending a raw message::

        transport = SmtpTransport("smtp.example.com", 587, "user", "secret", start_tls=True)
        await transport.send("alex@example.com", ["bob@example.com"], raw)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Sequence

import aiosmtplib

from .errors import UpstreamError
from .logger import get_logger

if TYPE_CHECKING:
    from .config import SmtpConfig

logger = get_logger("MailComposer.transport")


class SmtpTransport:
    """Deliver messages through a single SMTP server.

    Attributes:
        hostname: SMTP server hostname or IP address.
        port: SMTP server port.
        username: Login user, or ``None`` for no authentication.
        password: Login password.
        use_tls: Connect with implicit TLS (usually port 465).
        start_tls: Upgrade the connection with STARTTLS (usually port 587).
        timeout: Seconds allowed for each SMTP command.
    """

    def __init__(
        self,
        hostname: str,
        port: int = 25,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = False,
        start_tls: bool = False,
        timeout: float = 10.0,
    ):
        self.hostname = hostname
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.start_tls = start_tls
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: SmtpConfig) -> SmtpTransport:
        return cls(
            config.host,
            config.port,
            username=config.user,
            password=config.password,
            use_tls=config.use_tls,
            start_tls=config.start_tls,
            timeout=config.timeout,
        )

    def __repr__(self) -> str:
        return f"SmtpTransport({self.hostname!r}, {self.port})"

    async def _connect(self) -> aiosmtplib.SMTP:
        smtp = aiosmtplib.SMTP(
            hostname=self.hostname,
            port=self.port,
            start_tls=self.start_tls,
            use_tls=self.use_tls,
            timeout=self.timeout,
        )

        # Bound the whole handshake, not only each command.
        async def _do_connect():
            await smtp.connect()
            if self.username and self.password:
                await smtp.login(self.username, self.password)

        try:
            await asyncio.wait_for(_do_connect(), timeout=self.timeout + 5.0)
        except Exception:
            smtp.close()
            raise
        return smtp

    async def _quit(self, smtp: aiosmtplib.SMTP) -> None:
        try:
            await smtp.quit()
        except Exception as exc:
            logger.warning("QUIT to %s:%s failed: %s", self.hostname, self.port, exc)
            smtp.close()

    async def send(self, sender: str, recipients: Sequence[str], raw: bytes) -> None:
        """Send ``raw`` from ``sender`` to every address in ``recipients``.

        Raises:
            UpstreamError: On connection, authentication or delivery failure.
        """
        logger.info(
            "Sending %d bytes from %s to %d recipient(s) via %s:%s",
            len(raw),
            sender,
            len(recipients),
            self.hostname,
            self.port,
        )
        try:
            smtp = await self._connect()
            try:
                await smtp.sendmail(sender, list(recipients), raw)
            finally:
                await self._quit(smtp)
        except (aiosmtplib.SMTPException, OSError, asyncio.TimeoutError) as exc:
            logger.error("SMTP delivery via %s:%s failed: %s", self.hostname, self.port, exc)
            raise UpstreamError("smtp", str(exc) or type(exc).__name__) from exc


__all__ = ["SmtpTransport"]
