# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Load a :class:`~mail_composer.config.ComposerConfig` from an INI file.

Each option is looked up in the file first, then in an ``MC_*``
environment variable, then falls back to the dataclass default.

Example:
    Configuration file format (config.ini)::

        [message]
        charset = UTF-8
        encoding = quoted-printable

        [smtp]
        host = smtp.example.com
        port = 587
        user = alex
        password = secret
        start_tls = true

        [attachments]
        base_dir = /var/mail/files
"""

from __future__ import annotations

import configparser
import os
from pathlib import Path

from .config import AttachmentsConfig, ComposerConfig, MessageConfig, SmtpConfig
from .logger import get_logger

logger = get_logger("MailComposer.config")

ENV_PREFIX = "MC_"

TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
FALSE_VALUES = frozenset({"0", "false", "no", "off"})


class SettingsReader:
    """Option lookup over a parsed INI file with environment fallbacks.

    ``env`` names the variable (without prefix) consulted when the file
    does not set the option.
    """

    def __init__(self, parser: configparser.ConfigParser):
        self.parser = parser

    def text(self, section: str, option: str, env: str, default: str | None = None) -> str | None:
        if self.parser.has_option(section, option):
            return self.parser.get(section, option)
        return os.getenv(ENV_PREFIX + env, default)

    def integer(self, section: str, option: str, env: str, default: int) -> int:
        raw = self.text(section, option, env)
        return default if raw is None else int(raw)

    def number(self, section: str, option: str, env: str, default: float) -> float:
        raw = self.text(section, option, env)
        return default if raw is None else float(raw)

    def flag(self, section: str, option: str, env: str, default: bool = False) -> bool:
        raw = self.text(section, option, env)
        if raw is None:
            return default
        normalized = raw.strip().lower()
        if normalized in TRUE_VALUES:
            return True
        if normalized in FALSE_VALUES:
            return False
        logger.warning("Ignoring invalid boolean %r for [%s] %s", raw, section, option)
        return default


def load_settings(path: str | os.PathLike[str] | None = None) -> ComposerConfig:
    """
    Load configuration from an INI file (default: config.ini) with environment variables as fallbacks.

    Environment variables (all prefixed with MC_):
      MC_CONFIG - Path to config.ini file when ``path`` is not given (default: config.ini)
      MC_CHARSET - Message charset (default: UTF-8)
      MC_ENCODING - Body transfer encoding (default: quoted-printable)
      MC_SMTP_HOST - SMTP host (default: localhost)
      MC_SMTP_PORT - SMTP port (default: 25)
      MC_SMTP_USER - SMTP user
      MC_SMTP_PASSWORD - SMTP password
      MC_SMTP_USE_TLS - Implicit TLS (default: False)
      MC_SMTP_START_TLS - STARTTLS (default: False)
      MC_SMTP_TIMEOUT - SMTP command timeout in seconds (default: 10)
      MC_ATTACHMENTS_BASE_DIR - Base directory for relative attachment paths

    Config file sections/keys:
      [message] charset, encoding
      [smtp] host, port, user, password, use_tls, start_tls, timeout
      [attachments] base_dir

    A missing file is not an error. Invalid numbers raise ``ValueError``.
    """
    config_path = Path(path if path is not None else os.getenv(ENV_PREFIX + "CONFIG", "config.ini"))
    parser = configparser.ConfigParser()
    if parser.read(config_path):
        logger.debug("Loaded configuration from %s", config_path)
    else:
        logger.debug("No configuration file at %s, using environment and defaults", config_path)
    read = SettingsReader(parser)

    return ComposerConfig(
        message=MessageConfig(
            charset=read.text("message", "charset", "CHARSET", "UTF-8"),
            encoding=read.text("message", "encoding", "ENCODING", "quoted-printable"),
        ),
        smtp=SmtpConfig(
            host=read.text("smtp", "host", "SMTP_HOST", "localhost"),
            port=read.integer("smtp", "port", "SMTP_PORT", 25),
            user=read.text("smtp", "user", "SMTP_USER"),
            password=read.text("smtp", "password", "SMTP_PASSWORD"),
            use_tls=read.flag("smtp", "use_tls", "SMTP_USE_TLS"),
            start_tls=read.flag("smtp", "start_tls", "SMTP_START_TLS"),
            timeout=read.number("smtp", "timeout", "SMTP_TIMEOUT", 10.0),
        ),
        attachments=AttachmentsConfig(
            base_dir=read.text("attachments", "base_dir", "ATTACHMENTS_BASE_DIR"),
        ),
    )


__all__ = ["ENV_PREFIX", "SettingsReader", "load_settings"]
