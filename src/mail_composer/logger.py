# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Logging utilities for the mail composer.

The package never configures handlers, levels or formats; that is left to
the application embedding it (typically via ``logging.basicConfig()``).

Example:
    Typical usage in a module::

        from mail_composer.logger import get_logger

        logger = get_logger("MailComposer.export")
        logger.debug("Opening multipart/mixed")
"""

import logging


def get_logger(name: str = "MailComposer") -> logging.Logger:
    """Return the standard library logger bound to ``name``.

    Args:
        name: The logger name. Defaults to "MailComposer".

    Returns:
        A ``logging.Logger`` instance.
    """
    return logging.getLogger(name)
