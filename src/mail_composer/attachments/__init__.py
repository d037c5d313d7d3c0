# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Attachment reading for the message assembler.

Attachments recorded with :meth:`Message.attach` are read only when the
message is exported, through a ``read_file`` callable. The default one is
:meth:`AttachmentManager.fetch`, which understands two kinds of source:

- ``base64:...`` -> inline base64 content (prefix is stripped)
- anything else  -> a filesystem path
"""

from __future__ import annotations

import mimetypes
import os

from .base64_fetcher import Base64Fetcher
from .filesystem_fetcher import FilesystemFetcher

DEFAULT_MIME_TYPE = "application/octet-stream"


class AttachmentManager:
    """Read attachment content from inline base64 text or the filesystem."""

    def __init__(self, base_dir: str | None = None):
        self._base64_fetcher = Base64Fetcher()
        self._filesystem_fetcher = FilesystemFetcher(base_dir=base_dir)

    def fetch(self, source: str | os.PathLike[str]) -> bytes:
        """Return the bytes designated by ``source``."""
        source = os.fspath(source)
        if not source:
            raise ValueError("Empty attachment source")
        if source.startswith("base64:"):
            return self._base64_fetcher.fetch(source[7:])
        return self._filesystem_fetcher.fetch(source)

    __call__ = fetch

    @staticmethod
    def guess_mime(filename: str) -> str:
        """Determine the MIME type for a filename based on its extension."""
        mt, _ = mimetypes.guess_type(filename, strict=False)
        return mt or DEFAULT_MIME_TYPE


__all__ = ["AttachmentManager", "Base64Fetcher", "DEFAULT_MIME_TYPE", "FilesystemFetcher"]
