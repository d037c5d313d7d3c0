# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Read attachments from the local filesystem.

With a ``base_dir``, relative paths are taken relative to it and every
path, absolute ones included, must end up inside it once symlinks and
``..`` are resolved. Without one, paths are used as given.

Example:
    Reading a file relative to a base directory::

        fetcher = FilesystemFetcher(base_dir="/var/mail/files")
        content = fetcher.fetch("uploads/report.pdf")
"""

from __future__ import annotations

import os
from pathlib import Path


class FilesystemFetcher:
    """Read attachment files, optionally confined to ``base_dir``."""

    def __init__(self, base_dir: str | os.PathLike[str] | None = None):
        self._base_dir = Path(base_dir).resolve() if base_dir else None

    @property
    def base_dir(self) -> Path | None:
        return self._base_dir

    def fetch(self, path: str | os.PathLike[str]) -> bytes:
        """Return the content of the file at ``path``.

        Raises:
            ValueError: If ``path`` is empty, leaves ``base_dir`` or names
                something other than a regular file.
            FileNotFoundError: If nothing exists at ``path``.
        """
        if not os.fspath(path):
            raise ValueError("Empty path provided")
        target = self.resolve(path)
        if not target.exists():
            raise FileNotFoundError(f"File not found: {target}")
        if not target.is_file():
            raise ValueError(f"Not a regular file: {target}")
        return target.read_bytes()

    def resolve(self, path: str | os.PathLike[str]) -> Path:
        """Return the absolute location of ``path``, checked against ``base_dir``."""
        candidate = Path(path)
        if self._base_dir is None:
            return candidate.resolve()

        if not candidate.is_absolute():
            candidate = self._base_dir / candidate
        target = candidate.resolve()
        if not target.is_relative_to(self._base_dir):
            raise ValueError(f"Path traversal detected: {os.fspath(path)!r} is outside {self._base_dir}")
        return target
