# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Boundary-delimited part writer for multipart bodies (RFC 2046, section 5.1).

Boundaries are random and are not checked against the enclosed content;
with 60 hex characters of randomness a collision is not a practical
concern.
"""

from __future__ import annotations

import secrets
from typing import Any, Callable, Iterable, Mapping

BoundaryFactory = Callable[[], str]


def make_boundary() -> str:
    """Return a fresh random boundary made of 60 hex characters."""
    return secrets.token_hex(30)


def format_header(header: Mapping[str, Iterable[str]]) -> bytes:
    """Render header fields as ``Field: value\\r\\n`` lines in insertion order."""
    lines = []
    for field, values in header.items():
        for value in values:
            lines.append(f"{field}: {value}\r\n")
    return "".join(lines).encode("utf-8")


class MultipartWriter:
    """Write the parts of one multipart entity to ``sink``.

    Args:
        sink: Object with a ``write(bytes)`` method receiving the body.
        boundary: Boundary to use; a random one is generated when omitted.
    """

    def __init__(self, sink: Any, boundary: str | None = None):
        self._sink = sink
        self.boundary = boundary or make_boundary()
        self._parts = 0
        self.closed = False

    def content_type(self, subtype: str) -> str:
        return f"multipart/{subtype}; boundary={self.boundary}"

    def create_part(self, header: Mapping[str, Iterable[str]]) -> Any:
        """Start a new part and return the sink its body must be written to."""
        if self.closed:
            raise ValueError("multipart writer is closed")
        if self._parts:
            self._sink.write(f"\r\n--{self.boundary}\r\n".encode("ascii"))
        else:
            self._sink.write(f"--{self.boundary}\r\n".encode("ascii"))
        self._parts += 1
        self._sink.write(format_header(header))
        self._sink.write(b"\r\n")
        return self._sink

    def close(self) -> None:
        """Write the closing delimiter. Closing twice is a no-op."""
        if self.closed:
            return
        if self._parts:
            self._sink.write(f"\r\n--{self.boundary}--\r\n".encode("ascii"))
        else:
            self._sink.write(f"--{self.boundary}--\r\n".encode("ascii"))
        self.closed = True


__all__ = ["BoundaryFactory", "MultipartWriter", "format_header", "make_boundary"]
