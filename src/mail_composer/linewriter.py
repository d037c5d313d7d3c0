# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Writers that keep encoded body lines within RFC 5322 limits.

Both writers sit between a transfer encoder and the part being written;
the only change they make to the payload is inserting line breaks.

- :class:`Base64LineWriter` cuts base64 text every 78 characters.
- :class:`QuotedPrintableLineWriter` inserts ``=\\r\\n`` soft breaks, keeps
  genuine line ends untouched and never cuts an ``=XX`` escape in two.
"""

from __future__ import annotations

import io
from typing import Any

MAX_LINE_LEN = 78  # RFC 5322, section 2.1.1

CRLF = b"\r\n"
SOFT_BREAK = b"=\r\n"


class _LineWriter(io.RawIOBase):
    def __init__(self, sink: Any):
        super().__init__()
        self._sink = sink
        self.line_len = 0

    def writable(self) -> bool:
        return True


class Base64LineWriter(_LineWriter):
    """Limit base64 text written to ``sink`` to 78 characters per line."""

    def write(self, data: Any) -> int:
        p = bytes(data)
        n = 0
        while len(p) + self.line_len > MAX_LINE_LEN:
            room = MAX_LINE_LEN - self.line_len
            self._sink.write(p[:room])
            self._sink.write(CRLF)
            p = p[room:]
            n += room
            self.line_len = 0

        self._sink.write(p)
        self.line_len += len(p)
        return n + len(p)


class QuotedPrintableLineWriter(_LineWriter):
    """Limit quoted-printable text written to ``sink`` to 78 characters per line.

    The input must already be quoted-printable encoded.
    """

    def write(self, data: Any) -> int:
        p = bytes(data)
        n = 0
        while p:
            room = MAX_LINE_LEN - self.line_len

            if len(p) < room:
                self._sink.write(p)
                self.line_len += len(p)
                return n + len(p)

            # A CRLF may end exactly one byte past the limit.
            i = p.find(b"\n", 0, room + 2)
            if i != -1 and (i != room + 1 or p[i - 1] == 0x0D):
                self._sink.write(p[:i + 1])
                p = p[i + 1:]
                n += i + 1
                self.line_len = 0
                continue

            # Never separate "=" from the two hex digits that follow it.
            if room - 2 >= 0 and p[room - 2] == 0x3D:
                to_write = room - 2
            elif p[room - 1] == 0x3D:
                to_write = room - 1
            else:
                to_write = room

            self._sink.write(p[:to_write])
            self._sink.write(SOFT_BREAK)
            p = p[to_write:]
            n += to_write
            self.line_len = 0

        return n


__all__ = ["Base64LineWriter", "MAX_LINE_LEN", "QuotedPrintableLineWriter"]
