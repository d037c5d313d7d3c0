# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Quoted-printable encoding and decoding (RFC 2045, section 6.7).

Deviations from the RFC, kept for compatibility with other mail agents:

- both ``=\\r\\n`` and ``=\\n`` are accepted as soft line breaks;
- a ``\\r`` or ``\\n`` not preceded by ``=`` passes through unescaped;
- a ``\\r`` ending the input ends the last line, so ``=\\r`` there is a
  soft break too.

The one-shot functions :func:`encode` and :func:`decode` work on whole
buffers. :class:`QuotedPrintableWriter` and :class:`QuotedPrintableReader`
adapt them to streams: the writer encodes every ``write()`` on its own, the
reader decodes the underlying source one raw line at a time.

Line length is not limited here; see :mod:`mail_composer.linewriter`.
"""

from __future__ import annotations

import io
from typing import Any

from .errors import MalformedInput, QuotedPrintableError, UnexpectedEnd

HEXTABLE = b"0123456789ABCDEF"

HEX_VALUES = {c: int(chr(c), 16) for c in b"0123456789ABCDEFabcdef"}

_EQUAL = 0x3D
_SPACE = 0x20
_TAB = 0x09
_CR = 0x0D
_LF = 0x0A


def is_vchar(c: int) -> bool:
    """Return ``True`` if ``c`` is an RFC 5322 VCHAR (visible character)."""
    return 0x21 <= c <= 0x7E


def is_wsp(c: int) -> bool:
    """Return ``True`` if ``c`` is a space or a horizontal tab."""
    return c == _SPACE or c == _TAB


def is_newline(c: int) -> bool:
    """Return ``True`` if ``c`` is a line feed or a carriage return."""
    return c == _LF or c == _CR


def max_encoded_len(n: int) -> int:
    """Maximum length of the encoding of ``n`` source bytes."""
    return 3 * n


def max_decoded_len(n: int) -> int:
    """Maximum length of the decoding of ``n`` source bytes."""
    return n


def encode_byte(b: int) -> bytes:
    """Return the ``=XX`` escape for a single byte, with uppercase hex."""
    return bytes((_EQUAL, HEXTABLE[b >> 4], HEXTABLE[b & 0x0F]))


def _is_last_char(i: int, src: bytes) -> bool:
    """Whether byte ``i`` is the last character of its line."""
    n = len(src)
    return (
        i == n - 1
        or (i < n - 1 and src[i + 1] == _LF)
        or (i < n - 2 and src[i + 1] == _CR and src[i + 2] == _LF)
        or (i == n - 2 and src[i + 1] == _CR)
    )


def encode(src: bytes | bytearray | memoryview) -> bytes:
    """Encode ``src`` as quoted-printable.

    Visible characters other than ``=`` and newline characters pass through.
    Spaces and tabs pass through unless they end a line, in which case they
    are escaped so mail agents cannot strip them. Everything else becomes
    ``=XX``.

    Args:
        src: The raw bytes to encode.

    Returns:
        The encoded bytes, at most ``max_encoded_len(len(src))`` long.
    """
    src = bytes(src)
    dst = bytearray()
    for i, c in enumerate(src):
        if c != _EQUAL and (is_vchar(c) or is_newline(c)):
            dst.append(c)
        elif is_wsp(c) and not _is_last_char(i, src):
            dst.append(c)
        else:
            dst += encode_byte(c)
    return bytes(dst)


def encode_to_string(src: bytes | bytearray | memoryview) -> str:
    """Return the quoted-printable encoding of ``src`` as an ASCII string."""
    return encode(src).decode("ascii")


def decode(src: bytes | bytearray | memoryview | str) -> bytes:
    """Decode quoted-printable data.

    The input is processed line by line. Spaces and tabs before a line end
    are dropped, a line ending in ``=`` is a soft break and is joined with
    the next one, and ``=XX`` escapes are turned back into bytes.

    Args:
        src: Encoded bytes, or an ASCII string.

    Returns:
        The decoded bytes.

    Raises:
        MalformedInput: On an invalid hex digit or a byte that is not
            allowed unescaped.
        UnexpectedEnd: When the input ends in the middle of an escape.
    """
    return _decode(_as_bytes(src))


def decode_string(s: str) -> bytes:
    """Decode a quoted-printable ASCII string, see :func:`decode`."""
    return decode(s)


def _as_bytes(src: Any) -> bytes:
    if isinstance(src, str):
        try:
            return src.encode("ascii")
        except UnicodeEncodeError as exc:
            raise MalformedInput(
                f"quotedprintable: invalid unescaped character {src[exc.start]!r}",
                offset=exc.start,
                data=src[exc.start].encode("utf-8"),
            ) from None
    return bytes(src)


def _decode(src: bytes, base: int = 0) -> bytes:
    dst = bytearray()
    start = 0
    n = len(src)
    while start < n:
        end = src.find(b"\n", start)
        end = n if end == -1 else end + 1
        _decode_line(src, start, end, dst, base)
        start = end
    return bytes(dst)


def _decode_line(src: bytes, start: int, end: int, dst: bytearray, base: int) -> None:
    if src[end - 1] == _LF:
        eol_len = 2 if end - 2 >= start and src[end - 2] == _CR else 1
    elif src[end - 1] == _CR and end == len(src):
        # A CR ending the input closes the last line.
        eol_len = 1
    else:
        eol_len = 0

    stop = end - eol_len
    while stop > start and is_wsp(src[stop - 1]):
        stop -= 1

    soft_break = stop > start and src[stop - 1] == _EQUAL
    if soft_break:
        stop -= 1

    i = start
    while i < stop:
        c = src[i]
        if c == _EQUAL:
            if i + 2 >= stop:
                # A soft break or line end cut the escape short; it is only
                # truncated when nothing at all follows in the input.
                if i + 2 >= len(src):
                    raise UnexpectedEnd(
                        "quotedprintable: unexpected end of input in escape sequence",
                        offset=base + i,
                        data=src[i:],
                    )
                _raise_invalid_escape(src, i, base)
            hi = HEX_VALUES.get(src[i + 1])
            lo = HEX_VALUES.get(src[i + 2])
            if hi is None or lo is None:
                _raise_invalid_escape(src, i, base)
            dst.append(hi << 4 | lo)
            i += 3
            continue
        if _SPACE <= c <= 0x7E or c == _CR or c == _TAB or c == _LF:
            dst.append(c)
        else:
            raise MalformedInput(
                f"quotedprintable: invalid unescaped byte 0x{c:02x} in quoted-printable body",
                offset=base + i,
                data=bytes((c,)),
            )
        i += 1

    if not soft_break:
        dst += src[end - eol_len:end]


def _raise_invalid_escape(src: bytes, i: int, base: int) -> None:
    bad = src[i + 1:i + 3]
    raise MalformedInput(
        f"quotedprintable: invalid quoted-printable hex bytes {bad!r}",
        offset=base + i,
        data=src[i:i + 3],
    )


def _completed_units(encoded: bytes, written: int) -> int:
    """Count source bytes whose encoding lies entirely in ``encoded[:written]``."""
    count = 0
    i = 0
    while i < written:
        if encoded[i] == _EQUAL:
            if i + 2 >= written:
                break
            i += 2
        i += 1
        count += 1
    return count


class QuotedPrintableWriter(io.RawIOBase):
    """Stream encoder writing quoted-printable data to ``sink``.

    Each ``write()`` is encoded independently. When the sink accepts only
    part of the encoded data, the returned count covers only the source
    bytes whose whole encoded form was accepted, so the caller can resubmit
    the remainder. Closing the writer does not close the sink.
    """

    def __init__(self, sink: Any):
        super().__init__()
        self._sink = sink

    def writable(self) -> bool:
        return True

    def write(self, data: Any) -> int:
        """Encode ``data`` and return how many of its bytes reached the sink.

        On a short write only bytes whose whole ``=XX`` escape was written
        are counted.
        """
        data = bytes(data)
        encoded = encode(data)
        written = self._sink.write(encoded)
        if written is None:
            written = 0
        if written >= len(encoded):
            return len(data)
        return _completed_units(encoded, written)


class QuotedPrintableReader(io.RawIOBase):
    """Stream decoder reading quoted-printable data from ``source``.

    ``source`` must provide ``readline()``. Lines are decoded one at a time;
    a decode error is fatal and is raised again on every later read.
    """

    def __init__(self, source: Any):
        super().__init__()
        self._source = source
        self._pending = b""
        self._consumed = 0
        self._eof = False
        self._error: QuotedPrintableError | None = None

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if not self._pending:
            self._fill()
        n = min(len(buffer), len(self._pending))
        buffer[:n] = self._pending[:n]
        self._pending = self._pending[n:]
        return n

    def _fill(self) -> None:
        while not self._pending:
            if self._error is not None:
                raise self._error
            if self._eof:
                return
            line = self._source.readline()
            if not line:
                self._eof = True
                return
            line = _as_bytes(line)
            try:
                self._pending = _decode(line, base=self._consumed)
            except QuotedPrintableError as exc:
                self._error = exc
                raise
            self._consumed += len(line)


__all__ = [
    "QuotedPrintableReader",
    "QuotedPrintableWriter",
    "decode",
    "decode_string",
    "encode",
    "encode_byte",
    "encode_to_string",
    "max_decoded_len",
    "max_encoded_len",
]
