# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Encoded-words for MIME header values (RFC 2047).

:class:`HeaderEncoder` turns a header value that contains characters other
than visible ASCII and horizontal whitespace into one or more
``=?charset?enc?payload?=`` words. Words are kept within 75 characters and
folded with ``\\r\\n `` when the charset is UTF-8; for any other charset the
encoder cannot know where characters start, so the value becomes a single
word whatever its length.

:func:`decode_header` does the reverse for every encoded-word found in a
header value.

No charset conversion happens either way: strings are encoded as their
UTF-8 bytes and payloads are read back as UTF-8, whatever the label.
"""

from __future__ import annotations

import base64
import re

from .errors import CharsetConflict, MalformedInput, UnexpectedEnd, UnsupportedEncoding
from .logger import get_logger
from .quotedprintable import HEX_VALUES, encode_byte, is_newline, is_vchar, is_wsp

logger = get_logger("MailComposer.header")

Q = "Q"
"""The Q encoding defined in RFC 2047, section 4.2."""

B = "B"
"""The base64 encoding defined in RFC 2045, section 6.8."""

MAX_ENCODED_WORD_LEN = 75  # RFC 2047, section 2

ENCODED_WORD = re.compile(r"=\?([\w\-]+)\?([bBqQ])\?([^?]+)\?=", re.ASCII)

_Q_UNSAFE = b"=?_"


def _b64_len(n: int) -> int:
    return (n + 2) // 3 * 4


def _is_q_safe(c: int) -> bool:
    return is_vchar(c) and c not in _Q_UNSAFE


def _write_q(buf: list[str], raw: bytes) -> None:
    for c in raw:
        if c == 0x20:
            buf.append("_")
        elif _is_q_safe(c):
            buf.append(chr(c))
        else:
            buf.append(encode_byte(c).decode("ascii"))


def needs_encoding(s: str) -> bool:
    """Whether ``s`` holds anything besides visible ASCII, spaces and tabs."""
    return any(not (is_vchar(c) or is_wsp(c)) for c in s.encode("utf-8"))


class HeaderEncoder:
    """Encode header values into RFC 2047 encoded-words.

    Args:
        charset: Label written into each word, e.g. ``"UTF-8"``.
        encoding: ``"Q"`` or ``"B"``, case-insensitive.

    Raises:
        UnsupportedEncoding: If ``encoding`` is neither Q nor B.
    """

    def __init__(self, charset: str = "UTF-8", encoding: str = Q):
        if encoding.upper() not in (Q, B):
            raise UnsupportedEncoding(encoding)
        self.charset = charset
        self.encoding = encoding.upper()
        # Multi-octet characters must not be split across adjacent words
        # (RFC 2047, section 5), which can only be guaranteed for UTF-8.
        self.split_words = charset.upper() == "UTF-8"

    def __repr__(self) -> str:
        return f"HeaderEncoder(charset={self.charset!r}, encoding={self.encoding!r})"

    def encode_header(self, s: str) -> str:
        """Return ``s`` unchanged or encoded when it contains non-ASCII text."""
        if not needs_encoding(s):
            return s
        return self.encode_word(s)

    def encode_word(self, s: str) -> str:
        """Encode ``s`` into one or more folded encoded-words."""
        buf: list[str] = []
        overhead = self._open_word(buf)
        if self.encoding == B:
            self._encode_b(buf, s, overhead)
        else:
            self._encode_q(buf, s, overhead)
        self._close_word(buf)
        return "".join(buf)

    def _encode_b(self, buf: list[str], s: str, overhead: int) -> None:
        raw = s.encode("utf-8")
        max_len = MAX_ENCODED_WORD_LEN - overhead - 2
        if not self.split_words or _b64_len(len(raw)) <= max_len:
            buf.append(base64.b64encode(raw).decode("ascii"))
            return

        pending = bytearray()
        for char in s:
            chunk = char.encode("utf-8")
            if pending and _b64_len(len(pending) + len(chunk)) > max_len:
                buf.append(base64.b64encode(bytes(pending)).decode("ascii"))
                self._split_word(buf)
                pending.clear()
            pending += chunk
        buf.append(base64.b64encode(bytes(pending)).decode("ascii"))

    def _encode_q(self, buf: list[str], s: str, overhead: int) -> None:
        if not self.split_words:
            _write_q(buf, s.encode("utf-8"))
            return

        n = overhead
        for char in s:
            chunk = char.encode("utf-8")
            if chunk == b" " or (len(chunk) == 1 and _is_q_safe(chunk[0])):
                cost = 1
            else:
                cost = 3 * len(chunk)
            # Leave room for the closing "?=".
            if n + cost > MAX_ENCODED_WORD_LEN - 2:
                n = self._split_word(buf)
            _write_q(buf, chunk)
            n += cost

    def _open_word(self, buf: list[str]) -> int:
        buf.append(f"=?{self.charset}?{self.encoding}?")
        return 4 + len(self.charset) + len(self.encoding)

    def _close_word(self, buf: list[str]) -> None:
        buf.append("?=")

    def _split_word(self, buf: list[str]) -> int:
        self._close_word(buf)
        buf.append("\r\n ")
        return self._open_word(buf)


STD_HEADER_ENCODER = HeaderEncoder("UTF-8", Q)
"""RFC 2047 encoder for UTF-8 strings using the Q encoding."""


def encode_header(s: str) -> str:
    """Encode ``s`` with :data:`STD_HEADER_ENCODER`."""
    return STD_HEADER_ENCODER.encode_header(s)


def q_decode(s: str) -> bytes:
    """Decode the payload of a Q encoded-word (``_`` stands for a space)."""
    dec = bytearray()
    raw = s.encode("utf-8")
    i = 0
    while i < len(raw):
        c = raw[i]
        if c == 0x5F:
            dec.append(0x20)
        elif c == 0x3D:
            if i + 2 >= len(raw):
                raise UnexpectedEnd(
                    "quotedprintable: unexpected end of Q encoded string", offset=i, data=raw[i:]
                )
            hi = HEX_VALUES.get(raw[i + 1])
            lo = HEX_VALUES.get(raw[i + 2])
            if hi is None or lo is None:
                raise MalformedInput(
                    f"quotedprintable: invalid hex bytes {raw[i + 1:i + 3]!r} in Q encoded string",
                    offset=i,
                    data=raw[i:i + 3],
                )
            dec.append(hi << 4 | lo)
            i += 2
        elif is_vchar(c) or is_wsp(c) or is_newline(c):
            dec.append(c)
        else:
            raise MalformedInput(
                f"quotedprintable: invalid unescaped byte 0x{c:02x} in Q encoded string",
                offset=i,
                data=bytes((c,)),
            )
        i += 1
    return bytes(dec)


def decode_word(word: re.Match[str]) -> tuple[bytes, str]:
    """Decode a matched encoded-word into its payload bytes and charset.

    Raises:
        binascii.Error: If a B payload is not valid base64.
        QuotedPrintableError: If a Q payload is not valid.
    """
    charset, enc, payload = word.group(1), word.group(2), word.group(3)
    if enc.upper() == B:
        return base64.b64decode(payload, validate=True), charset
    return q_decode(payload), charset


def _to_text(raw: bytes) -> str:
    # Same byte mapping as the encoder: the charset is only a label.
    return raw.decode("utf-8", "surrogateescape")


def decode_header(header: str) -> tuple[str, str]:
    """Decode every encoded-word in a header value.

    Text outside encoded-words is copied literally; whitespace separating
    two adjacent encoded-words is dropped. A token shaped like an
    encoded-word whose payload does not decode is kept verbatim.

    Args:
        header: The raw header value.

    Returns:
        ``(text, charset)``, with ``charset`` empty when the value held no
        encoded-word.

    Raises:
        CharsetConflict: If encoded-words use different charsets.
    """
    pieces: list[str] = []
    run = bytearray()
    charset = ""
    pos = 0
    last_word_end = -1

    for word in ENCODED_WORD.finditer(header):
        try:
            decoded, word_charset = decode_word(word)
        except ValueError as exc:
            logger.debug("Keeping undecodable encoded-word %r: %s", word.group(0), exc)
            continue

        if not charset:
            charset = word_charset
        elif charset.upper() != word_charset.upper():
            raise CharsetConflict(charset, word_charset)

        gap = header[pos:word.start()]
        adjacent = pos == last_word_end and not gap.strip(" \t\r\n")
        if gap and not adjacent:
            pieces.append(_to_text(bytes(run)))
            run.clear()
            pieces.append(gap)
        run += decoded
        pos = last_word_end = word.end()

    if run:
        pieces.append(_to_text(bytes(run)))
    pieces.append(header[pos:])
    return "".join(pieces), charset


__all__ = [
    "B",
    "ENCODED_WORD",
    "HeaderEncoder",
    "MAX_ENCODED_WORD_LEN",
    "Q",
    "STD_HEADER_ENCODER",
    "decode_header",
    "decode_word",
    "encode_header",
    "needs_encoding",
    "q_decode",
]
