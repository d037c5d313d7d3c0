import io

import pytest

from mail_composer.errors import MalformedInput, QuotedPrintableError, UnexpectedEnd
from mail_composer.quotedprintable import (
    QuotedPrintableReader,
    QuotedPrintableWriter,
    decode,
    decode_string,
    encode,
    encode_to_string,
    max_decoded_len,
    max_encoded_len,
)


@pytest.mark.parametrize(
    "raw, encoded",
    [
        (b"", b""),
        (b"foo bar", b"foo bar"),
        (b"foo bar ", b"foo bar=20"),
        (b"foo\tbar\t", b"foo\tbar=09"),
        (b"foo \r\nbar", b"foo=20\r\nbar"),
        (b"foo \nbar", b"foo=20\nbar"),
        (b"a \rb", b"a \rb"),
        (b"a \r", b"a=20\r"),
        (b"a=b", b"a=3Db"),
        (b"\x00\x7f\xff", b"=00=7F=FF"),
        ("¡Hola, señor!".encode("utf-8"), b"=C2=A1Hola, se=C3=B1or!"),
    ],
)
def test_encode(raw, encoded):
    assert encode(raw) == encoded


def test_encode_passes_bare_newlines_through():
    assert encode(b"a\rb\nc") == b"a\rb\nc"


def test_encode_to_string():
    assert encode_to_string(b"caf\xc3\xa9") == "caf=C3=A9"


def test_length_bounds():
    assert max_encoded_len(5) == 15
    assert max_decoded_len(5) == 5
    assert len(encode(b"\xff" * 5)) == max_encoded_len(5)


@pytest.mark.parametrize(
    "encoded, raw",
    [
        (b"foo bar=20", b"foo bar "),
        (b"foo=\r\nbar", b"foobar"),
        (b"foo=\nbar", b"foobar"),
        (b"foo   \r\nbar", b"foo\r\nbar"),
        (b"foo\t \nbar", b"foo\nbar"),
        (b"foo=  \r\nbar", b"foobar"),
        (b"=3d=3D", b"=="),
        (b"foo=", b"foo"),
        (b"a\rb", b"a\rb"),
        (b"foo=\r", b"foo"),
        (b"foo \r", b"foo\r"),
        (b"Caf=C3=A9", "Café".encode("utf-8")),
        (b"=C2=A1Hola, se=C3=B1or!", "¡Hola, señor!".encode("utf-8")),
    ],
)
def test_decode(encoded, raw):
    assert decode(encoded) == raw


def test_decode_accepts_ascii_string():
    assert decode("foo=20") == b"foo "
    assert decode_string("caf=C3=A9") == "café".encode("utf-8")


def test_decode_rejects_non_ascii_string():
    with pytest.raises(MalformedInput):
        decode("café")


def test_decode_truncated_escape():
    with pytest.raises(UnexpectedEnd) as exc:
        decode(b"foo=4")
    assert exc.value.offset == 3


def test_decode_escape_cut_by_line_end():
    with pytest.raises(MalformedInput):
        decode(b"foo=4\r\nbar")


def test_decode_invalid_hex():
    with pytest.raises(MalformedInput) as exc:
        decode(b"=ZZ")
    assert exc.value.offset == 0
    assert exc.value.data == b"=ZZ"


def test_decode_invalid_byte_reports_offset_across_lines():
    with pytest.raises(MalformedInput) as exc:
        decode(b"ok\r\na\x00b")
    assert exc.value.offset == 5
    assert exc.value.data == b"\x00"


def test_decode_errors_are_value_errors():
    with pytest.raises(ValueError):
        decode(b"a\x80")


@pytest.mark.parametrize(
    "raw",
    [
        b"plain text",
        b"trailing space \r\nnext line\t",
        b"a \r \n",
        b" \r",
        b"=?_\x00\x01\xfe\xff",
        "¡Hola, señor!\nÀ bientôt ".encode("utf-8"),
    ],
)
def test_decode_inverts_encode(raw):
    assert decode(encode(raw)) == raw


class ShortSink:
    """Sink accepting at most ``limit`` bytes per write."""

    def __init__(self, limit):
        self.limit = limit
        self.data = b""

    def write(self, data):
        accepted = data[:self.limit]
        self.data += accepted
        return len(accepted)


def test_writer_full_write():
    sink = io.BytesIO()
    w = QuotedPrintableWriter(sink)
    assert w.write("¡Hi ".encode("utf-8")) == 5
    assert sink.getvalue() == b"=C2=A1Hi=20"


@pytest.mark.parametrize("limit, consumed", [(0, 0), (2, 0), (3, 1), (4, 1), (6, 2), (7, 3)])
def test_writer_partial_write_counts_whole_units(limit, consumed):
    w = QuotedPrintableWriter(ShortSink(limit))
    assert w.write(b"\xc2\xa1Hi") == consumed


def test_writer_sink_returning_none_counts_as_nothing_written():
    class NoneSink:
        def write(self, data):
            return None

    assert QuotedPrintableWriter(NoneSink()).write(b"abc") == 0


def test_writer_does_not_close_sink():
    sink = io.BytesIO()
    w = QuotedPrintableWriter(sink)
    w.write(b"x")
    w.close()
    assert not sink.closed


def test_reader_decodes_stream():
    source = io.BytesIO(b"foo=\r\nbar=20\r\n=C3=A9=\n")
    reader = QuotedPrintableReader(source)
    assert reader.read() == "foobar \r\né".encode("utf-8")


def test_reader_small_reads():
    reader = QuotedPrintableReader(io.BytesIO(b"abc=3D\r\ndef"))
    chunks = []
    while True:
        chunk = reader.read(2)
        if not chunk:
            break
        chunks.append(chunk)
    assert b"".join(chunks) == b"abc=\r\ndef"


def test_reader_works_with_buffered_reader():
    reader = io.BufferedReader(QuotedPrintableReader(io.BytesIO(b"=41=42\nC")))
    assert reader.read() == b"AB\nC"


def test_reader_error_is_sticky():
    reader = QuotedPrintableReader(io.BytesIO(b"ok\r\n=ZZ\r\nmore\r\n"))
    assert reader.read(4) == b"ok\r\n"
    with pytest.raises(MalformedInput) as exc:
        reader.read(4)
    assert exc.value.offset == 4
    with pytest.raises(QuotedPrintableError):
        reader.read(4)
