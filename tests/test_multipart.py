import io
import re

import pytest

from mail_composer.multipart import MultipartWriter, format_header, make_boundary


def test_make_boundary_is_random_hex():
    first, second = make_boundary(), make_boundary()
    assert re.fullmatch(r"[0-9a-f]{60}", first)
    assert first != second


def test_content_type():
    assert MultipartWriter(io.BytesIO(), "b").content_type("mixed") == "multipart/mixed; boundary=b"


def test_default_boundary_is_generated():
    assert len(MultipartWriter(io.BytesIO()).boundary) == 60


def test_format_header_keeps_order_and_repeats_fields():
    assert format_header({"B": ["1", "2"], "A": ["3"]}) == b"B: 1\r\nB: 2\r\nA: 3\r\n"


def test_parts_layout():
    buf = io.BytesIO()
    w = MultipartWriter(buf, "b")
    w.create_part({"A": ["1"]}).write(b"x")
    w.create_part({"B": ["2"]}).write(b"y")
    w.close()
    w.close()
    assert buf.getvalue() == (
        b"--b\r\nA: 1\r\n\r\nx"
        b"\r\n--b\r\nB: 2\r\n\r\ny"
        b"\r\n--b--\r\n"
    )


def test_create_part_after_close():
    w = MultipartWriter(io.BytesIO(), "b")
    w.close()
    with pytest.raises(ValueError):
        w.create_part({})
