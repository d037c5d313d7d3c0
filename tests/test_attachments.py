import base64

import pytest

from mail_composer.attachments import AttachmentManager, Base64Fetcher, FilesystemFetcher


def test_inline_base64_source():
    mgr = AttachmentManager()
    assert mgr.fetch("base64:" + base64.b64encode(b"hi").decode()) == b"hi"


def test_manager_is_callable(tmp_path):
    path = tmp_path / "a.txt"
    path.write_bytes(b"data")
    assert AttachmentManager()(str(path)) == b"data"
    assert AttachmentManager().fetch(path) == b"data"


def test_empty_source():
    with pytest.raises(ValueError):
        AttachmentManager().fetch("")


def test_base64_fetcher_adds_missing_padding():
    assert Base64Fetcher().fetch("aGk") == b"hi"


@pytest.mark.parametrize("content", ["", "***"])
def test_base64_fetcher_rejects_invalid_content(content):
    with pytest.raises(ValueError):
        Base64Fetcher().fetch(content)


def test_relative_path_uses_base_dir(tmp_path):
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "r.pdf").write_bytes(b"%PDF")
    mgr = AttachmentManager(base_dir=str(tmp_path))
    assert mgr.fetch("docs/r.pdf") == b"%PDF"


def test_path_traversal_is_rejected(tmp_path):
    base = tmp_path / "base"
    base.mkdir()
    (tmp_path / "secret.txt").write_bytes(b"secret")
    fetcher = FilesystemFetcher(base_dir=str(base))
    with pytest.raises(ValueError, match="traversal"):
        fetcher.fetch("../secret.txt")
    with pytest.raises(ValueError, match="traversal"):
        fetcher.fetch(str(tmp_path / "secret.txt"))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FilesystemFetcher(base_dir=str(tmp_path)).fetch("nope.txt")


def test_directory_is_not_a_file(tmp_path):
    (tmp_path / "dir").mkdir()
    with pytest.raises(ValueError, match="regular file"):
        FilesystemFetcher(base_dir=str(tmp_path)).fetch("dir")


def test_base_dir_is_resolved(tmp_path):
    assert FilesystemFetcher(base_dir=str(tmp_path)).base_dir == tmp_path.resolve()
    assert FilesystemFetcher().base_dir is None


@pytest.mark.parametrize(
    "filename, mime",
    [
        ("report.pdf", "application/pdf"),
        ("notes.txt", "text/plain"),
        ("archive.zip", "application/zip"),
        ("noext", "application/octet-stream"),
        ("weird.unknownext", "application/octet-stream"),
    ],
)
def test_guess_mime(filename, mime):
    assert AttachmentManager.guess_mime(filename) == mime
