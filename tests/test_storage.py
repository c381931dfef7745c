import hashlib
import io
from pathlib import Path

import pytest

from intake.storage.blob_store import LocalBlobStore
from intake.storage.files import MAX_SUFFIX_CHARS, sanitize_filename, shorten_filename, storage_key


def test_sanitization():
    assert sanitize_filename("foo bar.txt") == "foo_bar.txt"
    assert sanitize_filename("../foo.txt") == ".._foo.txt"
    assert sanitize_filename("foo/bar") == "foo_bar"
    assert sanitize_filename("") == "upload"


def test_long_names_are_shortened_keeping_extension():
    assert shorten_filename("a" * 300 + ".png") == "a" * (MAX_SUFFIX_CHARS - 4) + ".png"
    assert shorten_filename("b" * 300) == "b" * MAX_SUFFIX_CHARS
    assert shorten_filename("short.pdf") == "short.pdf"


def test_storage_key_fits_filesystem_limit():
    key = storage_key("a" * 300 + ".png")
    assert len(key.encode()) < 255
    assert key.endswith(".png")


def test_long_filename_is_writable(tmp_path):
    stored = LocalBlobStore(tmp_path).write("x" * 300 + ".pdf", io.BytesIO(b"%PDF"))

    assert stored.original_name == "x" * 300 + ".pdf"
    assert Path(stored.storage_path).read_bytes() == b"%PDF"


def test_storage_keys_never_collide_and_never_nest():
    keys = {storage_key("../../photo.png") for _ in range(50)}
    assert len(keys) == 50
    for key in keys:
        assert "/" not in key
        assert key.endswith("_.._.._photo.png")


def test_write_creates_base_dir_and_reports_metadata(tmp_path):
    store = LocalBlobStore(tmp_path / "nested" / "uploads")

    stored = store.write("scan.pdf", io.BytesIO(b"hello world"))

    assert store.base_dir.is_dir()
    assert stored.original_name == "scan.pdf"
    assert stored.size_bytes == 11
    assert stored.content_hash == "b94d27b9934d3e08a52e52d7da7dabfac484efe37a5380ee9088f7ace2efcde9"
    assert Path(stored.storage_path).read_bytes() == b"hello world"


def test_same_name_twice_keeps_both_files(tmp_path):
    store = LocalBlobStore(tmp_path)

    first = store.write("a.png", io.BytesIO(b"first"))
    second = store.write("a.png", io.BytesIO(b"second"))

    assert first.storage_path != second.storage_path
    assert len(list(tmp_path.iterdir())) == 2


def test_traversal_name_stays_inside_base_dir(tmp_path):
    base = tmp_path / "uploads"
    store = LocalBlobStore(base)

    stored = store.write("../../outside.txt", io.BytesIO(b"x"))

    assert Path(stored.storage_path).parent == base
    assert list(tmp_path.iterdir()) == [base]


def test_large_stream_is_copied_in_chunks(tmp_path):
    payload = bytes(range(256)) * 10_000   # > one chunk
    stored = LocalBlobStore(tmp_path).write("big.bin", io.BytesIO(payload))

    assert stored.size_bytes == len(payload)
    assert stored.content_hash == hashlib.sha256(payload).hexdigest()


def test_unwritable_base_dir_raises_oserror(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("occupied")

    with pytest.raises(OSError):
        LocalBlobStore(blocker).write("a.png", io.BytesIO(b"x"))
