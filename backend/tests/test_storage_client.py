import pytest

from cuaderno.clients.storage_client import ObjectStorage, StorageError, safe_filename


def test_upload_download_remove(storage):
    key = storage.upload("/7/3/notes.txt", b"hello")

    assert key == "7/3/notes.txt"
    assert storage.download("7/3/notes.txt") == b"hello"
    assert storage.remove(key) is True
    assert storage.remove(key) is False
    with pytest.raises(StorageError):
        storage.download(key)


def test_upload_refuses_to_overwrite_unless_upsert(storage):
    storage.upload("a.txt", b"one")

    with pytest.raises(StorageError):
        storage.upload("a.txt", b"two")

    storage.upload("a.txt", b"two", upsert=True)
    assert storage.download("a.txt") == b"two"


@pytest.mark.parametrize("path", ["", "/", "../etc/passwd", "a/../../b"])
def test_invalid_paths_are_rejected(path):
    with pytest.raises(StorageError):
        ObjectStorage.normalize(path)


def test_signed_url_requires_existing_object(storage):
    with pytest.raises(StorageError):
        storage.create_signed_url("missing.pdf")


def test_signed_token_verifies_only_for_its_path(storage):
    storage.upload("x/file.pdf", b"%PDF")
    token = storage.create_signed_url("x/file.pdf", 60).split("token=", 1)[1]

    assert storage.verify_token(token, "x/file.pdf")
    assert storage.verify_token(token, "/x/./file.pdf")
    assert not storage.verify_token(token, "x/other.pdf")
    assert not storage.verify_token("garbage", "x/file.pdf")


def test_expired_token_is_rejected(storage):
    storage.upload("x/file.pdf", b"%PDF")
    token = storage.create_signed_url("x/file.pdf", -10).split("token=", 1)[1]

    assert not storage.verify_token(token, "x/file.pdf")


@pytest.mark.parametrize(
    "name, expected",
    [
        ("week 1 notes.pdf", "week_1_notes.pdf"),
        ("C:\\Users\\ana\\slides.pptx", "slides.pptx"),
        ("../../secret", "secret"),
        ("...", "file"),
    ],
)
def test_safe_filename(name, expected):
    assert safe_filename(name) == expected
