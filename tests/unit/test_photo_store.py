"""Unit tests for civicwatch.services.photo_store."""

from __future__ import annotations

import os

import pytest

from civicwatch.core.exceptions import PhotoStorageError
from civicwatch.services.photo_store import LocalPhotoStore


class TestLocalPhotoStore:
    def test_save_and_read(self, photo_store):
        path, url = photo_store.save(b"png-bytes", "IMG_001.PNG")

        assert path.endswith(".png")
        assert url == f"/uploads/{os.path.basename(path)}"
        assert photo_store.read(path) == b"png-bytes"
        assert photo_store.mime_type(path) == "image/png"

    def test_missing_extension_defaults_to_jpg(self, photo_store):
        path, _ = photo_store.save(b"bytes", "")
        assert path.endswith(".jpg")

    def test_oversized_upload_rejected(self, tmp_path):
        store = LocalPhotoStore(str(tmp_path), max_bytes=4)
        with pytest.raises(PhotoStorageError):
            store.save(b"12345", "a.jpg")

    def test_read_missing_file(self, photo_store):
        with pytest.raises(PhotoStorageError):
            photo_store.read("/does/not/exist.jpg")

    def test_delete_removes_file(self, photo_store):
        path, _ = photo_store.save(b"jpeg", "a.jpg")

        photo_store.delete(path)

        assert not os.path.exists(path)

    def test_delete_missing_file_is_quiet(self, photo_store):
        photo_store.delete("/does/not/exist.jpg")
