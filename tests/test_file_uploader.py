from unittest.mock import patch

import pytest

from app.core.exceptions import StoreFailure
from app.tools.file_uploader import CloudinaryArtifactStore, StoredArtifact


@pytest.fixture
def artifact_store():
    with patch("app.tools.file_uploader.configure_cloudinary"):
        yield CloudinaryArtifactStore()


def test_store_uploads_raw_resource(artifact_store):
    result = {"secure_url": "https://res.cloudinary.com/x/raw/upload/v1/r.pdf", "public_id": "folder/r.pdf", "bytes": 2048}
    with patch("cloudinary.uploader.upload", return_value=result) as upload:
        stored = artifact_store.store(b"%PDF-1.7", "lifemate/resumes/js-1", "r.pdf")

    upload.assert_called_once_with(
        b"%PDF-1.7",
        folder="lifemate/resumes/js-1",
        public_id="r.pdf",
        resource_type="raw",
        overwrite=True,
    )
    assert stored == StoredArtifact(url=result["secure_url"], storageId="folder/r.pdf", byteSize=2048)


def test_store_falls_back_to_payload_size(artifact_store):
    result = {"secure_url": "https://res.cloudinary.com/x/r.pdf", "public_id": "r.pdf"}
    with patch("cloudinary.uploader.upload", return_value=result):
        stored = artifact_store.store(b"12345", "f", "r.pdf")

    assert stored.byteSize == 5


def test_store_errors_become_store_failure(artifact_store):
    with patch("cloudinary.uploader.upload", side_effect=RuntimeError("network down")):
        with pytest.raises(StoreFailure, match="network down"):
            artifact_store.store(b"x", "f", "r.pdf")


def test_store_without_url_is_a_failure(artifact_store):
    with patch("cloudinary.uploader.upload", return_value={"public_id": "r.pdf"}):
        with pytest.raises(StoreFailure):
            artifact_store.store(b"x", "f", "r.pdf")


@pytest.mark.parametrize("outcome, expected", [("ok", True), ("not found", False)])
def test_delete_outcomes(artifact_store, outcome, expected):
    with patch("cloudinary.uploader.destroy", return_value={"result": outcome}) as destroy:
        assert artifact_store.delete("folder/r.pdf") is expected

    destroy.assert_called_once_with("folder/r.pdf", resource_type="raw")


def test_delete_unexpected_result_raises(artifact_store):
    with patch("cloudinary.uploader.destroy", return_value={"result": "error"}):
        with pytest.raises(StoreFailure):
            artifact_store.delete("folder/r.pdf")


def test_delete_errors_become_store_failure(artifact_store):
    with patch("cloudinary.uploader.destroy", side_effect=ConnectionError("reset")):
        with pytest.raises(StoreFailure):
            artifact_store.delete("folder/r.pdf")


def test_configured_once():
    with patch("app.tools.file_uploader.configure_cloudinary") as configure, patch(
        "cloudinary.uploader.destroy", return_value={"result": "ok"}
    ):
        store = CloudinaryArtifactStore()
        store.delete("a")
        store.delete("b")

    configure.assert_called_once_with()


def test_configuration_errors_become_store_failure():
    with patch("app.tools.file_uploader.configure_cloudinary", side_effect=ValueError("bad cloud name")):
        store = CloudinaryArtifactStore()
        with pytest.raises(StoreFailure, match="bad cloud name"):
            store.delete("folder/r.pdf")
        with pytest.raises(StoreFailure, match="bad cloud name"):
            store.store(b"x", "f", "r.pdf")
