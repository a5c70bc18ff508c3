import pytest

from logistik.core.config import settings
from logistik.services.operations_service import JobOrderService
from logistik.services.storage_service import (
    StorageService, object_path, display_name, PLACEHOLDER_NAME
)


@pytest.fixture
def storage_root(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_ROOT", str(tmp_path))
    return tmp_path


def test_object_path_layout():
    assert object_path(12, "bl.pdf", "do", now_ms=1700000000000) == "12/do/1700000000000_bl.pdf"
    assert object_path(12, "bl.pdf", now_ms=5) == "12/5_bl.pdf"
    # Directory parts of the uploaded name are dropped
    assert object_path(12, "../../etc/passwd", "do", now_ms=5) == "12/do/5_passwd"

    with pytest.raises(ValueError):
        object_path(12, "bl.pdf", "rahasia")
    with pytest.raises(ValueError):
        object_path(12, "   ")


def test_display_name():
    assert display_name("1700000000000_bl.pdf") == "bl.pdf"
    assert display_name("bl.pdf") == "bl.pdf"


def test_upload_list_and_delete(tmp_path):
    storage = StorageService(root=str(tmp_path), bucket="bucket")
    key = storage.upload(7, "invoice.pdf", b"%PDF-1.4", category="penumpukan")
    (tmp_path / "bucket" / "7" / "penumpukan" / PLACEHOLDER_NAME).write_bytes(b"")

    files = storage.list_files(7, "penumpukan")
    assert [f["path"] for f in files] == [key]
    assert files[0]["display_name"] == "invoice.pdf"
    assert files[0]["size"] == 8

    # The legacy folder does not list category sub-folders
    assert storage.list_files(7) == []
    assert storage.list_files(99, "do") == []

    assert storage.delete(key) is True
    assert storage.delete(key) is False
    assert storage.open(key) is None


def test_keys_cannot_escape_the_bucket(tmp_path):
    storage = StorageService(root=str(tmp_path), bucket="bucket")
    with pytest.raises(ValueError, match="Path tidak valid"):
        storage.open("../outside.txt")


def test_download_tokens():
    token = StorageService.create_download_token("3/do/1_a.pdf")
    assert StorageService.verify_download_token(token) == "3/do/1_a.pdf"

    expired = StorageService.create_download_token("3/do/1_a.pdf", expires_in=-10)
    assert StorageService.verify_download_token(expired) is None
    assert StorageService.verify_download_token("not-a-token") is None


def test_session_tokens_are_not_download_tokens():
    from logistik.core.security import create_access_token

    token = create_access_token({"sub": "1"})
    assert StorageService.verify_download_token(token) is None


def test_file_endpoints(client, staff_headers, db, storage_root):
    job_order = JobOrderService(db).create({"job_order_number": "JO-FILE"})
    db.commit()
    base = f"/api/v1/job-orders/{job_order.id}/files"

    categories = client.get("/api/v1/job-orders/files/categories", headers=staff_headers).json()
    assert categories[0] == {"key": "penumpukan", "label": "Invoice Penumpukan"}

    uploaded = client.post(base, headers=staff_headers, data={"category": "do"},
                           files={"file": ("do.pdf", b"%PDF-1.4 test", "application/pdf")})
    assert uploaded.status_code == 200
    path = uploaded.json()["path"]
    assert path.startswith(f"{job_order.id}/do/")
    assert uploaded.json()["display_name"] == "do.pdf"

    listing = client.get(base, params={"category": "do"}, headers=staff_headers).json()
    assert [f["path"] for f in listing] == [path]

    bad_category = client.get(base, params={"category": "lainnya"}, headers=staff_headers)
    assert bad_category.status_code == 400

    signed = client.get(f"{base}/signed-url", params={"path": path}, headers=staff_headers).json()
    assert signed["signed_url"] == f"/api/v1/files/download?token={signed['token']}"

    download = client.get(signed["signed_url"])
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 test"

    assert client.get("/api/v1/files/download", params={"token": "palsu"}).status_code == 403

    foreign = client.get(f"{base}/signed-url", params={"path": "999/do/x.pdf"}, headers=staff_headers)
    assert foreign.status_code == 400

    deleted = client.delete(base, params={"path": path}, headers=staff_headers)
    assert deleted.json() == {"message": "File berhasil dihapus"}
    assert client.delete(base, params={"path": path}, headers=staff_headers).status_code == 404


def test_files_of_unknown_job_order(client, staff_headers, storage_root):
    response = client.get("/api/v1/job-orders/404/files", headers=staff_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Job Order tidak ditemukan"


def test_keys_stay_inside_their_job_order(tmp_path):
    storage = StorageService(root=str(tmp_path), bucket="bucket")
    other = storage.upload(2, "x.pdf", b"data", category="do")

    assert storage.open(other, 2) is not None
    with pytest.raises(ValueError, match="Path tidak valid"):
        storage.open(f"1/../{other}", 1)
    with pytest.raises(ValueError, match="Path tidak valid"):
        storage.delete(f"1/../{other}", 1)
    assert storage.open(other) is not None


def test_signed_url_refuses_a_sibling_job_order(client, staff_headers, db, storage_root):
    service = JobOrderService(db)
    first = service.create({"job_order_number": "JO-A"})
    second = service.create({"job_order_number": "JO-B"})
    db.commit()
    key = StorageService().upload(second.id, "x.pdf", b"data", category="do")
    sneaky = f"{first.id}/../{key}"

    base = f"/api/v1/job-orders/{first.id}/files"
    assert client.get(f"{base}/signed-url", params={"path": sneaky}, headers=staff_headers).status_code == 400
    assert client.delete(base, params={"path": sneaky}, headers=staff_headers).status_code == 400
    assert StorageService().open(key) is not None
