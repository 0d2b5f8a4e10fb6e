import base64
import io
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from api.app import create_app
from image_converter import core
from image_converter.config import AppConfig


@pytest.fixture
def client(config: AppConfig) -> TestClient:
    return TestClient(create_app(config))


def test_health(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_convert_batch(client: TestClient, make_image, config: AppConfig) -> None:
    files = [
        ("files", ("a.png", make_image("PNG"), "image/png")),
        ("files", ("b.png", b"not an image", "image/png")),
    ]
    response = client.post("/api/convert", files=files, data={"format": "jpg", "quality": "70"})
    assert response.status_code == 200
    body = response.json()
    assert body["processedCount"] == 1
    assert body["failedCount"] == 1
    assert body["failed"][0]["name"] == "b.png"
    entry = body["files"][0]
    assert entry["name"] == "a.jpg"
    assert entry["data"].startswith("data:image/jpeg;base64,")
    assert entry["format"] == "jpg"
    decoded = base64.b64decode(entry["data"].split(",", 1)[1])
    assert entry["size"] == len(decoded)

    log_lines = config.runtime.log_file.read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in log_lines]
    assert [record["status"] for record in records] == ["success", "failure"]
    assert records[0]["operation"] == "convert"


def test_convert_without_files(client: TestClient) -> None:
    response = client.post("/api/convert", data={"format": "png"})
    assert response.status_code == 400
    assert response.json() == {"error": "No files provided", "code": "NO_FILES"}


def test_convert_all_failed(client: TestClient) -> None:
    files = [("files", ("a.png", b"junk", "image/png"))]
    response = client.post("/api/convert", files=files, data={"format": "png"})
    assert response.status_code == 400
    assert response.json()["code"] == "NO_ITEMS_CONVERTED"


def test_capabilities(client: TestClient) -> None:
    body = client.get("/api/convert").json()
    assert body["maxFiles"] == 20
    assert body["maxFileSize"] == "50MB"
    assert "png" in body["supportedFormats"]
    assert client.get("/api/pdf-to-img").json()["maxPages"] == 50
    assert "a4" in client.get("/api/img-to-pdf").json()["features"]["pageSizes"]


def test_image_to_pdf(client: TestClient, make_image) -> None:
    files = [("files", (f"p{i}.png", make_image("PNG"), "image/png")) for i in range(2)]
    response = client.post("/api/img-to-pdf", files=files, data={"pageSize": "letter"})
    assert response.status_code == 200
    entry = response.json()["files"][0]
    assert entry["pageCount"] == 2
    assert entry["processedCount"] == 2
    assert entry["data"].startswith("data:application/pdf;base64,")


def test_pdf_to_image(client: TestClient, make_pdf) -> None:
    files = {"file": ("doc.pdf", make_pdf(2), "application/pdf")}
    response = client.post("/api/pdf-to-img", files=files, data={"format": "png", "dpi": "72"})
    assert response.status_code == 200
    body = response.json()
    assert body["totalPages"] == 2
    assert body["convertedPages"] == 2
    assert body["originalName"] == "doc.pdf"
    assert [entry["page"] for entry in body["files"]] == [1, 2]


def test_binary_routes(client: TestClient, make_image) -> None:
    upload = {"file": ("pic.png", make_image("PNG", size=(80, 60)), "image/png")}
    response = client.post("/api/rotate", files=upload, data={"angle": "90"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/jpeg"
    assert response.headers["content-disposition"] == 'attachment; filename="rotated-image.jpg"'
    with Image.open(io.BytesIO(response.content)) as image:
        assert image.size == (60, 80)

    response = client.post("/api/ico", files=upload, data={"sizes": "[16, 32]"})
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/x-icon"

    response = client.post("/api/crop", files=upload, data={"width": "500", "height": "10"})
    assert response.status_code == 400
    assert response.json()["code"] == "NO_ITEMS_CONVERTED"
    assert "exceeds image bounds" in response.json()["error"]


def test_unexpected_error_is_generic(config: AppConfig, make_image, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken(operation):
        def transform(item, options):
            raise RuntimeError("secret details")

        return transform

    monkeypatch.setattr(core, "get_transform", broken)
    client = TestClient(create_app(config), raise_server_exceptions=False)
    files = [("files", ("a.png", make_image("PNG"), "image/png"))]
    response = client.post("/api/convert", files=files, data={"format": "png"})
    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}


def test_run_log_can_be_disabled(tmp_path: Path, config: AppConfig, make_image) -> None:
    config.runtime.log_file = None
    client = TestClient(create_app(config))
    files = [("files", ("a.png", make_image("PNG"), "image/png"))]
    assert client.post("/api/convert", files=files, data={"format": "png"}).status_code == 200
    assert not (tmp_path / "logs").exists()
