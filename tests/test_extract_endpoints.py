import pytest

from snapcook.app.core.errors import OcrError, StructuringError
from snapcook.app.schemas.recipe import StructuredRecipe
from snapcook.app.services import llm_client, ocr_service_client

OCR_TEXT = "2 cups flour\n1 egg\nMix and bake at 350F for 20 min"

CAKE = StructuredRecipe(
    title="Simple Cake",
    ingredients=["2 cups flour", "1 egg"],
    instructions=["Mix the flour and egg.", "Bake at 350F for 20 minutes."],
    cooking_time="20 min",
)


@pytest.fixture
def structured(monkeypatch):
    calls = []

    async def fake_structure(text, client=None):
        calls.append(text)
        return CAKE.model_copy(deep=True)

    monkeypatch.setattr(llm_client, "structure_recipe", fake_structure)
    return calls


@pytest.fixture
def ocr_text(monkeypatch, upload_dir):
    state = {"text": OCR_TEXT, "files_during_ocr": None, "error": None}

    async def fake_extract_text(image_bytes):
        state["files_during_ocr"] = sorted(p.name for p in upload_dir.iterdir())
        state["bytes"] = image_bytes
        if state["error"] is not None:
            raise state["error"]
        return state["text"]

    monkeypatch.setattr(ocr_service_client, "extract_text", fake_extract_text)
    return state


def test_service_status(client):
    response = client.get("/")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert body["message"] == "SnapCook Backend is running!"
    assert body["timestamp"].endswith("Z")
    assert body["environment"] == {"azure_key_set": True, "gemini_key_set": True}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_url_extract_requires_url(client):
    response = client.post("/url-extract", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "URL is required"}


def test_url_extract_without_body(client):
    response = client.post("/url-extract")
    assert response.status_code == 400
    assert response.json()["error"] == "URL is required"


def test_url_extract_unsupported_site(client, fake_browser, structured):
    response = client.post("/url-extract", json={"url": "https://www.seriouseats.com/pancakes"})
    assert response.status_code == 404
    assert response.json() == {"error": "No caption found"}
    assert fake_browser.opened == 0
    assert structured == []


def test_url_extract_instagram(client, fake_browser, structured):
    fake_browser.meta = {
        "meta[property='og:description']": "Simple cake: 2 cups flour, 1 egg",
        "meta[property='og:image']": "https://cdn.instagram.test/cake.jpg",
    }

    response = client.post("/url-extract", json={"url": "https://www.instagram.com/p/C1a2b3c4d5e/"})

    assert response.status_code == 200
    body = response.json()
    assert body["thumbnail"] == "https://cdn.instagram.test/cake.jpg"
    assert body["structured"]["image"] == "https://cdn.instagram.test/cake.jpg"
    assert body["structured"]["title"] == "Simple Cake"
    assert body["structured"]["serving_size"] is None
    assert structured == ["Simple cake: 2 cups flour, 1 egg"]
    assert fake_browser.closed == 1


def test_url_extract_youtube_thumbnail(client, fake_browser, structured):
    fake_browser.meta = {"meta[name='description']": "Simple cake in one bowl"}

    response = client.post("/url-extract", json={"url": "https://youtu.be/dQw4w9WgXcQ"})

    assert response.status_code == 200
    assert response.json()["thumbnail"] == "https://img.youtube.com/vi/dQw4w9WgXcQ/hqdefault.jpg"


def test_url_extract_scrape_failure(client, fake_browser, structured):
    response = client.post("/url-extract", json={"url": "https://www.instagram.com/p/C1a2b3c4d5e/"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Failed to process URL"
    assert "Meta tag not found" in body["detail"]
    assert fake_browser.closed == 1


def test_url_extract_structuring_failure(client, fake_browser, monkeypatch):
    fake_browser.meta = {"meta[name='description']": "Simple cake"}

    async def failing_structure(text, client=None):
        raise StructuringError("Structuring service unavailable", detail="503")

    monkeypatch.setattr(llm_client, "structure_recipe", failing_structure)

    response = client.post("/url-extract", json={"url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to process URL",
        "detail": "Structuring service unavailable: 503",
    }


def test_ocr_requires_file(client):
    response = client.post("/ocr")
    assert response.status_code == 400
    assert response.json() == {"error": "No file received"}


def test_ocr_structures_recognized_text(client, ocr_text, structured, upload_dir):
    response = client.post("/ocr", files={"photo": ("cake.jpg", b"\xff\xd8\xffcake", "image/jpeg")})

    assert response.status_code == 200
    body = response.json()
    assert body["parsed"] == OCR_TEXT
    assert body["structured"]["title"] == "Simple Cake"
    assert body["structured"]["ingredients"] == ["2 cups flour", "1 egg"]
    assert ocr_text["bytes"] == b"\xff\xd8\xffcake"
    assert len(ocr_text["files_during_ocr"]) == 1
    assert ocr_text["files_during_ocr"][0].endswith(".jpg")
    assert list(upload_dir.iterdir()) == []


def test_ocr_blank_image_returns_sentinel(client, ocr_text, structured, upload_dir):
    ocr_text["text"] = ""

    response = client.post("/ocr", files={"photo": ("blank.png", b"png", "image/png")})

    assert response.status_code == 200
    assert response.json() == {"extracted": "⚠️ No text found in image"}
    assert structured == []
    assert list(upload_dir.iterdir()) == []


def test_ocr_failure_removes_upload(client, ocr_text, structured, upload_dir):
    ocr_text["error"] = OcrError("OCR service error", detail="401 - Access denied")

    response = client.post("/ocr", files={"photo": ("cake.jpg", b"img", "image/jpeg")})

    assert response.status_code == 500
    assert response.json() == {
        "error": "OCR processing failed",
        "detail": "OCR service error: 401 - Access denied",
    }
    assert list(upload_dir.iterdir()) == []


def test_structuring_failure_after_ocr_removes_upload(client, ocr_text, upload_dir, monkeypatch):
    async def failing_structure(text, client=None):
        raise StructuringError("Structuring response is not valid JSON")

    monkeypatch.setattr(llm_client, "structure_recipe", failing_structure)

    response = client.post("/ocr", files={"photo": ("cake.jpg", b"img", "image/jpeg")})

    assert response.status_code == 500
    assert response.json()["error"] == "OCR processing failed"
    assert len(ocr_text["files_during_ocr"]) == 1
    assert list(upload_dir.iterdir()) == []
