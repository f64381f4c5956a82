from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from snapcook.app.api.deps import get_browser, get_upload_storage
from snapcook.app.core.config import get_settings
from snapcook.app.main import create_app
from snapcook.app.services import llm_client
from snapcook.app.services.browser.base import BrowserCapability, BrowserSession, NavigationPolicy
from snapcook.app.services.storage.local import LocalUploadStorage


class FakeSession(BrowserSession):
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser

    async def read_meta(self, selector: str) -> Optional[str]:
        self.browser.selectors.append(selector)
        if self.browser.read_error is not None:
            raise self.browser.read_error
        return self.browser.meta.get(selector)

    async def close(self) -> None:
        self.browser.closed += 1


class FakeBrowser(BrowserCapability):
    """Browser capability double that records every session it opens and closes."""

    def __init__(self, meta: Optional[Dict[str, str]] = None, read_error: Optional[Exception] = None):
        self.meta = meta or {}
        self.read_error = read_error
        self.opened = 0
        self.closed = 0
        self.urls: List[str] = []
        self.policies: List[NavigationPolicy] = []
        self.selectors: List[str] = []

    async def open(self, url: str, policy: NavigationPolicy) -> BrowserSession:
        self.opened += 1
        self.urls.append(url)
        self.policies.append(policy)
        return FakeSession(self)


class FakeModels:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    async def generate_content(self, *, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return SimpleNamespace(text=reply)


class FakeGenaiClient:
    def __init__(self, *replies):
        self.models = FakeModels(replies)
        self.aio = SimpleNamespace(models=self.models)


@pytest.fixture(autouse=True)
def settings(monkeypatch, tmp_path):
    monkeypatch.setenv("AZURE_VISION_ENDPOINT", "https://ocr.test/")
    monkeypatch.setenv("AZURE_VISION_KEY", "azure-test-key")
    monkeypatch.setenv("GEMINI_API_KEY", "gemini-test-key")
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setenv("STRUCTURING_RETRY_BACKOFF_SECONDS", "0")
    get_settings.cache_clear()
    llm_client.get_genai_client.cache_clear()
    yield get_settings()
    get_settings.cache_clear()
    llm_client.get_genai_client.cache_clear()


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture
def fake_browser():
    return FakeBrowser()


@pytest.fixture
def app(upload_dir, fake_browser):
    app = create_app()

    def override_storage():
        return LocalUploadStorage(upload_dir)

    app.dependency_overrides[get_upload_storage] = override_storage
    app.dependency_overrides[get_browser] = lambda: fake_browser
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def genai_client():
    return FakeGenaiClient
