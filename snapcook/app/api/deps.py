from snapcook.app.core.config import get_settings
from snapcook.app.services.browser.base import BrowserCapability
from snapcook.app.services.page_metadata import default_browser
from snapcook.app.services.storage.base import UploadStorage
from snapcook.app.services.storage.local import LocalUploadStorage


def get_upload_storage() -> UploadStorage:
    settings = get_settings()
    return LocalUploadStorage(settings.upload_dir)


def get_browser() -> BrowserCapability:
    return default_browser()
