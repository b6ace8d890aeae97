import pytest
from fastapi.testclient import TestClient

from config import Config
from ogp.fonts import FontSet
from ogp.models import OgpImageRequest


@pytest.fixture
def fonts() -> FontSet:
    return FontSet(path=None, available=False)


@pytest.fixture
def images_dir(tmp_path, monkeypatch):
    directory = tmp_path / "generated_ogp_images"
    directory.mkdir()
    monkeypatch.setattr(Config, "GENERATED_IMAGES_DIR", str(directory))
    return directory


@pytest.fixture
def make_client(images_dir, monkeypatch):
    def _make(variant: str = "both") -> TestClient:
        from app import create_app

        monkeypatch.setattr(Config, "OGP_ROUTE_VARIANT", variant)
        monkeypatch.setattr(Config, "OGP_FONT_PATH", "/nonexistent/NotoSansJP-Regular.ttf")
        return TestClient(create_app())

    return _make


@pytest.fixture
def client(make_client) -> TestClient:
    return make_client()


def make_request(**overrides) -> OgpImageRequest:
    fields = {
        "title": "Test",
        "description": "d",
        "content": "line one\nline two",
        "backgroundColor": "#ffffff",
        "contentType": "file",
        "directoryContent": None,
    }
    fields.update(overrides)
    return OgpImageRequest(**fields)
