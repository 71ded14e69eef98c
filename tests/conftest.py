"""Pytest configuration and shared fixtures."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from jinja_view_driver.config import Settings
from jinja_view_driver.core.app_factory import create_app
from jinja_view_driver.views.driver import JinjaViewDriver
from jinja_view_driver.views.matchers import suffix_matcher
from jinja_view_driver.views.response import ResponseSink
from jinja_view_driver.views.sources import FileTemplateSource

RESOURCE_ROOT = "jinja_view_driver/templates"


@pytest.fixture
def template_dir(tmp_path):
    """Template directory with a few views."""
    root = tmp_path / "templates"
    root.mkdir()
    (root / "hello.tmpl").write_text("Hello, {{ name }}!", encoding="utf-8")
    (root / "page.html").write_text("<p>{{ title }}</p>", encoding="utf-8")
    (root / "undefined.tmpl").write_text("Hello, {{ nobody.name }}!", encoding="utf-8")
    (root / "broken.tmpl").write_text("{% if %}", encoding="utf-8")
    (root / "partials").mkdir()
    (root / "partials" / "item.tmpl").write_text("- {{ item }}", encoding="utf-8")
    return root


@pytest.fixture
def file_source(template_dir):
    """File-rooted template source over template_dir."""
    return FileTemplateSource(template_dir)


@pytest.fixture
def driver(file_source):
    """Driver accepting .tmpl and .html views from template_dir."""
    return JinjaViewDriver.from_source(file_source, accept=suffix_matcher(".tmpl", ".html"))


@pytest.fixture
def sink():
    """Fresh response sink."""
    return ResponseSink()


@pytest.fixture
def mock_request():
    """Request whose application registers a MIME type for .tmpl views."""
    request = MagicMock()
    request.app.state.mime_types = {".tmpl": "text/plain"}
    return request


@pytest.fixture
def test_settings(template_dir):
    """Settings with a filesystem template directory and the packaged templates."""
    return Settings(
        api_host="127.0.0.1",
        api_port=8000,
        template_dir=template_dir,
        resource_root=RESOURCE_ROOT,
        view_suffixes=[".html", ".txt", ".tmpl"],
        mime_types={".tmpl": "text/plain"},
    )


@pytest.fixture
def test_client(test_settings):
    """FastAPI test client with lifespan context."""
    with TestClient(create_app(test_settings)) as client:
        yield client
