"""Unit tests for the Jinja2 view driver."""

from dataclasses import dataclass
from unittest.mock import MagicMock

import pytest
from jinja2 import DictLoader, Environment, TemplateSyntaxError, UndefinedError
from pydantic import BaseModel

from jinja_view_driver.exceptions import (
    ConfigurationException,
    ErrorCode,
    IOTransportException,
    TemplateEvaluationException,
    TemplateResolutionException,
    ViewProcessingException,
)
from jinja_view_driver.protocols import ViewDriver
from jinja_view_driver.views.driver import JinjaViewDriver
from jinja_view_driver.views.matchers import accept_all, suffix_matcher
from jinja_view_driver.views.response import ResponseSink
from jinja_view_driver.views.sources import ResourceTemplateSource


class Greeting(BaseModel):
    name: str


@dataclass
class Order:
    order_id: str


class TmplDriver(JinjaViewDriver):
    """Driver deciding acceptance by overriding the hook."""

    def accept_view_name(self, view_name: str) -> bool:
        return view_name.endswith(".tmpl")


class TestConstruction:
    """Tests for driver construction and configuration."""

    def test_defaults(self, file_source):
        """Test default configuration."""
        driver = JinjaViewDriver.from_source(file_source, accept=accept_all())

        assert driver.mime_type is None
        assert driver.capacity == 4096

    def test_capacity_must_be_positive(self, file_source):
        """Test a capacity below 1 is a configuration error."""
        with pytest.raises(ConfigurationException) as exc_info:
            JinjaViewDriver.from_source(file_source, accept=accept_all(), capacity=0)

        assert exc_info.value.details["capacity"] == 0

    def test_blank_mime_type_rejected(self, file_source):
        """Test a blank MIME type override is a configuration error."""
        with pytest.raises(ConfigurationException):
            JinjaViewDriver.from_source(file_source, accept=accept_all(), mime_type="  ")

    def test_needs_acceptance_rule(self, file_source):
        """Test a driver without predicate or override cannot be built."""
        with pytest.raises(ConfigurationException):
            JinjaViewDriver.from_source(file_source)

    def test_subclass_override_needs_no_predicate(self, file_source):
        """Test overriding accept_view_name replaces the predicate."""
        driver = TmplDriver.from_source(file_source)

        assert driver.accept_view_name("hello.tmpl")
        assert not driver.accept_view_name("page.html")

    def test_override_delegating_without_predicate(self, file_source):
        """Test deferring to the base hook without a predicate is a configuration error."""

        class DelegatingDriver(JinjaViewDriver):
            def accept_view_name(self, view_name: str) -> bool:
                return super().accept_view_name(view_name)

        driver = DelegatingDriver.from_source(file_source)

        with pytest.raises(ConfigurationException):
            driver.accept_view_name("hello.tmpl")

    def test_with_config_returns_new_driver(self, driver):
        """Test with_config leaves the original driver untouched."""
        forced = driver.with_config(mime_type="text/csv", capacity=16)

        assert forced.mime_type == "text/csv"
        assert forced.capacity == 16
        assert forced.environment is driver.environment
        assert driver.mime_type is None
        assert driver.capacity == 4096

    def test_with_config_keeps_forced_mime_type(self, driver, sink):
        """Test omitted options keep the current configuration."""
        forced = driver.with_config(mime_type="application/x-custom")
        resized = forced.with_config(capacity=8)

        assert resized.mime_type == "application/x-custom"
        assert resized.capacity == 8
        assert resized.handle_view(None, sink, {"name": "World"}, "hello.tmpl")
        assert sink.media_type == "application/x-custom"

    def test_with_config_clears_mime_type(self, driver):
        """Test an explicit None goes back to inferring the MIME type."""
        forced = driver.with_config(mime_type="text/csv", capacity=16)
        inferred = forced.with_config(mime_type=None)

        assert inferred.mime_type is None
        assert inferred.capacity == 16

    def test_with_config_validates(self, driver):
        """Test with_config applies the same validation."""
        with pytest.raises(ConfigurationException):
            driver.with_config(capacity=-1)

    def test_wraps_existing_environment(self, sink):
        """Test a driver can use a caller-owned environment."""
        env = Environment(loader=DictLoader({"greet.txt": "Hi {{ name }}"}))
        driver = JinjaViewDriver(env, accept=accept_all())

        assert driver.handle_view(None, sink, {"name": "Ann"}, "greet.txt")
        assert sink.body == b"Hi Ann"
        assert sink.media_type == "text/plain"

    def test_is_a_view_driver(self, driver):
        """Test the driver satisfies the ViewDriver protocol."""
        assert isinstance(driver, ViewDriver)


class TestHandleView:
    """Tests for handle_view."""

    def test_renders_hello_world(self, driver, sink, mock_request):
        """Test rendering a file template with an inferred MIME type."""
        handled = driver.handle_view(mock_request, sink, {"name": "World"}, "hello.tmpl")

        assert handled is True
        assert sink.body == b"Hello, World!"
        assert sink.media_type == "text/plain"

    def test_not_accepted_does_nothing(self):
        """Test a declined view name triggers no lookup and no write."""
        env = MagicMock(spec=Environment)
        driver = JinjaViewDriver(env, accept=suffix_matcher(".html"))
        response = MagicMock(spec=ResponseSink)

        assert driver.handle_view(None, response, {}, "hello.tmpl") is False
        env.get_template.assert_not_called()
        response.send_string_data.assert_not_called()

    @pytest.mark.parametrize("view_name", ["hello.tmpl", "page.html"])
    def test_forced_mime_type(self, driver, sink, mock_request, view_name):
        """Test a forced MIME type wins over the view name's extension."""
        forced = driver.with_config(mime_type="application/x-custom")

        forced.handle_view(mock_request, sink, {"name": "World", "title": "T"}, view_name)

        assert sink.media_type == "application/x-custom"

    def test_mime_type_from_extension(self, driver, sink):
        """Test the MIME type is guessed from the extension without a registry."""
        driver.handle_view(None, sink, {"title": "Home"}, "page.html")

        assert sink.media_type == "text/html"
        assert sink.body == b"<p>Home</p>"

    def test_unknown_extension_uses_default(self, driver, sink):
        """Test unknown extensions fall back to the default MIME type."""
        driver.handle_view(None, sink, {"name": "World"}, "hello.tmpl")

        assert sink.media_type == "application/octet-stream"

    def test_missing_template(self, driver, sink, mock_request):
        """Test a missing template raises and writes nothing."""
        with pytest.raises(TemplateResolutionException) as exc_info:
            driver.handle_view(mock_request, sink, {}, "missing.tmpl")

        assert exc_info.value.code == ErrorCode.TEMPLATE_NOT_FOUND
        assert exc_info.value.status_code == 404
        assert exc_info.value.details == {"view_name": "missing.tmpl"}
        assert not sink.committed

    def test_undefined_reference(self, driver, sink, mock_request):
        """Test undefined references are evaluation errors with the engine cause kept."""
        with pytest.raises(TemplateEvaluationException) as exc_info:
            driver.handle_view(mock_request, sink, {}, "undefined.tmpl")

        assert isinstance(exc_info.value.cause, UndefinedError)
        assert isinstance(exc_info.value.__cause__, UndefinedError)
        assert not sink.committed

    def test_syntax_error(self, driver, sink):
        """Test unparsable templates are evaluation errors."""
        with pytest.raises(TemplateEvaluationException) as exc_info:
            driver.handle_view(None, sink, {}, "broken.tmpl")

        assert isinstance(exc_info.value.cause, TemplateSyntaxError)
        assert not sink.committed

    def test_runtime_error_in_template(self, sink):
        """Test Python errors raised while evaluating are evaluation errors."""
        env = Environment(loader=DictLoader({"div.txt": "{{ 1 // zero }}"}))
        driver = JinjaViewDriver(env, accept=accept_all())

        with pytest.raises(TemplateEvaluationException) as exc_info:
            driver.handle_view(None, sink, {"zero": 0}, "div.txt")

        assert isinstance(exc_info.value.cause, ZeroDivisionError)
        assert not sink.committed

    def test_read_failure_is_transport_error(self, file_source, sink, monkeypatch):
        """Test failures reading the template source are transport errors."""

        def fail_read(handle, encoding):
            raise PermissionError("denied")

        monkeypatch.setattr(file_source, "read", fail_read)
        driver = JinjaViewDriver.from_source(file_source, accept=accept_all())

        with pytest.raises(IOTransportException) as exc_info:
            driver.handle_view(None, sink, {"name": "World"}, "hello.tmpl")

        assert exc_info.value.code == ErrorCode.IO_TRANSPORT_ERROR
        assert isinstance(exc_info.value.cause, PermissionError)

    def test_undecodable_template_is_transport_error(self, tmp_path, sink):
        """Test templates that cannot be decoded are transport errors."""
        (tmp_path / "bad.tmpl").write_bytes(b"\xff\xfe\xfa")
        driver = JinjaViewDriver.from_source(
            JinjaViewDriver.create_file_template_source(tmp_path), accept=accept_all()
        )

        with pytest.raises(IOTransportException) as exc_info:
            driver.handle_view(None, sink, {}, "bad.tmpl")

        assert exc_info.value.message == "I/O error occurred!"
        assert str(tmp_path) not in exc_info.value.message

    def test_undecodable_include_is_transport_error(self, tmp_path, sink):
        """Test an undecodable included template is a transport error too."""
        (tmp_path / "outer.tmpl").write_text('before {% include "bad.tmpl" %} after', encoding="utf-8")
        (tmp_path / "bad.tmpl").write_bytes(b"\xff\xfe\xfa")
        driver = JinjaViewDriver.from_source(
            JinjaViewDriver.create_file_template_source(tmp_path), accept=accept_all()
        )

        with pytest.raises(IOTransportException) as exc_info:
            driver.handle_view(None, sink, {}, "outer.tmpl")

        assert isinstance(exc_info.value.cause, UnicodeDecodeError)
        assert not sink.committed

    def test_write_failure_is_transport_error(self, driver):
        """Test failures writing the response are transport errors."""
        response = MagicMock()
        response.send_string_data.side_effect = BrokenPipeError("client went away")

        with pytest.raises(IOTransportException) as exc_info:
            driver.handle_view(None, response, {"name": "World"}, "hello.tmpl")

        assert isinstance(exc_info.value.__cause__, BrokenPipeError)

    def test_all_failures_share_one_error_type(self, driver, sink):
        """Test every render failure is a ViewProcessingException."""
        for view_name in ("missing.tmpl", "undefined.tmpl", "broken.tmpl"):
            with pytest.raises(ViewProcessingException):
                driver.handle_view(None, ResponseSink(), {}, view_name)

    def test_rendering_is_repeatable(self, driver, mock_request):
        """Test the same model and view render byte-identical output."""
        first, second = ResponseSink(), ResponseSink()

        driver.handle_view(mock_request, first, {"name": "World"}, "hello.tmpl")
        driver.handle_view(mock_request, second, {"name": "World"}, "hello.tmpl")

        assert first.body == second.body == b"Hello, World!"

    def test_small_capacity_renders_everything(self, sink):
        """Test output larger than the buffer capacity is complete."""
        env = Environment(loader=DictLoader({"list.txt": "{% for i in items %}{{ i }},{% endfor %}"}))
        driver = JinjaViewDriver(env, accept=accept_all(), capacity=3)

        driver.handle_view(None, sink, {"items": range(100)}, "list.txt")

        assert sink.body.decode() == "".join(f"{i}," for i in range(100))

    def test_resource_templates(self, sink):
        """Test rendering packaged templates."""
        driver = JinjaViewDriver.from_source(
            ResourceTemplateSource("/jinja_view_driver/templates/"), accept=suffix_matcher(".txt")
        )

        assert driver.handle_view(None, sink, {"name": "World"}, "hello.txt")
        assert sink.body == b"Hello, World!"
        assert sink.media_type == "text/plain"

    def test_html_is_autoescaped(self, driver, sink):
        """Test HTML views escape model values."""
        driver.handle_view(None, sink, {"title": "<b>x</b>"}, "page.html")

        assert sink.body == b"<p>&lt;b&gt;x&lt;/b&gt;</p>"


class TestRenderAndContext:
    """Tests for render and model handling."""

    def test_render_returns_text(self, driver):
        """Test render returns the text without a sink."""
        assert driver.render(None, {"name": "World"}, "hello.tmpl") == "Hello, World!"

    def test_render_not_accepted(self, driver):
        """Test render returns None for declined views."""
        assert driver.render(None, {}, "hello.txt") is None

    def test_pydantic_model(self, driver):
        """Test pydantic models become the template context."""
        assert driver.render(None, Greeting(name="Ann"), "hello.tmpl") == "Hello, Ann!"

    def test_dataclass_model(self, driver):
        """Test dataclass models become the template context."""
        assert driver.build_context(None, Order(order_id="42")) == {"order_id": "42"}

    def test_other_model_exposed_as_model(self, driver):
        """Test other objects are available as `model`."""
        assert driver.build_context(None, 7) == {"model": 7}

    def test_none_model(self, driver):
        """Test a None model gives an empty context."""
        assert driver.build_context(None, None) == {}

    def test_request_added_to_context(self, driver, mock_request):
        """Test the request is available to templates unless the model defines it."""
        assert driver.build_context(mock_request, {})["request"] is mock_request
        assert driver.build_context(mock_request, {"request": "mine"})["request"] == "mine"

    def test_model_not_mutated(self, driver, mock_request):
        """Test building the context leaves a mapping model untouched."""
        model = {"name": "World"}

        driver.render(mock_request, model, "hello.tmpl")

        assert model == {"name": "World"}
