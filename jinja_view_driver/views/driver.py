"""Jinja2 view driver.

Resolves a view name to a Jinja2 template, renders it against a model into
an in-memory buffer and writes the result, with a MIME type, into a
response sink.
"""

import copy
import dataclasses
import io
import time
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from fastapi import Request
from jinja2 import (
    ChoiceLoader,
    Environment,
    StrictUndefined,
    Template,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from pydantic import BaseModel

from jinja_view_driver.config import DEFAULT_CAPACITY, DEFAULT_MIME_TYPE, ViewDriverConfig, build_driver_config
from jinja_view_driver.exceptions import (
    ConfigurationException,
    IOTransportException,
    TemplateEvaluationException,
    TemplateResolutionException,
)
from jinja_view_driver.logging_config import get_logger, log_with_context
from jinja_view_driver.protocols import StringDataSink
from jinja_view_driver.utils.mime import get_mime_type
from jinja_view_driver.views.matchers import ViewNamePredicate
from jinja_view_driver.views.sources import (
    TemplateSource,
    TemplateSourceLoader,
    create_file_template_source,
    create_resource_template_source,
)

logger = get_logger(__name__)

# Client-facing messages; engine and OS details stay in the cause and the logs
TEMPLATE_ERROR_MESSAGE = "Template error occurred!"
IO_ERROR_MESSAGE = "I/O error occurred!"

_UNSET: Any = object()


class JinjaViewDriver:
    """View driver rendering Jinja2 templates.

    Which views the driver handles is decided by ``accept_view_name``: either
    pass an ``accept`` predicate (see ``views.matchers``) or subclass and
    override the method.
    """

    create_resource_template_source = staticmethod(create_resource_template_source)
    create_file_template_source = staticmethod(create_file_template_source)

    def __init__(
        self,
        environment: Environment,
        *,
        accept: ViewNamePredicate | None = None,
        mime_type: str | None = None,
        capacity: int = DEFAULT_CAPACITY,
        default_mime_type: str = DEFAULT_MIME_TYPE,
    ):
        """Create the driver around an existing Jinja2 environment.

        Args:
            environment: Jinja2 environment, shared and owned by the application
            accept: Predicate choosing the view names this driver handles
            mime_type: Forced output MIME type; inferred from the view name if None
            capacity: Initial output buffer capacity, in characters
            default_mime_type: MIME type used when the view name's extension is unknown

        Raises:
            ConfigurationException: If capacity < 1, mime_type is blank, or
                there is neither an accept predicate nor an accept_view_name override
        """
        if accept is None and type(self).accept_view_name is JinjaViewDriver.accept_view_name:
            raise ConfigurationException(
                f"{type(self).__name__} needs an accept predicate or an accept_view_name override"
            )
        self.environment = environment
        self.config: ViewDriverConfig = build_driver_config(mime_type=mime_type, capacity=capacity)
        self.default_mime_type = default_mime_type
        self._accept = accept

    @classmethod
    def from_source(cls, source: TemplateSource, *, encoding: str = "utf-8", **kwargs: Any) -> "JinjaViewDriver":
        """Create a driver with its own environment reading from ``source``.

        Undefined template variables are errors, and the view name is used as
        the literal template name.
        """
        return cls.from_sources([source], encoding=encoding, **kwargs)

    @classmethod
    def from_sources(
        cls, sources: Sequence[TemplateSource], *, encoding: str = "utf-8", **kwargs: Any
    ) -> "JinjaViewDriver":
        """Create a driver looking up templates in ``sources``, first match wins."""
        if not sources:
            raise ConfigurationException("At least one template source is required")
        loaders = [TemplateSourceLoader(source, encoding) for source in sources]
        environment = Environment(
            loader=loaders[0] if len(loaders) == 1 else ChoiceLoader(loaders),
            undefined=StrictUndefined,
            autoescape=select_autoescape(["html", "xml"]),
        )
        return cls(environment, **kwargs)

    def with_config(self, *, mime_type: Any = _UNSET, capacity: Any = _UNSET) -> "JinjaViewDriver":
        """Return a copy of this driver with a different configuration.

        Options left out keep this driver's values; pass ``mime_type=None``
        to go back to inferring the MIME type. The copy shares the
        environment; this driver is left untouched.
        """
        driver = copy.copy(self)
        driver.config = build_driver_config(
            mime_type=self.config.mime_type if mime_type is _UNSET else mime_type,
            capacity=self.config.capacity if capacity is _UNSET else capacity,
        )
        return driver

    @property
    def mime_type(self) -> str | None:
        return self.config.mime_type

    @property
    def capacity(self) -> int:
        return self.config.capacity

    def accept_view_name(self, view_name: str) -> bool:
        """Check if this driver should process a view by its view name.

        If False is returned, this view driver is skipped.
        """
        if self._accept is None:
            raise ConfigurationException(f"{type(self).__name__} has no accept predicate")
        return self._accept(view_name)

    def handle_view(self, request: Request | None, response: StringDataSink, model: Any, view_name: str) -> bool:
        """Render ``view_name`` with ``model`` into ``response``.

        Args:
            request: Request being served, used for MIME lookup and as ``request`` in templates
            response: Sink receiving the rendered text
            model: Template model
            view_name: Name of the view (template) to render

        Returns:
            False if this driver does not accept the view name, True once written

        Raises:
            TemplateResolutionException: If no template exists for view_name
            TemplateEvaluationException: If the template fails to parse or evaluate
            IOTransportException: If reading the template or writing the response fails
        """
        if not self.accept_view_name(view_name):
            return False

        content = self._render(request, model, view_name)
        mime_type = self.config.mime_type or get_mime_type(request, view_name, self.default_mime_type)

        try:
            response.send_string_data(mime_type, content)
        except OSError as e:
            log_with_context(
                logger,
                "warning",
                "Failed to write view response",
                view_name=view_name,
                error=str(e),
                event_type="view_write_error",
            )
            raise IOTransportException(IO_ERROR_MESSAGE, details={"view_name": view_name}, cause=e) from e
        return True

    def render(self, request: Request | None, model: Any, view_name: str) -> str | None:
        """Render ``view_name`` to a string, or None if the view is not accepted.

        Raises the same exceptions as ``handle_view``.
        """
        if not self.accept_view_name(view_name):
            return None
        return self._render(request, model, view_name)

    def build_context(self, request: Request | None, model: Any) -> dict[str, Any]:
        """Turn a model into the template context."""
        if model is None:
            context: dict[str, Any] = {}
        elif isinstance(model, Mapping):
            context = dict(model)
        elif isinstance(model, BaseModel):
            context = model.model_dump()
        elif dataclasses.is_dataclass(model) and not isinstance(model, type):
            context = dataclasses.asdict(model)
        else:
            context = {"model": model}

        if request is not None:
            context.setdefault("request", request)
        return context

    def _render(self, request: Request | None, model: Any, view_name: str) -> str:
        start = time.perf_counter()
        template = self._get_template(view_name)

        try:
            content = self._evaluate(template.generate(self.build_context(request, model)))
        except TemplateError as e:
            self._log_failure("Template evaluation failed", view_name, e)
            raise TemplateEvaluationException(
                TEMPLATE_ERROR_MESSAGE, details={"view_name": view_name}, cause=e
            ) from e
        except (OSError, UnicodeError) as e:
            # Included templates are read while evaluating
            self._log_failure("I/O error while evaluating template", view_name, e)
            raise IOTransportException(IO_ERROR_MESSAGE, details={"view_name": view_name}, cause=e) from e
        except Exception as e:
            self._log_failure("Template evaluation failed", view_name, e)
            raise TemplateEvaluationException(
                TEMPLATE_ERROR_MESSAGE, details={"view_name": view_name}, cause=e
            ) from e

        log_with_context(
            logger,
            "debug",
            "Rendered view",
            view_name=view_name,
            length=len(content),
            duration_ms=round((time.perf_counter() - start) * 1000, 3),
            event_type="view_rendered",
        )
        return content

    def _get_template(self, view_name: str) -> Template:
        try:
            return self.environment.get_template(view_name)
        except TemplateNotFound as e:
            self._log_failure("Template not found", view_name, e)
            raise TemplateResolutionException(
                f"Template not found: {view_name}", details={"view_name": view_name}, cause=e
            ) from e
        except TemplateError as e:
            self._log_failure("Template could not be parsed", view_name, e)
            raise TemplateEvaluationException(
                TEMPLATE_ERROR_MESSAGE, details={"view_name": view_name}, cause=e
            ) from e
        except (OSError, UnicodeError) as e:
            self._log_failure("Template could not be read", view_name, e)
            raise IOTransportException(IO_ERROR_MESSAGE, details={"view_name": view_name}, cause=e) from e

    def _evaluate(self, chunks: Iterable[str]) -> str:
        # Chunks are batched into the buffer in runs of at least `capacity` characters.
        buffer = io.StringIO()
        pending: list[str] = []
        pending_size = 0
        for chunk in chunks:
            pending.append(chunk)
            pending_size += len(chunk)
            if pending_size >= self.config.capacity:
                buffer.write("".join(pending))
                pending.clear()
                pending_size = 0
        buffer.write("".join(pending))
        return buffer.getvalue()

    def _log_failure(self, message: str, view_name: str, error: BaseException) -> None:
        log_with_context(
            logger,
            "warning",
            message,
            view_name=view_name,
            error=str(error),
            error_type=type(error).__name__,
            event_type="view_error",
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(mime_type={self.config.mime_type!r}, capacity={self.config.capacity})"
