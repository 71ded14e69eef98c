"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from jinja_view_driver import __version__
from jinja_view_driver.config import Settings, get_settings
from jinja_view_driver.core.lifespan import lifespan
from jinja_view_driver.core.middleware import setup_middleware
from jinja_view_driver.logging_config import get_logger, log_with_context
from jinja_view_driver.middleware.error_handlers import register_error_handlers
from jinja_view_driver.routers import health_router, view_router
from jinja_view_driver.views.dispatcher import ViewDispatcher
from jinja_view_driver.views.driver import JinjaViewDriver
from jinja_view_driver.views.matchers import suffix_matcher

logger = get_logger(__name__)


def build_view_driver(settings: Settings) -> JinjaViewDriver:
    """Create the view driver described by the settings.

    Templates are looked up in the template directory first, when one is
    configured, then in the packaged templates.
    """
    sources = []
    if settings.template_dir is not None:
        sources.append(JinjaViewDriver.create_file_template_source(settings.template_dir))
    sources.append(JinjaViewDriver.create_resource_template_source(settings.resource_root))

    config = settings.driver_config()
    driver = JinjaViewDriver.from_sources(
        sources,
        encoding=settings.template_encoding,
        accept=suffix_matcher(*settings.view_suffixes),
        mime_type=config.mime_type,
        capacity=config.capacity,
        default_mime_type=settings.default_mime_type,
    )

    log_with_context(
        logger,
        "info",
        "Configured view driver",
        sources=[repr(source) for source in sources],
        suffixes=settings.view_suffixes,
        mime_type=config.mime_type,
        capacity=config.capacity,
        event_type="view_config",
    )
    return driver


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Settings to use; the cached singleton when omitted

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Jinja View Driver",
        description="Renders Jinja2 templates from packaged resources or a template directory.",
        version=__version__,
        lifespan=lifespan,
    )

    # Serving context for view rendering
    app.state.settings = settings
    app.state.mime_types = dict(settings.mime_types)
    app.state.view_dispatcher = ViewDispatcher([build_view_driver(settings)])

    setup_middleware(app, settings)
    register_error_handlers(app)

    app.include_router(health_router.router, tags=["health"])
    app.include_router(view_router.router, tags=["views"])

    return app
