"""View rendering for Jinja2 templates.

Drivers resolve view names to templates, render them against a model and
write the result into a response sink; the dispatcher chains drivers.
"""

from jinja_view_driver.views.dispatcher import ViewDispatcher
from jinja_view_driver.views.driver import JinjaViewDriver
from jinja_view_driver.views.matchers import (
    accept_all,
    exact_matcher,
    prefix_matcher,
    regex_matcher,
    suffix_matcher,
)
from jinja_view_driver.views.response import ResponseSink
from jinja_view_driver.views.sources import (
    UNKNOWN_LAST_MODIFIED,
    FileTemplateSource,
    ResourceTemplateSource,
    TemplateSource,
    TemplateSourceLoader,
    create_file_template_source,
    create_resource_template_source,
)

__all__ = [
    "UNKNOWN_LAST_MODIFIED",
    "FileTemplateSource",
    "JinjaViewDriver",
    "ResourceTemplateSource",
    "ResponseSink",
    "TemplateSource",
    "TemplateSourceLoader",
    "ViewDispatcher",
    "accept_all",
    "create_file_template_source",
    "create_resource_template_source",
    "exact_matcher",
    "prefix_matcher",
    "regex_matcher",
    "suffix_matcher",
]
