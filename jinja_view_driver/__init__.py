"""Jinja2 view driver for FastAPI / Starlette applications"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("jinja-view-driver")
except PackageNotFoundError:
    __version__ = "dev"
