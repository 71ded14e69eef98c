"""Template sources: where view templates come from.

A template source maps a view name to raw template text plus a modification
stamp. Two variants ship with the driver: packaged resources (read-only,
never stale) and a filesystem directory (stamped with the file's mtime so
Jinja2's cache reloads edited templates).
"""

from collections.abc import Callable
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from jinja2 import BaseLoader, Environment, TemplateNotFound
from jinja2.loaders import split_template_path

from jinja_view_driver.exceptions import ConfigurationException
from jinja_view_driver.logging_config import get_logger, log_with_context

logger = get_logger(__name__)

UNKNOWN_LAST_MODIFIED = -1


@runtime_checkable
class TemplateSource(Protocol):
    """Capability resolving view names to template content."""

    def locate(self, name: str) -> Any | None:
        """Return an opaque handle for ``name``, or None if there is no such template."""
        ...

    def read(self, handle: Any, encoding: str) -> str:
        """Read the whole template behind ``handle``."""
        ...

    def last_modified(self, handle: Any) -> float:
        """Modification stamp of ``handle``, or UNKNOWN_LAST_MODIFIED."""
        ...


def _name_segments(name: str) -> list[str] | None:
    # split_template_path rejects ".." segments with TemplateNotFound
    try:
        return split_template_path(name)
    except TemplateNotFound:
        return None


class ResourceTemplateSource:
    """Templates packaged inside an importable package.

    ``root_path`` is written like a resource path, ``"<package>/<directory>"``;
    leading and trailing slashes are ignored, so ``"/views/"`` and ``"views"``
    name the same root.
    """

    def __init__(self, root_path: str):
        self.root = root_path.strip("/")
        if not self.root:
            raise ConfigurationException("Resource root cannot be empty", details={"root_path": root_path})

        package, _, directory = self.root.partition("/")
        try:
            base = resources.files(package)
        except ModuleNotFoundError as e:
            raise ConfigurationException(
                f"Resource root {root_path} does not start with an importable package",
                details={"root_path": root_path, "package": package},
            ) from e
        self._base: Traversable = base.joinpath(*directory.split("/")) if directory else base

    def locate(self, name: str) -> Traversable | None:
        segments = _name_segments(name)
        if not segments:
            return None
        resource = self._base.joinpath(*segments)
        if not resource.is_file():
            log_with_context(
                logger,
                "debug",
                "Template resource not found",
                resource=f"{self.root}/{'/'.join(segments)}",
                event_type="template_resource_missing",
            )
            return None
        return resource

    def read(self, handle: Traversable, encoding: str) -> str:
        with handle.open("r", encoding=encoding) as reader:
            return reader.read()

    def last_modified(self, handle: Traversable) -> float:
        # Packaged resources do not change at runtime.
        return UNKNOWN_LAST_MODIFIED

    def __repr__(self) -> str:
        return f"ResourceTemplateSource({self.root!r})"


class FileTemplateSource:
    """Templates in a directory on the filesystem."""

    def __init__(self, root: str | Path):
        root = Path(root)
        if not root.is_dir():
            raise ConfigurationException(f"File root {root} is not a directory.", details={"root": str(root)})
        self.root = root.absolute()

    def locate(self, name: str) -> Path | None:
        segments = _name_segments(name)
        if not segments:
            return None
        path = self.root.joinpath(*segments)
        try:
            found = path.is_file()
        except OSError as e:
            # e.g. a name longer than the filesystem allows
            log_with_context(
                logger,
                "debug",
                "Template file could not be checked",
                name=name,
                error=str(e),
                event_type="template_file_unchecked",
            )
            return None
        return path if found else None

    def read(self, handle: Path, encoding: str) -> str:
        with handle.open("r", encoding=encoding) as reader:
            return reader.read()

    def last_modified(self, handle: Path) -> float:
        try:
            return handle.stat().st_mtime
        except OSError:
            return UNKNOWN_LAST_MODIFIED

    def __repr__(self) -> str:
        return f"FileTemplateSource({str(self.root)!r})"


def create_resource_template_source(root_path: str) -> ResourceTemplateSource:
    """Create a template source over packaged resources under ``root_path``."""
    return ResourceTemplateSource(root_path)


def create_file_template_source(root: str | Path) -> FileTemplateSource:
    """Create a template source over the directory ``root``.

    Raises:
        ConfigurationException: If ``root`` is not an existing directory
    """
    return FileTemplateSource(root)


class TemplateSourceLoader(BaseLoader):
    """Jinja2 loader backed by any TemplateSource."""

    def __init__(self, source: TemplateSource, encoding: str = "utf-8"):
        self.source = source
        self.encoding = encoding

    def get_source(self, environment: Environment, template: str) -> tuple[str, str | None, Callable[[], bool]]:
        handle = self.source.locate(template)
        if handle is None:
            raise TemplateNotFound(template)

        loaded_at = self.source.last_modified(handle)
        contents = self.source.read(handle, self.encoding)

        def uptodate() -> bool:
            if loaded_at == UNKNOWN_LAST_MODIFIED:
                return True
            return self.source.last_modified(handle) == loaded_at

        return contents, str(handle), uptodate
