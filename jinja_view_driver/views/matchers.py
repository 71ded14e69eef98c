"""View name predicates deciding which driver handles a view."""

import re
from collections.abc import Callable

from jinja_view_driver.exceptions import ConfigurationException

ViewNamePredicate = Callable[[str], bool]


def accept_all() -> ViewNamePredicate:
    """Accept every view name."""
    return lambda view_name: True


def suffix_matcher(*suffixes: str) -> ViewNamePredicate:
    """Accept view names ending with any of ``suffixes`` (e.g. ``".html"``)."""
    if not suffixes:
        raise ConfigurationException("suffix_matcher needs at least one suffix")
    return lambda view_name: view_name.endswith(suffixes)


def prefix_matcher(*prefixes: str) -> ViewNamePredicate:
    """Accept view names starting with any of ``prefixes`` (e.g. ``"emails/"``)."""
    if not prefixes:
        raise ConfigurationException("prefix_matcher needs at least one prefix")
    return lambda view_name: view_name.startswith(prefixes)


def exact_matcher(*names: str) -> ViewNamePredicate:
    """Accept exactly the given view names."""
    if not names:
        raise ConfigurationException("exact_matcher needs at least one view name")
    accepted = frozenset(names)
    return lambda view_name: view_name in accepted


def regex_matcher(pattern: str | re.Pattern[str]) -> ViewNamePredicate:
    """Accept view names fully matching ``pattern``."""
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ConfigurationException(f"Invalid view name pattern: {e}", details={"pattern": str(pattern)}) from e
    return lambda view_name: compiled.fullmatch(view_name) is not None
