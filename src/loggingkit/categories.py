"""
Category descriptors and the category lookup table.

Categories are named logging channels. Each one carries the label passed
to the sink and, optionally, its own subsystem (otherwise the registry's
subsystem is used). The table is the enumerable key space callers pick
from: ``categories.network`` raises AttributeError on a typo, so mistakes
surface in the calling code instead of inside the logger.

Category spec syntax (compact, positional):
    NAME[:LEVEL]

    Examples:
        network             # enable everything (debug and up)
        network:error       # error and fault only
        trace:off           # disable the category
"""

import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from .severity import Severity


@dataclass(frozen=True)
class Category:
    """A logical logging channel.

    Attributes:
        name: Logical key, unique within a LogCategories table
        label: Category string handed to the sink
        subsystem: Owning application/module; None uses the registry's
        description: One-line text for category listings
    """
    name: str
    label: str
    subsystem: Optional[str] = None
    description: str = ''


DEFAULT_CATEGORY = Category('default', 'default', description='General output')
TRACE_CATEGORY = Category('trace', 'trace', description='Function call tracing')

# Categories that are OFF unless configuration explicitly enables them
OPT_IN_CATEGORIES = {
    'trace',    # Function call tracing, verbose by nature
}


class LogCategories:
    """Lookup table of known categories.

    Usage::

        categories.register('network', description='HTTP traffic')
        log.debug(lambda: resp.headers, categories.network)
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._table: Dict[str, Category] = {
            DEFAULT_CATEGORY.name: DEFAULT_CATEGORY,
            TRACE_CATEGORY.name: TRACE_CATEGORY,
        }

    def register(self, name: str, label: str = None,
                 subsystem: str = None, description: str = '') -> Category:
        """Add a category to the table and return it.

        Re-registering a name replaces the previous descriptor (allows
        reloading during development). The label defaults to the name.
        """
        if not name or not name.isidentifier():
            raise ValueError(f"Category name must be an identifier: {name!r}")
        # Attribute access must reach the category, not a table method
        if name.startswith('_') or (name != DEFAULT_CATEGORY.name
                                    and hasattr(LogCategories, name)):
            raise ValueError(f"Category name is reserved: {name!r}")
        cat = Category(name=name, label=label or name,
                       subsystem=subsystem, description=description)
        with self._lock:
            self._table[name] = cat
        return cat

    @property
    def default(self) -> Category:
        return self._table[DEFAULT_CATEGORY.name]

    def get(self, name: str) -> Optional[Category]:
        """Look up a category by name. Returns None if not registered."""
        return self._table.get(name)

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._table)

    def __getitem__(self, name: str) -> Category:
        return self._table[name]

    def __getattr__(self, name: str) -> Category:
        # Only reached for names not found through normal lookup
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self._table[name]
        except KeyError:
            raise AttributeError(f"Unknown log category: {name!r}") from None

    def __contains__(self, name: object) -> bool:
        if isinstance(name, Category):
            return self._table.get(name.name) == name
        return name in self._table

    def __iter__(self) -> Iterator[Category]:
        return iter([self._table[n] for n in self.names()])

    def __len__(self) -> int:
        return len(self._table)


# Package-wide table, extended by applications at import time
categories = LogCategories()


@dataclass
class CategorySpec:
    """Parsed category spec. ``level`` None means the category is off."""
    name: str
    level: Optional[Severity] = Severity.DEBUG


def parse_category_spec(spec: str) -> CategorySpec:
    """Parse a category spec string into a CategorySpec.

    Args:
        spec: Spec string like "network", "network:error" or "trace:off"

    Returns:
        CategorySpec with parsed values

    Raises:
        ValueError: if the name is empty or the level is unknown
    """
    name, _, level = spec.strip().partition(':')
    name = name.strip()
    if not name:
        raise ValueError(f"Empty category name in spec: {spec!r}")
    level = level.strip()
    if not level:
        return CategorySpec(name=name)
    if level.lower() in ('off', 'none'):
        return CategorySpec(name=name, level=None)
    return CategorySpec(name=name, level=Severity.parse(level))


def format_category_list(table: LogCategories = None) -> str:
    """Format the known categories for display.

    Returns:
        Formatted string listing all categories with descriptions.
    """
    table = table if table is not None else categories
    lines = ["Available categories:"]
    max_name = max(len(name) for name in table.names())
    for cat in table:
        desc = cat.description
        if cat.label != cat.name:
            desc = f"{desc} [{cat.label}]" if desc else f"[{cat.label}]"
        opt_in = " (opt-in)" if cat.name in OPT_IN_CATEGORIES else ""
        lines.append(f"  {cat.name:<{max_name}}  {desc}{opt_in}".rstrip())
    return "\n".join(lines)
