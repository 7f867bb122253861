"""
CategoryRegistry: memoized channel lookup.

Resolves a Category to its sink channel, creating the channel on first
use and caching it for the life of the registry. Channels are keyed by
(subsystem, label), so two categories that share both strings share one
channel.

First access to a key is serialized by a lock; later lookups hit the
cache without locking. Concurrent first access to the same key creates
exactly one channel and every caller gets that instance.

Logging must never become a crash source: if the sink fails to open a
channel, or a category name is not registered, the key resolves to a
DisabledChannel and the failure is reported once on the 'loggingkit'
stdlib logger. Unknown names are not cached as channels, so registering
one later makes it resolve.
"""

import logging
import threading
from typing import Dict, Set, Tuple, Union

from .categories import Category, LogCategories, categories as _default_table
from .sinks import Channel, DisabledChannel, Sink

_log = logging.getLogger('loggingkit')

ChannelKey = Tuple[str, str]

# Distinct unknown names warned about before going quiet
MAX_UNKNOWN_REPORTS = 100


class CategoryRegistry:
    """Thread-safe get-or-create cache of sink channels.

    Args:
        sink: Backing sink that opens channels
        subsystem: Subsystem for categories that don't carry their own
        table: Category table used to resolve names (default: the
            package-wide ``categories``)
    """

    def __init__(self, sink: Sink, subsystem: str,
                 table: LogCategories = None):
        self.sink = sink
        self.subsystem = subsystem
        self.table = table if table is not None else _default_table
        self._lock = threading.Lock()
        self._channels: Dict[ChannelKey, Channel] = {}
        self._unknown_channel = DisabledChannel()
        self._unknown_reported: Set[str] = set()

    @property
    def default_category(self) -> Category:
        return self.table.default

    def key_for(self, category: Category) -> ChannelKey:
        return (category.subsystem or self.subsystem, category.label)

    def resolve(self, category: Union[Category, str, None] = None) -> Channel:
        """Return the channel for a category, creating it on first use.

        Args:
            category: A Category, a registered category name, or None for
                the default category

        Returns:
            The cached channel (a DisabledChannel if creation failed)
        """
        if category is None:
            category = self.default_category
        elif isinstance(category, str):
            found = self.table.get(category)
            if found is None:
                return self._unknown(category)
            category = found

        key = self.key_for(category)
        channel = self._channels.get(key)
        if channel is not None:
            return channel

        with self._lock:
            channel = self._channels.get(key)
            if channel is not None:
                return channel
            try:
                channel = self.sink.open_channel(*key)
            except Exception as e:
                channel = DisabledChannel()
                _log.warning("could not open log channel %s.%s (%s: %s); "
                             "category disabled", key[0], key[1],
                             type(e).__name__, e)
            self._channels[key] = channel
            return channel

    def _unknown(self, name: str) -> Channel:
        # Unknown names stay out of the channel cache, so registering the
        # name later makes it resolve normally
        with self._lock:
            if (name not in self._unknown_reported
                    and len(self._unknown_reported) < MAX_UNKNOWN_REPORTS):
                self._unknown_reported.add(name)
                _log.warning("unknown log category %r; category disabled", name)
        return self._unknown_channel

    def channels(self) -> Dict[ChannelKey, Channel]:
        """Snapshot of the cached channels."""
        with self._lock:
            return dict(self._channels)

    def reset(self) -> None:
        """Forget every cached channel (next access reopens them)."""
        with self._lock:
            self._channels.clear()
            self._unknown_reported.clear()
