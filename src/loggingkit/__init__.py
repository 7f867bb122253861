"""
loggingkit — leveled logging facade with call-site metadata.

Five severities (info, debug, error, fault, default), lazily evaluated
messages, named categories, and a pluggable backing sink (stdlib
logging by default).

Public API:
    log              — proxy to the current Logger singleton
    Logger           — the facade
    init_logger      — singleton initialization
    get_logger       — access singleton
    reset_logger     — drop the singleton (tests)
    Severity         — severity enum
    Category         — category descriptor
    categories       — package-wide category table
    CategoryRegistry — memoized channel cache
    LoggingSink      — stdlib logging sink
    StreamSink       — plain text stream sink
    trace            — function tracing decorator
"""

from loggingkit._version import __version__, __app_name__
from .severity import Severity
from .categories import (
    Category, LogCategories, categories, CategorySpec,
    parse_category_spec, format_category_list, OPT_IN_CATEGORIES,
)
from .sinks import DisabledChannel, LoggingSink, StreamSink, make_sink
from .registry import CategoryRegistry
from .logger import (
    Logger, build_output, thread_label,
    init_logger, get_logger, reset_logger, log,
)
from .config import Settings, resolve_settings
from .trace import trace

__all__ = [
    '__version__', '__app_name__',
    'Severity',
    'Category', 'LogCategories', 'categories', 'CategorySpec',
    'parse_category_spec', 'format_category_list', 'OPT_IN_CATEGORIES',
    'DisabledChannel', 'LoggingSink', 'StreamSink', 'make_sink',
    'CategoryRegistry',
    'Logger', 'build_output', 'thread_label',
    'init_logger', 'get_logger', 'reset_logger', 'log',
    'Settings', 'resolve_settings',
    'trace',
]
