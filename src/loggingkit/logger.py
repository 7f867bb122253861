"""
Logger: the leveled logging facade.

One method per severity (info, debug, error, fault, default). Each call
resolves the category's channel, asks the channel whether the severity
is enabled, and only then evaluates the message and formats it as::

    [<tag>] [<thread>] [<file>:<line>] <function> > <message>

The formatted text goes to the channel as a single ``"%s"`` argument,
so the sink adds its own timestamp/process metadata on top.

Messages are lazy: pass a zero-argument callable and it runs at most
once, only when the severity is enabled. A message of None is nothing
to log. Call-site metadata is taken from the caller's frame unless
given explicitly.

Logging never raises: a failing sink is reported on stderr and the call
returns. Exceptions raised by the message callable itself are the
caller's and propagate unchanged.
"""

import asyncio
import os
import sys
import threading
from typing import Any, Callable, Optional, Union

from .categories import Category, LogCategories, categories as _default_table
from .config import (
    Settings, category_overrides, default_subsystem, resolve_settings,
)
from .registry import CategoryRegistry
from .severity import Severity
from .sinks import Channel, Sink, make_sink

Message = Union[Callable[[], Any], Any]
CategoryRef = Union[Category, str, None]


def thread_label() -> str:
    """Label for the calling thread.

    "main" on the main thread, else the thread's name, else the name of
    the running asyncio task, else a hex thread identifier.
    """
    current = threading.current_thread()
    if current is threading.main_thread():
        return "main"
    if current.name:
        return current.name
    task_name = _current_task_name()
    if task_name:
        return task_name
    return f"0x{threading.get_ident():x}"


def _current_task_name() -> Optional[str]:
    try:
        task = asyncio.current_task()
    except RuntimeError:  # no running loop in this thread
        return None
    return task.get_name() if task is not None else None


def build_output(message: Message, severity: Severity,
                 function: str, file: str, line: int) -> Optional[str]:
    """Evaluate the message and produce the formatted log line.

    Returns:
        The formatted line, or None when the message evaluates to None.
    """
    value = message() if callable(message) else message
    if value is None:
        return None
    return (f"[{severity.tag}] [{thread_label()}] "
            f"[{os.path.basename(str(file))}:{line}] {function} > {value!s}")


class Logger:
    """Leveled logging facade over a CategoryRegistry.

    Usage::

        log = Logger(CategoryRegistry(LoggingSink(), 'com.example.app'))
        log.info(lambda: f"loaded {len(items)} items")
        log.debug(lambda: response.headers, categories.network)
        log.error("plain values work too (no laziness)")
    """

    def __init__(self, registry: CategoryRegistry):
        self.registry = registry

    def info(self, message: Message, category: CategoryRef = None, *,
             function: str = None, file: str = None, line: int = None,
             stacklevel: int = 1) -> None:
        """Log an info message."""
        self._log(Severity.INFO, message, category,
                  function, file, line, stacklevel)

    def debug(self, message: Message, category: CategoryRef = None, *,
              function: str = None, file: str = None, line: int = None,
              stacklevel: int = 1) -> None:
        """Log a debug message."""
        self._log(Severity.DEBUG, message, category,
                  function, file, line, stacklevel)

    def error(self, message: Message, category: CategoryRef = None, *,
              function: str = None, file: str = None, line: int = None,
              stacklevel: int = 1) -> None:
        """Log an error message."""
        self._log(Severity.ERROR, message, category,
                  function, file, line, stacklevel)

    def fault(self, message: Message, category: CategoryRef = None, *,
              function: str = None, file: str = None, line: int = None,
              stacklevel: int = 1) -> None:
        """Log a fault (unrecoverable, bug-level) message."""
        self._log(Severity.FAULT, message, category,
                  function, file, line, stacklevel)

    def default(self, message: Message, category: CategoryRef = None, *,
                function: str = None, file: str = None, line: int = None,
                stacklevel: int = 1) -> None:
        """Log a message at the default severity."""
        self._log(Severity.DEFAULT, message, category,
                  function, file, line, stacklevel)

    def is_enabled(self, severity: Severity,
                   category: CategoryRef = None) -> bool:
        """Check whether a severity is enabled on a category's channel.

        Used by callers to gate expensive work that isn't a message.
        """
        return self._enabled(self.registry.resolve(category), severity)

    def _log(self, severity: Severity, message: Message,
             category: CategoryRef, function: Optional[str],
             file: Optional[str], line: Optional[int],
             stacklevel: int) -> None:
        channel = self.registry.resolve(category)
        if not self._enabled(channel, severity):
            return

        if function is None or file is None or line is None:
            frame = _caller_frame(stacklevel)
            code = frame.f_code
            function = code.co_name if function is None else function
            file = code.co_filename if file is None else file
            line = frame.f_lineno if line is None else line

        output = build_output(message, severity, function, file, line)
        if output is None:
            return
        self._emit(channel, severity, output)

    @staticmethod
    def _enabled(channel: Channel, severity: Severity) -> bool:
        try:
            return bool(channel.is_enabled(severity))
        except Exception as e:
            _report_failure("enablement check", severity, e)
            return False

    @staticmethod
    def _emit(channel: Channel, severity: Severity, output: str) -> None:
        try:
            channel.log(severity, "%s", output)
        except Exception as e:
            _report_failure("emit", severity, e)


def _caller_frame(stacklevel: int):
    """Frame of the level method's caller, ``stacklevel - 1`` frames further out.

    Clamped to the outermost frame when the stack is shallower than asked.
    """
    # Frame 2 is the level method (caller of _log)
    frame = sys._getframe(2)
    for _ in range(max(stacklevel, 1)):
        if frame.f_back is None:
            break
        frame = frame.f_back
    return frame


def _report(text: str) -> None:
    try:
        print(f"loggingkit: {text}", file=sys.stderr)
    except Exception:
        pass  # stderr itself is gone; nowhere left to report


def _report_failure(what: str, severity: Severity, exc: Exception) -> None:
    _report(f"{what} failed for {severity.value} message: "
            f"{type(exc).__name__}: {exc}")


# =============================================================================
# Module-level singleton
# =============================================================================

_logger: Optional[Logger] = None
_logger_lock = threading.Lock()


def init_logger(subsystem: str = None,
                level: Union[Severity, str, None] = None,
                categories: list = None,
                sink: Union[Sink, str, None] = None,
                table: LogCategories = None,
                environ=None, start_dir=None) -> Logger:
    """Initialize the module-level Logger singleton.

    Call once at program startup. Arguments left as None fall back to
    LOGGINGKIT_* environment variables, then to .loggingkit.json.

    Args:
        subsystem: Subsystem for categories without their own
        level: Global sink threshold (e.g. 'info')
        categories: Category specs (e.g. ['network:debug', 'trace'])
        sink: A sink instance, or 'logging' / 'stream'
        table: Category table (default: package-wide ``categories``)

    Returns:
        The initialized Logger instance

    Raises:
        ValueError: on a malformed level, category spec or sink name
    """
    global _logger

    table = table if table is not None else _default_table
    sink_instance = None if sink is None or isinstance(sink, str) else sink
    settings = resolve_settings(
        subsystem=subsystem, level=level, categories=categories,
        sink=sink if isinstance(sink, str) else None,
        environ=environ, start_dir=start_dir,
    )
    if sink_instance is None:
        sink_instance = _sink_from_settings(settings, table)

    new_logger = Logger(CategoryRegistry(sink_instance, settings.subsystem, table))
    with _logger_lock:
        _logger = new_logger
    return new_logger


def _sink_from_settings(settings: Settings, table: LogCategories) -> Sink:
    overrides = category_overrides(settings.categories, table)
    return make_sink(settings.sink, level=settings.level, overrides=overrides)


def get_logger() -> Logger:
    """Get the module-level Logger, creating a default one if needed."""
    global _logger
    if _logger is None:
        with _logger_lock:
            if _logger is None:
                try:
                    settings = resolve_settings()
                    sink = _sink_from_settings(settings, _default_table)
                except Exception as e:
                    # Never raise from a log call; fall back to defaults
                    _report(f"ignoring bad configuration "
                            f"({type(e).__name__}: {e}); using defaults")
                    settings = Settings(subsystem=default_subsystem())
                    sink = _sink_from_settings(settings, _default_table)
                _logger = Logger(CategoryRegistry(sink, settings.subsystem))
    return _logger


def reset_logger() -> None:
    """Drop the singleton; the next get_logger() builds a fresh one."""
    global _logger
    with _logger_lock:
        _logger = None


class _LoggerProxy:
    """Forwards attribute access to the current singleton Logger.

    ``log.info(...)`` always targets whatever init_logger() installed,
    even if the import happened earlier.
    """

    def __getattr__(self, name):
        return getattr(get_logger(), name)

    def __repr__(self):
        return f"<loggingkit.log -> {_logger!r}>"


log = _LoggerProxy()
