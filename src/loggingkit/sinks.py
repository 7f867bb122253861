"""
Backing sinks for the loggingkit facade.

A sink is anything that can hand out channels for a (subsystem, label)
pair. A channel answers whether a severity is enabled and emits already
formatted text. The facade only ever calls::

    channel = sink.open_channel(subsystem, label)
    if channel.is_enabled(severity):
        channel.log(severity, "%s", output)

Sinks add their own metadata (timestamps, process info) if they want it;
the facade never does.
"""

import logging
import os
import sys
import threading
from typing import Any, Dict, Optional, Protocol, TextIO

from .severity import Severity


# Above CRITICAL: nothing passes
_OFF = logging.CRITICAL + 10

_PACKAGE_DIR = os.path.dirname(os.path.normcase(os.path.abspath(__file__)))


class Channel(Protocol):
    def is_enabled(self, severity: Severity) -> bool: ...

    def log(self, severity: Severity, template: str, *args: Any) -> None: ...


class Sink(Protocol):
    def open_channel(self, subsystem: str, label: str) -> Channel: ...


class DisabledChannel:
    """Channel that is never enabled. Fallback when channel creation fails."""

    def is_enabled(self, severity: Severity) -> bool:
        return False

    def log(self, severity: Severity, template: str, *args: Any) -> None:
        pass

    def __repr__(self) -> str:
        return 'DisabledChannel()'


# =============================================================================
# stdlib logging
# =============================================================================

def _is_internal(frame) -> bool:
    filename = os.path.normcase(os.path.abspath(frame.f_code.co_filename))
    return os.path.dirname(filename) == _PACKAGE_DIR


def _outside_stacklevel() -> int:
    """``stacklevel`` that makes a LogRecord point past loggingkit's frames.

    Counts from the caller of this function (LoggingChannel.log) out to
    the first frame whose file lives outside the package.
    """
    frame = sys._getframe(1)
    level = 1
    while frame.f_back is not None and _is_internal(frame):
        frame = frame.f_back
        level += 1
    return level


class LoggingChannel:
    """A channel bound to the stdlib logger ``<subsystem>.<label>``."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def is_enabled(self, severity: Severity) -> bool:
        return self.logger.isEnabledFor(severity.level)

    def log(self, severity: Severity, template: str, *args: Any) -> None:
        self.logger.log(severity.level, template, *args,
                        stacklevel=_outside_stacklevel())

    def __repr__(self) -> str:
        return f"LoggingChannel({self.logger.name!r})"


class LoggingSink:
    """Sink backed by the stdlib ``logging`` module.

    Handlers, formatters and propagation stay under the application's
    logging configuration. When ``level`` or a per-label override is
    given, it is applied with ``setLevel`` as each channel is opened;
    an override of None switches the category off.

    Args:
        level: Threshold applied to every channel (None leaves the
            logger's inherited level alone)
        overrides: Per-label thresholds, winning over ``level``
    """

    def __init__(self, level: Optional[Severity] = None,
                 overrides: Dict[str, Optional[Severity]] = None):
        self.level = level
        self.overrides: Dict[str, Optional[Severity]] = dict(overrides or {})

    def open_channel(self, subsystem: str, label: str) -> LoggingChannel:
        logger = logging.getLogger(f"{subsystem}.{label}")
        if label in self.overrides:
            threshold = self.overrides[label]
            logger.setLevel(threshold.level if threshold is not None else _OFF)
        elif self.level is not None:
            logger.setLevel(self.level.level)
        return LoggingChannel(logger)


# =============================================================================
# Plain text stream
# =============================================================================

class StreamChannel:
    """A channel writing lines to its sink's stream."""

    def __init__(self, sink: 'StreamSink', subsystem: str, label: str):
        self.sink = sink
        self.subsystem = subsystem
        self.label = label

    def is_enabled(self, severity: Severity) -> bool:
        threshold = self.sink.threshold_for(self.label)
        if threshold is None:
            return False
        return severity.level >= threshold.level

    def log(self, severity: Severity, template: str, *args: Any) -> None:
        text = template % args if args else template
        self.sink.write(f"{self.subsystem}[{self.label}] {text}")

    def __repr__(self) -> str:
        return f"StreamChannel({self.subsystem!r}, {self.label!r})"


class StreamSink:
    """Sink writing one line per message to a text stream (default: stderr).

    The threshold is the per-label override if set, otherwise the global
    level. A threshold of None means the category is off.

    Usage::

        sink = StreamSink(level=Severity.INFO, overrides={'network': Severity.DEBUG})
    """

    def __init__(self, level: Optional[Severity] = Severity.INFO,
                 overrides: Dict[str, Optional[Severity]] = None,
                 file: TextIO = None):
        self.level = level
        self.overrides: Dict[str, Optional[Severity]] = dict(overrides or {})
        self.file = file if file is not None else sys.stderr
        self._write_lock = threading.Lock()

    def threshold_for(self, label: str) -> Optional[Severity]:
        return self.overrides.get(label, self.level)

    def open_channel(self, subsystem: str, label: str) -> StreamChannel:
        return StreamChannel(self, subsystem, label)

    def write(self, line: str) -> None:
        # One lock per stream keeps concurrent lines from interleaving
        with self._write_lock:
            print(line, file=self.file, flush=True)


SINKS = {
    'logging': LoggingSink,
    'stream':  StreamSink,
}


def make_sink(kind: str, level: Optional[Severity] = None,
              overrides: Dict[str, Optional[Severity]] = None) -> Sink:
    """Build a sink by name ('logging' or 'stream').

    Raises:
        ValueError: if the sink kind is unknown.
    """
    try:
        factory = SINKS[kind]
    except KeyError:
        raise ValueError(f"Unknown sink: {kind!r} "
                         f"(expected one of {', '.join(sorted(SINKS))})") from None
    if level is None and factory is StreamSink:
        level = Severity.INFO
    return factory(level=level, overrides=overrides)
