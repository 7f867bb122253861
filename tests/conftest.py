"""Shared test fixtures for the loggingkit test suite."""

import threading

import pytest

from loggingkit import logger as _logger_mod
from loggingkit.categories import LogCategories
from loggingkit.registry import CategoryRegistry
from loggingkit.logger import Logger


# ---------------------------------------------------------------------------
# Recording sink
# ---------------------------------------------------------------------------
class RecordingChannel:
    """Channel that records emissions; enablement from its sink's table."""

    def __init__(self, sink, subsystem, label):
        self.sink = sink
        self.subsystem = subsystem
        self.label = label

    def is_enabled(self, severity):
        return severity in self.sink.enabled.get(self.label, set())

    def log(self, severity, template, *args):
        self.sink.emitted.append((self.label, severity, template, args))


class RecordingSink:
    """Sink that counts channel creation and records every emission.

    ``enabled`` maps label -> set of enabled severities.
    """

    def __init__(self, enabled=None):
        self.enabled = dict(enabled or {})
        self.emitted = []
        self.opened = []
        self._lock = threading.Lock()

    def open_channel(self, subsystem, label):
        with self._lock:
            self.opened.append((subsystem, label))
        return RecordingChannel(self, subsystem, label)

    def lines(self):
        return [template % args for _, _, template, args in self.emitted]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def table():
    """A fresh category table with a 'network' category."""
    t = LogCategories()
    t.register('network', description='Network traffic')
    return t


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def registry(sink, table):
    return CategoryRegistry(sink, 'com.example.app', table)


@pytest.fixture
def logger(registry):
    return Logger(registry)


@pytest.fixture(autouse=True)
def _reset_logger_singleton():
    """Reset the Logger singleton between tests."""
    old = _logger_mod._logger
    yield
    _logger_mod._logger = old


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """No LOGGINGKIT_* variables and a cwd without .loggingkit.json."""
    for key in ("SUBSYSTEM", "LEVEL", "CATEGORIES", "SINK"):
        monkeypatch.delenv(f"LOGGINGKIT_{key}", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
