"""
Severity levels for the loggingkit facade.

Five fixed severities. The facade itself never orders them; ordering is
only used by sinks that gate by a numeric threshold, in which case each
severity maps onto a stdlib ``logging`` level:

    debug    DEBUG     10
    info     INFO      20
    default  NOTICE    25   (registered with logging.addLevelName)
    error    ERROR     40
    fault    CRITICAL  50
"""

import logging
from enum import Enum


NOTICE = 25
logging.addLevelName(NOTICE, 'NOTICE')

# Bracket tags used in formatted output
_TAGS = {
    'info':  'ℹ️(info)',
    'debug': '🔹(debug)',
    'error': '‼️(error)',
    'fault': '💣(fault)',
}
_FALLBACK_TAG = 'DEFAULT'

_LEVELS = {
    'debug':   logging.DEBUG,
    'info':    logging.INFO,
    'default': NOTICE,
    'error':   logging.ERROR,
    'fault':   logging.CRITICAL,
}

# stdlib spellings accepted by Severity.parse()
_ALIASES = {
    'warning': 'default',
    'warn':    'default',
    'notice':  'default',
    'critical': 'fault',
    'fatal':   'fault',
}


class Severity(Enum):
    INFO = 'info'
    DEBUG = 'debug'
    ERROR = 'error'
    FAULT = 'fault'
    DEFAULT = 'default'

    @property
    def tag(self) -> str:
        """Short marker shown inside the leading brackets of a log line."""
        return _TAGS.get(self.value, _FALLBACK_TAG)

    @property
    def level(self) -> int:
        """The stdlib logging level this severity maps to."""
        return _LEVELS[self.value]

    def __str__(self) -> str:
        return self.tag

    @classmethod
    def parse(cls, text: str) -> 'Severity':
        """Look up a severity by name (case-insensitive).

        Accepts the five native names plus stdlib spellings such as
        'warning' or 'critical'.

        Raises:
            ValueError: if the name is unknown.
        """
        key = str(text).strip().lower()
        key = _ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            raise ValueError(f"Unknown severity: {text!r}") from None
