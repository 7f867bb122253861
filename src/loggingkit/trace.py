"""
Function tracing decorator.

Routes trace records through the singleton Logger at debug severity on
the opt-in 'trace' category. When that category is off, the wrapper
costs one enablement check per call.
"""

import functools
import inspect
from pathlib import Path

from .categories import TRACE_CATEGORY
from .severity import Severity


def _short_repr(value):
    if isinstance(value, Path):
        return f"Path('{value}')"
    if isinstance(value, str) and len(value) > 50:
        return f"'{value[:47]}...'"
    if isinstance(value, (list, tuple)) and len(value) > 3:
        return f"[...{len(value)} items...]"
    return repr(value)


def _format_args(func, args, kwargs):
    try:
        params = list(inspect.signature(func).parameters)
    except (TypeError, ValueError):
        params = []
    args_repr = []
    for i, arg in enumerate(args):
        # Keep bound receivers short
        if i == 0 and params and params[0] in ('self', 'cls'):
            args_repr.append(params[0])
        else:
            args_repr.append(_short_repr(arg))
    for key, value in kwargs.items():
        args_repr.append(f"{key}={_short_repr(value)}")
    return ', '.join(args_repr)


def trace(func):
    """Decorator to trace function calls via the Logger.

    Logs entry with arguments, exit with the return value (when not
    None) and any exception, which is re-raised. Records point at the
    decorated function's definition.
    """
    module = inspect.getmodule(func)
    module_name = module.__name__ if module else "unknown"
    qualname = f"{module_name}.{func.__name__}"
    code = getattr(func, '__code__', None)
    site = {
        'function': func.__name__,
        'file': code.co_filename if code else module_name,
        'line': code.co_firstlineno if code else 0,
    }

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        # Lazy import to avoid circular dependency
        from .logger import get_logger

        log = get_logger()
        if not log.is_enabled(Severity.DEBUG, TRACE_CATEGORY):
            return func(*args, **kwargs)

        log.debug(lambda: f"[TRACE] >> {qualname}({_format_args(func, args, kwargs)})",
                  TRACE_CATEGORY, **site)
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log.debug(lambda: f"[TRACE] !! {qualname} raised: "
                              f"{type(e).__name__}: {e}",
                      TRACE_CATEGORY, **site)
            raise

        if result is not None:
            log.debug(lambda: f"[TRACE] << {qualname} returned: {_short_repr(result)}",
                      TRACE_CATEGORY, **site)
        return result

    return wrapper
