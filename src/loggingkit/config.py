"""Configuration for loggingkit.

Three-layer settings resolution (highest priority wins):
  1. Explicit arguments to init_logger() / resolve_settings()
  2. Environment variables (LOGGINGKIT_SUBSYSTEM, LOGGINGKIT_LEVEL,
     LOGGINGKIT_CATEGORIES, LOGGINGKIT_SINK)
  3. Project config: .loggingkit.json in the working directory or above

A project file looks like::

    {
      "subsystem": "com.example.app",
      "level": "info",
      "categories": ["network:debug", "trace"],
      "sink": "stream"
    }
"""

import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from .categories import OPT_IN_CATEGORIES, LogCategories, parse_category_spec
from .severity import Severity


CONFIG_FILENAME = ".loggingkit.json"

ENV_PREFIX = "LOGGINGKIT_"
KEYS = ("subsystem", "level", "categories", "sink")

DEFAULT_SINK = "logging"


@dataclass
class Settings:
    """Resolved logger settings."""
    subsystem: str
    level: Optional[Severity] = None
    categories: List[str] = field(default_factory=list)
    sink: str = DEFAULT_SINK
    source: Optional[Path] = None     # project file the values came from


def default_subsystem():
    """Subsystem used when none is configured: the running script's name."""
    argv0 = sys.argv[0] if sys.argv and sys.argv[0] else ""
    stem = Path(argv0).stem
    if not stem or stem == "-c":
        return "python"
    return stem


# ---------------------------------------------------------------------------
# Config file locations
# ---------------------------------------------------------------------------
def find_project_config(start_dir=None):
    """Walk up from start_dir looking for .loggingkit.json.

    Returns the path if found, None otherwise.
    """
    current = Path(start_dir or os.getcwd()).resolve()
    for _ in range(20):  # safety limit
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------
def load_json(path):
    """Load a JSON object from a file, returning empty dict on error."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def load_project_config(start_dir=None):
    """Load the nearest .loggingkit.json walking upward from start_dir."""
    path = find_project_config(start_dir)
    if path:
        return load_json(path), path
    return {}, None


def load_env_config(environ: Mapping[str, str] = None):
    """Read LOGGINGKIT_* variables. Empty values count as unset."""
    environ = os.environ if environ is None else environ
    cfg = {}
    for key in KEYS:
        value = environ.get(ENV_PREFIX + key.upper(), "").strip()
        if value:
            cfg[key] = value
    return cfg


def _split_specs(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    elif not isinstance(value, (list, tuple)):
        raise ValueError(f"categories must be a list or a comma-separated "
                         f"string, not {type(value).__name__}")
    return [str(v).strip() for v in value if str(v).strip()]


def _coerce_level(value) -> Optional[Severity]:
    if value is None or isinstance(value, Severity):
        return value
    return Severity.parse(value)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------
def resolve_settings(subsystem: str = None,
                     level: Union[Severity, str, None] = None,
                     categories: List[str] = None,
                     sink: str = None,
                     environ: Mapping[str, str] = None,
                     start_dir=None) -> Settings:
    """Resolve settings using three-layer precedence.

    For each key, checks (in order):
      1. The explicit argument
      2. LOGGINGKIT_<KEY> environment variable
      3. Project .loggingkit.json

    Raises:
        ValueError: if a configured level or category spec is malformed
    """
    explicit = {"subsystem": subsystem, "level": level,
                "categories": categories, "sink": sink}
    env_cfg = load_env_config(environ)
    project_cfg, project_path = load_project_config(start_dir)

    resolved = {}
    source = None
    for key in KEYS:
        if explicit[key] is not None:
            resolved[key] = explicit[key]
        elif key in env_cfg:
            resolved[key] = env_cfg[key]
        elif project_cfg.get(key) is not None:
            resolved[key] = project_cfg[key]
            source = project_path

    specs = _split_specs(resolved.get("categories"))
    for spec in specs:
        parse_category_spec(spec)  # validate early, at startup

    return Settings(
        subsystem=str(resolved.get("subsystem") or default_subsystem()),
        level=_coerce_level(resolved.get("level")),
        categories=specs,
        sink=str(resolved.get("sink") or DEFAULT_SINK),
        source=source,
    )


def category_overrides(specs: List[str],
                       table: LogCategories) -> Dict[str, Optional[Severity]]:
    """Turn category specs into per-label sink thresholds.

    Opt-in categories start switched off; explicit specs win. Names not
    (yet) registered in the table are used as labels directly, which
    matches the default label of a later registration.
    """
    overrides: Dict[str, Optional[Severity]] = {}
    for name in OPT_IN_CATEGORIES:
        overrides[_label_for(name, table)] = None
    for spec in specs:
        cfg = parse_category_spec(spec)
        overrides[_label_for(cfg.name, table)] = cfg.level
    return overrides


def _label_for(name: str, table: LogCategories) -> str:
    cat = table.get(name)
    return cat.label if cat is not None else name
