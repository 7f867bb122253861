"""Tests for loggingkit.config — three-layer settings resolution."""

import json

import pytest

from loggingkit.categories import LogCategories
from loggingkit.config import (
    CONFIG_FILENAME, category_overrides, default_subsystem,
    find_project_config, load_json, resolve_settings,
)
from loggingkit.severity import Severity


def _write_project(directory, data):
    path = directory / CONFIG_FILENAME
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestDefaults:

    def test_no_config_anywhere(self, clean_env):
        s = resolve_settings(environ={})
        assert s.subsystem == default_subsystem()
        assert s.level is None
        assert s.categories == []
        assert s.sink == "logging"
        assert s.source is None

    def test_default_subsystem_from_argv(self, monkeypatch):
        monkeypatch.setattr("sys.argv", ["/usr/bin/my-tool.py"])
        assert default_subsystem() == "my-tool"

    def test_default_subsystem_fallback(self, monkeypatch):
        monkeypatch.setattr("sys.argv", [""])
        assert default_subsystem() == "python"


class TestProjectFile:

    def test_found_walking_up(self, clean_env):
        path = _write_project(clean_env, {"subsystem": "proj"})
        nested = clean_env / "a" / "b"
        nested.mkdir(parents=True)
        assert find_project_config(nested) == path.resolve()

    def test_values_loaded(self, clean_env):
        path = _write_project(clean_env, {
            "subsystem": "proj", "level": "error",
            "categories": ["network:debug"], "sink": "stream",
        })
        s = resolve_settings(environ={})
        assert s.subsystem == "proj"
        assert s.level is Severity.ERROR
        assert s.categories == ["network:debug"]
        assert s.sink == "stream"
        assert s.source == path.resolve()

    def test_malformed_json_ignored(self, clean_env):
        (clean_env / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
        assert load_json(clean_env / CONFIG_FILENAME) == {}
        assert resolve_settings(environ={}).level is None

    def test_non_object_json_ignored(self, clean_env):
        (clean_env / CONFIG_FILENAME).write_text("[1, 2]", encoding="utf-8")
        assert load_json(clean_env / CONFIG_FILENAME) == {}

    def test_non_utf8_file_ignored(self, clean_env):
        (clean_env / CONFIG_FILENAME).write_bytes(b'{"level": "\xff"}')
        assert load_json(clean_env / CONFIG_FILENAME) == {}
        assert resolve_settings(environ={}).level is None

    def test_unreadable_path_ignored(self, clean_env):
        # A directory in place of the file raises OSError on open
        assert load_json(clean_env) == {}


class TestPrecedence:

    def test_env_beats_file(self, clean_env):
        _write_project(clean_env, {"subsystem": "proj", "level": "error"})
        s = resolve_settings(environ={"LOGGINGKIT_LEVEL": "debug"})
        assert s.level is Severity.DEBUG
        assert s.subsystem == "proj"

    def test_explicit_beats_env(self, clean_env):
        s = resolve_settings(subsystem="cli",
                             environ={"LOGGINGKIT_SUBSYSTEM": "env"})
        assert s.subsystem == "cli"

    def test_env_categories_comma_separated(self, clean_env):
        s = resolve_settings(environ={"LOGGINGKIT_CATEGORIES": "network, trace:info,"})
        assert s.categories == ["network", "trace:info"]

    def test_empty_env_value_is_unset(self, clean_env):
        _write_project(clean_env, {"sink": "stream"})
        s = resolve_settings(environ={"LOGGINGKIT_SINK": "  "})
        assert s.sink == "stream"

    def test_real_environment_used_by_default(self, clean_env, monkeypatch):
        monkeypatch.setenv("LOGGINGKIT_SUBSYSTEM", "from-env")
        assert resolve_settings().subsystem == "from-env"

    def test_explicit_severity_instance(self, clean_env):
        assert resolve_settings(level=Severity.FAULT, environ={}).level is Severity.FAULT


class TestValidation:

    def test_bad_level(self, clean_env):
        with pytest.raises(ValueError):
            resolve_settings(environ={"LOGGINGKIT_LEVEL": "loud"})

    def test_bad_category_spec(self, clean_env):
        with pytest.raises(ValueError):
            resolve_settings(categories=["network:loud"], environ={})


class TestCategoryOverrides:

    def test_opt_in_off_by_default(self):
        assert category_overrides([], LogCategories()) == {'trace': None}

    def test_explicit_spec_wins(self):
        overrides = category_overrides(["trace"], LogCategories())
        assert overrides['trace'] is Severity.DEBUG

    def test_name_mapped_to_label(self):
        table = LogCategories()
        table.register('db', label='database')
        overrides = category_overrides(["db:error"], table)
        assert overrides['database'] is Severity.ERROR
        assert 'db' not in overrides

    def test_unregistered_name_used_as_label(self):
        overrides = category_overrides(["later:info"], LogCategories())
        assert overrides['later'] is Severity.INFO


class TestCategoriesType:

    @pytest.mark.parametrize("value", [5, {"network": "debug"}, True])
    def test_wrong_type_in_project_file(self, clean_env, value):
        _write_project(clean_env, {"categories": value})
        with pytest.raises(ValueError, match="categories must be"):
            resolve_settings(environ={})

    def test_tuple_accepted(self, clean_env):
        s = resolve_settings(categories=("network", "trace:off"), environ={})
        assert s.categories == ["network", "trace:off"]
