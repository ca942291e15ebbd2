"""
Unit tests for firesync.json loading.
"""
import json
import os
import tempfile
from pathlib import Path

import pytest

from fscore import config
from fscore.config import ConfigError, FiresyncConfig, find_config, load_config, write_default_config


@pytest.fixture
def tmpdir_path():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


def write_json(path, data):
    with open(path, 'w', encoding='utf-8') as f:
        f.write(data if isinstance(data, str) else json.dumps(data))
    return path


class TestFiresyncConfig:
    """Tests for the settings model."""

    def test_defaults(self):
        """The defaults match the reference setup."""
        cfg = FiresyncConfig()
        assert cfg.input == Path("src")
        assert cfg.output == Path("build")
        assert cfg.darklua_configuration == Path(".darklua.json")
        assert cfg.port == 3000
        assert cfg.debounce_seconds == 2.0
        assert cfg.debounce_max_wait == 10.0
        assert cfg.queue_size == 32
        assert cfg.recursive is False

    def test_invalid_port(self):
        """Ports outside 0-65535 are rejected."""
        with pytest.raises(ValueError):
            FiresyncConfig(port=70000)


class TestLoadConfig:
    """Tests for load_config() and find_config()."""

    def test_load_file(self, tmpdir_path):
        """Keys from the file override the defaults."""
        path = write_json(os.path.join(tmpdir_path, 'firesync.json'), {
            "input": "lua/src",
            "output": "lua/out",
            "darklua_configuration": "bundle.json",
        })
        cfg = load_config(path)
        assert cfg.input == Path("lua/src")
        assert cfg.output == Path("lua/out")
        assert cfg.darklua_configuration == Path("bundle.json")
        assert cfg.port == 3000

    def test_missing_explicit_file(self, tmpdir_path):
        """An explicit path that doesn't exist is an error."""
        with pytest.raises(ConfigError):
            load_config(os.path.join(tmpdir_path, 'nope.json'))

    def test_invalid_json(self, tmpdir_path):
        """Broken JSON reports its position."""
        path = write_json(os.path.join(tmpdir_path, 'firesync.json'), '{\n  "input": ,\n}')
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.line_number == 2

    def test_invalid_values(self, tmpdir_path):
        """Validation errors name the offending key."""
        path = write_json(os.path.join(tmpdir_path, 'firesync.json'), {"debounce_seconds": 0})
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert "debounce_seconds" in exc_info.value.message

    def test_defaults_without_file(self, tmpdir_path, monkeypatch):
        """No config file anywhere means defaults."""
        monkeypatch.setattr(config, 'CONFIG_PATHS', [os.path.join(tmpdir_path, 'firesync.json')])
        assert find_config() is None
        assert load_config() == FiresyncConfig()

    def test_search_order(self, tmpdir_path):
        """The first existing file wins."""
        second = write_json(os.path.join(tmpdir_path, 'second.json'), {})
        found = find_config([os.path.join(tmpdir_path, 'first.json'), second])
        assert found == Path(second)

    def test_write_default_round_trip(self, tmpdir_path):
        """A written default config loads back to the defaults."""
        path = write_default_config(os.path.join(tmpdir_path, 'firesync.json'))
        assert load_config(path) == FiresyncConfig()
