"""
Unit tests for the darklua adapter.
"""
import subprocess

import pytest

from fscore import bundler
from fscore.errors import BundleError


@pytest.fixture
def fake_run(monkeypatch):
    """Replace subprocess.run; returns the list of recorded commands."""
    calls = []
    outcome = {"returncode": 0, "stdout": "", "stderr": ""}

    def run(command, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, outcome["returncode"],
                                           stdout=outcome["stdout"], stderr=outcome["stderr"])

    monkeypatch.setattr(bundler.subprocess, 'run', run)
    return calls, outcome


class TestProcess:
    """Tests for process()."""

    def test_command_line(self, fake_run):
        """darklua is invoked as `process <in> <out> --config <cfg>`."""
        calls, _ = fake_run
        bundler.process("src", "build", config_path="cfg.json", darklua="/bin/darklua")
        assert calls == [["/bin/darklua", "process", "src", "build", "--config", "cfg.json"]]

    def test_default_config(self, fake_run):
        """Without a config path, ./.darklua.json is passed."""
        calls, _ = fake_run
        bundler.process("src", "build")
        assert calls[0][0] == "darklua"
        assert calls[0][-1] == "./.darklua.json"

    def test_every_error_reported(self, fake_run):
        """Each line darklua prints on failure is kept."""
        _, outcome = fake_run
        outcome.update(returncode=1, stderr="error: bad rule\n\nerror: missing file\n")
        with pytest.raises(BundleError) as exc_info:
            bundler.process("src", "build")
        err = exc_info.value
        assert err.errors == ["error: bad rule", "error: missing file"]
        assert "2 errors in darklua processing" in str(err)

    def test_stdout_fallback(self, fake_run):
        """Errors printed on stdout are used when stderr is empty."""
        _, outcome = fake_run
        outcome.update(returncode=2, stdout="unexpected token\n")
        with pytest.raises(BundleError) as exc_info:
            bundler.process("src", "build")
        assert exc_info.value.errors == ["unexpected token"]
        assert "1 error in darklua processing" in str(exc_info.value)

    def test_silent_failure(self, fake_run):
        """A failure without output still produces one error."""
        _, outcome = fake_run
        outcome.update(returncode=3)
        with pytest.raises(BundleError) as exc_info:
            bundler.process("src", "build")
        assert exc_info.value.errors == ["darklua exited with status 3"]

    def test_missing_executable(self, monkeypatch):
        """A missing darklua binary is a BundleError with a hint."""
        def run(command, **kwargs):
            raise FileNotFoundError(command[0])

        monkeypatch.setattr(bundler.subprocess, 'run', run)
        with pytest.raises(BundleError) as exc_info:
            bundler.process("src", "build", darklua="no-such-darklua")
        assert "no-such-darklua" in exc_info.value.errors[0]
        assert exc_info.value.suggestion
