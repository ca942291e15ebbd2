"""
Tests for the build pipeline (darklua, then the inlining pass).
"""
import os
import shutil
import tempfile

import pytest

from builder import PatchReport, build, validate_paths
from fscore import bundler
from fscore.errors import BundleError, LuaSyntaxError, PathValidationError


def write(path, content):
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)


def read(path):
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


@pytest.fixture
def copying_darklua(monkeypatch):
    """Stand in for darklua: copy the input to the output untouched."""
    calls = []

    def process(input_path, output_path, config_path=bundler.DEFAULT_CONFIG_PATH,
                darklua=bundler.DEFAULT_DARKLUA):
        calls.append((str(input_path), str(output_path), str(config_path)))
        if os.path.isdir(input_path):
            shutil.copytree(input_path, output_path, dirs_exist_ok=True)
        else:
            shutil.copyfile(input_path, output_path)

    monkeypatch.setattr(bundler, 'process', process)
    return calls


@pytest.fixture
def project():
    """An empty src/ and build/ pair."""
    with tempfile.TemporaryDirectory() as tmpdir:
        src = os.path.join(tmpdir, 'src')
        out = os.path.join(tmpdir, 'build')
        os.mkdir(src)
        os.mkdir(out)
        yield src, out


class TestValidatePaths:
    """Tests for validate_paths()."""

    def test_mismatched_kinds(self, project):
        """A directory input needs a directory output."""
        src, out = project
        out_file = os.path.join(out, 'main.lua')
        write(out_file, '')
        with pytest.raises(PathValidationError) as exc_info:
            validate_paths(src, out_file)
        assert "same type of path" in str(exc_info.value)

    def test_missing_input(self, project):
        """A missing input file is rejected."""
        src, out = project
        write(os.path.join(out, 'main.lua'), '')
        with pytest.raises(PathValidationError):
            validate_paths(os.path.join(src, 'nope.lua'), os.path.join(out, 'main.lua'))

    def test_missing_output(self, project):
        """A missing output file is rejected."""
        src, out = project
        write(os.path.join(src, 'main.lua'), '')
        with pytest.raises(PathValidationError):
            validate_paths(os.path.join(src, 'main.lua'), os.path.join(out, 'nope.lua'))

    def test_two_directories(self, project):
        """Two existing directories are fine."""
        validate_paths(*project)


class TestBuild:
    """Tests for build()."""

    def test_end_to_end(self, project, copying_darklua):
        """NS("child", 1) gets child.lua inlined and keeps its second argument."""
        src, out = project
        write(os.path.join(src, 'main.lua'), 'NS("child", 1)\n')
        write(os.path.join(src, 'child.lua'), 'return 1')

        result = build(src, out, config_path="custom.json")

        assert result.is_ok()
        report = result.unwrap()
        assert isinstance(report, PatchReport)
        assert report.ok
        assert read(os.path.join(out, 'main.lua')) == 'NS([==[return 1]==], 1)\n'
        assert read(os.path.join(src, 'main.lua')) == 'NS("child", 1)\n'
        assert copying_darklua == [(src, out, "custom.json")]

    def test_single_file(self, project, copying_darklua):
        """A file build patches the one output file."""
        src, out = project
        write(os.path.join(src, 'main.lua'), 'NLS("child.lua")')
        write(os.path.join(out, 'main.lua'), '')
        write(os.path.join(out, 'child.lua'), 'print("child")')

        result = build(os.path.join(src, 'main.lua'), os.path.join(out, 'main.lua'))

        assert result.is_ok()
        assert result.value.patched == 1
        assert read(os.path.join(out, 'main.lua')) == 'NLS([==[print("child")]==])'

    def test_invalid_paths_are_an_err(self, project, copying_darklua):
        """Validation errors are returned, darklua is never run."""
        src, out = project
        result = build(src, os.path.join(out, 'missing'))
        assert result.is_err()
        assert isinstance(result.error, PathValidationError)
        assert copying_darklua == []

    def test_bundle_errors_are_an_err(self, project, monkeypatch):
        """darklua's error list reaches the caller."""
        src, out = project

        def process(*args, **kwargs):
            raise BundleError(["first", "second"])

        monkeypatch.setattr(bundler, 'process', process)
        result = build(src, out)
        assert result.is_err()
        assert result.error.errors == ["first", "second"]
        with pytest.raises(BundleError):
            result.unwrap()

    def test_file_failures_are_reported(self, project, copying_darklua):
        """A broken output file doesn't fail the build, it is listed."""
        src, out = project
        write(os.path.join(src, 'broken.lua'), 'local = 1')
        write(os.path.join(src, 'main.lua'), 'print(1)')

        result = build(src, out)

        assert result.is_ok()
        report = result.value
        assert not report.ok
        (path, error), = report.failures
        assert os.path.basename(path) == 'broken.lua'
        assert isinstance(error, LuaSyntaxError)

    def test_single_file_syntax_error_is_an_err(self, project, copying_darklua):
        """In file mode a patch failure fails the build."""
        src, out = project
        write(os.path.join(src, 'main.lua'), 'local = 1')
        write(os.path.join(out, 'main.lua'), '')
        result = build(os.path.join(src, 'main.lua'), os.path.join(out, 'main.lua'))
        assert result.is_err()
        assert isinstance(result.error, LuaSyntaxError)
