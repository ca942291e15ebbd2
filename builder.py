"""
Firesync build pipeline: darklua first, then the NS/NLS inlining pass.
"""
from pathlib import Path

from fscore import bundler
from fscore.errors import FiresyncError, PathValidationError
from fscore.log import debug_log, error_log, log, set_verbose
from fscore.patcher import patch_directory, patch_file
from fscore.result import Err, Ok


class PatchReport:
    """What the patch pass did on a successful build."""

    def __init__(self, output, patched=None, failures=None):
        self.output = Path(output)
        self.patched = patched  # calls inlined, single-file mode only
        self.failures = failures or []  # (file, error) pairs, directory mode only

    @property
    def ok(self):
        return not self.failures

    def __repr__(self):
        return f"PatchReport({self.output}, patched={self.patched}, failures={len(self.failures)})"


def validate_paths(input_path, output_path):
    """Reject missing paths and file/directory mismatches before any I/O happens."""
    input_path, output_path = Path(input_path), Path(output_path)
    if input_path.is_dir() != output_path.is_dir():
        raise PathValidationError(
            "The input path should be the same type of path as the output path.",
            suggestion="Use two directories or two files",
        )
    if not input_path.exists():
        raise PathValidationError(f"The input path does not exist: {input_path}")
    if not output_path.exists():
        raise PathValidationError(f"The output path does not exist: {output_path}")


def build(input_path, output_path, config_path=bundler.DEFAULT_CONFIG_PATH,
          darklua=bundler.DEFAULT_DARKLUA, recursive=False, verbose=None):
    """
    Bundle input_path into output_path with darklua, then inline child scripts.

    Args:
        input_path: Source file or directory
        output_path: Output file or directory, same kind as input_path
        config_path: darklua configuration file
        darklua: darklua executable
        recursive: Patch sub-directories of the output too
        verbose: If set, toggles debug logging

    Returns:
        Ok(PatchReport) or Err(FiresyncError). Errors are logged, never raised.
    """
    if verbose is not None:
        set_verbose(verbose)

    # STEP 1: VALIDATE PATHS
    try:
        validate_paths(input_path, output_path)
    except PathValidationError as e:
        error_log(str(e))
        return Err(e)

    input_path, output_path = Path(input_path), Path(output_path)
    debug_log(f"Building {input_path} -> {output_path}")

    # STEP 2: BUNDLE
    try:
        bundler.process(input_path, output_path, config_path=config_path, darklua=darklua)
    except FiresyncError as e:
        error_log(str(e))
        return Err(e)

    # STEP 3: PATCH
    if output_path.is_dir():
        failures = patch_directory(output_path, recursive=recursive)
        report = PatchReport(output_path, failures=failures)
        if failures:
            error_log(f"{len(failures)} file(s) could not be patched in {output_path}")
    else:
        try:
            patched = patch_file(output_path, output_path)
        except (FiresyncError, OSError, UnicodeDecodeError) as e:
            error_log(str(e))
            return Err(e)
        report = PatchReport(output_path, patched=patched)

    log(f"Built {output_path}")
    return Ok(report)
