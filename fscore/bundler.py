"""
darklua adapter.

darklua resolves, bundles and minifies the source tree into the output
target. Firesync treats it as a black box and only runs its CLI:

    darklua process <input> <output> --config <config>
"""
import subprocess

from fscore.errors import BundleError
from fscore.log import debug_log

DEFAULT_DARKLUA = "darklua"
DEFAULT_CONFIG_PATH = "./.darklua.json"


def process(input_path, output_path, config_path=DEFAULT_CONFIG_PATH, darklua=DEFAULT_DARKLUA):
    """
    Run darklua over input_path, writing to output_path.

    Args:
        input_path: Source file or directory
        output_path: Output file or directory (same kind as input_path)
        config_path: darklua configuration file, passed through untouched
        darklua: darklua executable

    Raises:
        BundleError: darklua could not be run or reported errors. Every
            reported line is kept in BundleError.errors.
    """
    command = [
        darklua, "process", str(input_path), str(output_path),
        "--config", str(config_path),
    ]
    debug_log(f"Running {' '.join(command)}")

    try:
        result = subprocess.run(command, capture_output=True, text=True)
    except FileNotFoundError:
        raise BundleError(
            [f"darklua executable not found: {darklua}"],
            suggestion="Install darklua or set 'darklua' in firesync.json",
        )
    except OSError as e:
        raise BundleError([f"failed to run {darklua}: {e}"])

    if result.returncode != 0:
        raise BundleError(_collect_errors(result))

    for line in result.stdout.splitlines():
        if line.strip():
            debug_log(f"darklua: {line.strip()}")


def _collect_errors(result):
    """One entry per non-empty line darklua printed (stderr first, stdout as fallback)."""
    errors = [line.strip() for line in (result.stderr or "").splitlines() if line.strip()]
    if not errors:
        errors = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
    if not errors:
        errors = [f"darklua exited with status {result.returncode}"]
    return errors
