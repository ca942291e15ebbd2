"""
Console logging for Firesync.

Everything goes to stderr with a coloured level prefix. Debug lines are only
printed once set_verbose(True) has been called. The watcher, the build
consumer and the tunnel relays log from their own threads, so writes are
serialized.
"""
import sys
import threading

_VERBOSE = False
_lock = threading.Lock()


def set_verbose(value):
    """Set the global verbose flag."""
    global _VERBOSE
    _VERBOSE = value


def _emit(prefix, message):
    with _lock:
        print(f"{prefix} {message}", file=sys.stderr, flush=True)


def log(message):
    """Log informational messages to stderr."""
    _emit("\033[92m\033[1mINFO:\033[0m", message)


def debug_log(message):
    """Log a debug message to stderr if verbose mode is enabled."""
    if _VERBOSE:
        _emit("\033[94mDEBUG:\033[0m", message)


def warn_log(message):
    _emit("\033[93m\033[1mWARN:\033[0m", message)


def error_log(message):
    _emit("\033[91m\033[1mERROR:\033[0m", message)
