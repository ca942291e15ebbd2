# Firesync - Core Components
"""
Core modules for Firesync:
- errors: Error types with location and hints
- escape: [==[ long bracket escaping
- grammar: Lark grammar for Lua / Luau
- syntax: Lossless parse and render of Lua sources
- visitor: NS/NLS call matching and inlining
- patcher: Patch pass over files and directories
- bundler: darklua adapter
- result: Ok/Err build results

The development server pieces (watcher, tasks, preview, tunnel) are imported
from their modules directly.
"""

from .errors import FiresyncError
from .escape import escape, long_bracket
from .grammar import lua_grammar
from .syntax import parse, render
from .visitor import INSTANCE_ALIASES, InlineRewriter, match_call
from .patcher import patch_directory, patch_file
from .bundler import process
from .result import Err, Ok

__all__ = [
    'FiresyncError',
    'escape',
    'long_bracket',
    'lua_grammar',
    'parse',
    'render',
    'INSTANCE_ALIASES',
    'InlineRewriter',
    'match_call',
    'patch_directory',
    'patch_file',
    'process',
    'Err',
    'Ok',
]
