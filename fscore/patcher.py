"""
Patch pass over darklua output.

Every file is parsed, each qualifying NS/NLS call gets its child script
inlined, and the file is written back in place. A file is only written once
all of its calls were rewritten, so a failure never leaves half a patch.
"""
from pathlib import Path

from fscore.errors import FiresyncError
from fscore.log import debug_log, error_log
from fscore.syntax import parse, render
from fscore.visitor import InlineRewriter, PatchVisitor


def resolve_output_root(output):
    """Child scripts live next to a single output file, or inside an output directory."""
    output = Path(output)
    if output.is_file():
        return output.parent
    return output


def patch_source(text, output_root, file_name=None, resolve=None):
    """
    Inline every qualifying call of a Lua source string.

    Returns:
        (patched_text, matches)
    """
    tree = parse(text, file_name=file_name)
    rewriter = InlineRewriter(output_root, resolve=resolve, file_name=file_name)
    matches = PatchVisitor(tree, rewriter).run()
    return render(tree), matches


def patch_file(file, output):
    """
    Patch one file in place.

    Args:
        file: The Lua file to rewrite
        output: The build output (file or directory) child scripts resolve against

    Returns:
        The number of calls that were inlined

    Raises:
        LuaSyntaxError: The file is not valid Lua
        InlineFileError: A referenced script could not be read
        OSError: The file itself could not be read or written
    """
    file = Path(file)
    with open(file, 'r', encoding='utf-8', newline='') as f:
        source = f.read()

    patched, matches = patch_source(source, resolve_output_root(output), file_name=str(file))

    if patched != source:
        with open(file, 'w', encoding='utf-8', newline='') as f:
            f.write(patched)
    debug_log(f"Patched {file}: {len(matches)} call(s) inlined")
    return len(matches)


def patch_directory(path, recursive=False):
    """
    Patch every file of a directory. Failures are logged per file and never
    stop the siblings from being patched.

    Args:
        path: The output directory
        recursive: Also descend into sub-directories

    Returns:
        List of (file, error) for the files that could not be patched
    """
    path = Path(path)
    failures = []
    for entry in sorted(path.iterdir()):
        if entry.is_dir():
            if recursive:
                failures.extend(_patch_subdirectory(entry, path))
            else:
                debug_log(f"Skipping directory {entry}")
            continue
        error = _patch_entry(entry, path)
        if error is not None:
            failures.append((entry, error))
    return failures


def _patch_subdirectory(directory, output_root):
    failures = []
    for entry in sorted(directory.rglob('*')):
        if entry.is_file():
            error = _patch_entry(entry, output_root)
            if error is not None:
                failures.append((entry, error))
    return failures


def _patch_entry(file, output_root):
    try:
        patch_file(file, output_root)
    except (FiresyncError, OSError, UnicodeDecodeError) as e:
        error_log(str(e))
        return e
    return None
