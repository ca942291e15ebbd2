"""
Error types for the Firesync build pipeline and development server.
"""


class FiresyncError(Exception):
    """Base exception with an optional location, offending line and hint."""

    title = "Firesync Error"

    def __init__(self, message, file_name=None, line_number=None, column=None,
                 context=None, suggestion=None):
        self.message = message
        self.file_name = file_name
        self.line_number = line_number
        self.column = column
        self.context = context  # The offending line
        self.suggestion = suggestion  # How to fix it
        super().__init__(self._format_error())

    def _format_error(self):
        """Format the error message with location, context and suggestion."""
        lines = [self.title]
        if self.file_name:
            lines.append(f" in {self.file_name}")
        if self.line_number:
            lines.append(f" at line {self.line_number}")
            if self.column:
                lines.append(f", column {self.column}")
        lines.append(f": {self.message}")

        if self.context:
            lines.append(f"\n   > {self.context}")

        if self.suggestion:
            lines.append(f"\n   hint: {self.suggestion}")

        return "".join(lines)


class PathValidationError(FiresyncError):
    """Input/output paths are missing or of different kinds."""
    title = "Invalid paths"


class BundleError(FiresyncError):
    """darklua reported one or more failures. All of them are kept in .errors."""
    title = "darklua failed"

    def __init__(self, errors, suggestion=None):
        self.errors = list(errors)
        count = len(self.errors)
        summary = f"{count} {'errors' if count > 1 else 'error'} in darklua processing"
        if self.errors:
            summary += "\n" + "\n".join(f"   - {e}" for e in self.errors)
        super().__init__(summary, suggestion=suggestion)


class InlineFileError(FiresyncError):
    """A script referenced by NS/NLS could not be read."""
    title = "Cannot inline script"

    def __init__(self, path, reason, file_name=None, line_number=None):
        self.path = path
        self.reason = reason
        super().__init__(
            f"failed opening {path}: {reason}",
            file_name=file_name,
            line_number=line_number,
            suggestion="Check that the referenced file exists in the output directory",
        )


class LuaSyntaxError(FiresyncError):
    """A file could not be parsed as Lua."""
    title = "Syntax error"


class TunnelError(FiresyncError):
    """The localtunnel session could not be opened."""
    title = "Tunnel error"


class WatcherError(FiresyncError):
    """The filesystem watcher could not be started."""
    title = "Watcher error"


class PreviewError(FiresyncError):
    """The preview HTTP server could not be started."""
    title = "Preview server error"


def get_line_context(source_code, line_number):
    """Extract the line of code from source by line number (1-based)."""
    if not source_code or line_number is None:
        return None
    source_lines = source_code.split('\n')
    if 0 < line_number <= len(source_lines):
        return source_lines[line_number - 1].strip()
    return None
