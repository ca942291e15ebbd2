"""
Build outcomes.

build() never raises: it returns Ok(PatchReport) or Err(FiresyncError) and
the caller decides whether that ends the command or just flips a status.
An Ok from directory mode can still list files that failed to patch, which
is what `succeeded` accounts for.
"""


class Result:
    """Ok or Err. Only Ok is truthy."""

    def is_ok(self):
        return isinstance(self, Ok)

    def is_err(self):
        return isinstance(self, Err)

    def __bool__(self):
        return self.is_ok()

    @property
    def succeeded(self):
        """Ok, and no file was left unpatched."""
        return self.is_ok() and not getattr(self.value, 'failures', None)

    def error_messages(self):
        """One line per problem: each darklua error, each failed file, or the error itself."""
        if self.is_ok():
            return [f"{path}: {error}" for path, error in getattr(self.value, 'failures', None) or []]
        errors = getattr(self.error, 'errors', None)
        if errors is not None:
            return [str(e) for e in errors]
        return [getattr(self.error, 'message', None) or str(self.error)]

    def unwrap(self):
        """Get the value or raise the wrapped error."""
        if self.is_ok():
            return self.value
        raise self.error

    def unwrap_or(self, default):
        if self.is_ok():
            return self.value
        return default


class Ok(Result):
    def __init__(self, value=None):
        self.value = value

    def __repr__(self):
        return f"Ok({self.value!r})"


class Err(Result):
    def __init__(self, error):
        self.error = error

    def __repr__(self):
        return f"Err({self.error!r})"

    def __str__(self):
        return str(self.error)
