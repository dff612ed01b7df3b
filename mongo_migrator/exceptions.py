from typing import List, Optional


class MigrationError(Exception):
    """Base class for every error raised while migrating collections."""


class ConfigurationError(MigrationError):
    """A mandatory answer is missing, so nothing can be exported."""


class InputStreamError(MigrationError):
    """The operator's input stream failed while a question was pending."""


class SubprocessFailure(MigrationError):
    """An export or import command exited non-zero or could not be launched."""

    def __init__(self, command: List[str], returncode: Optional[int] = None, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        if returncode is None:
            message = f"Could not run {command[0]}: {output}"
        else:
            message = f"{command[0]} exited with status {returncode}"
            if output:
                message += f": {output.strip()}"
        super().__init__(message)


class CleanupFailure(MigrationError):
    """A temporary export file could not be removed."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        super().__init__(f"Could not remove {path}: {reason}" if reason else f"Could not remove {path}")
