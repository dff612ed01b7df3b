import logging
import os
import subprocess
from typing import List

from .commands import format_command
from .exceptions import CleanupFailure, SubprocessFailure

logger = logging.getLogger(__name__)


class ProcessRunner:
    """Run export/import commands one at a time, blocking until each exits."""

    def __init__(self, dry_run: bool = False):
        self.dry_run = dry_run

    def run(self, cmd: List[str]) -> str:
        """Run a command and return its standard output.

        Raises:
            SubprocessFailure: If the command exits non-zero or cannot be started
        """
        if self.dry_run:
            logger.info(f"Dry run, not executing: {format_command(cmd)}")
            return ""

        logger.info(f"Running: {format_command(cmd)}")
        try:
            result = subprocess.run(cmd, check=True, capture_output=True, text=True, errors="replace")
        except subprocess.CalledProcessError as e:
            # mongoexport/mongoimport report their progress and errors on stderr
            raise SubprocessFailure(cmd, e.returncode, e.stderr or e.stdout or "") from e
        except OSError as e:
            raise SubprocessFailure(cmd, None, str(e)) from e
        return result.stdout


def remove_file(path: str) -> None:
    """Remove a temporary export file.

    Raises:
        CleanupFailure: If the file cannot be removed
    """
    try:
        os.remove(path)
    except OSError as e:
        raise CleanupFailure(path, e.strerror or str(e)) from e
    logger.info(f"Removed temporary export file {path}")
