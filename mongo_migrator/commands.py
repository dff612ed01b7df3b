import os
import shlex
from typing import Dict, List, Optional

from .exceptions import ConfigurationError

DEFAULT_HOST = "localhost"
DEFAULT_PORT = "27017"
MASKED_PASSWORD = "****"


def parse_collections(raw: Optional[str]) -> List[str]:
    """Split a comma separated collection answer into collection names.

    Whitespace around each name is trimmed, empty entries are dropped and
    the order typed by the operator is kept.
    """
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def resolve_temp_name(collection: str, timestamp: int) -> str:
    return f"{collection}-{timestamp}"


def resolve_temp_file_path(temp_dir: str, filename: str) -> str:
    return os.path.join(temp_dir, f"{filename}.json")


def _connection_args(answers: Dict[str, str]) -> List[str]:
    return [
        "--host", answers.get("host") or DEFAULT_HOST,
        "--port", answers.get("port") or DEFAULT_PORT,
    ]


def _credential_args(answers: Dict[str, str]) -> List[str]:
    args = []
    if answers.get("username"):
        args.extend(["--username", answers["username"]])
    # Passed as a single argv entry, so whitespace and quotes survive intact
    if answers.get("password"):
        args.extend(["--password", answers["password"]])
    return args


def synthesize_export(origin: Dict[str, str], collection: str, artifact_path: str,
                      binary: str = "mongoexport") -> List[str]:
    """Build the export command for one collection of the origin server.

    Args:
        origin: Raw answers for the origin server
        collection: The collection to export
        artifact_path: File the exported documents are written to
        binary: Export executable to run

    Raises:
        ConfigurationError: If the database or collection is missing
    """
    db = origin.get("db")
    if not db or not collection:
        raise ConfigurationError("You must specify a database and a collection to export the data from")

    cmd = [binary]
    cmd.extend(_connection_args(origin))
    cmd.extend(["--db", db])
    cmd.extend(["--collection", collection])
    cmd.extend(_credential_args(origin))
    cmd.extend(["--out", artifact_path])
    return cmd


def synthesize_import(destination: Dict[str, str], origin: Dict[str, str], collection: str,
                      artifact_path: str, target_collection: str = "",
                      binary: str = "mongoimport") -> List[str]:
    """Build the import command that loads one export file into the destination.

    The database falls back to the origin database and the collection to
    the origin collection name when the destination answers are empty.
    Nothing is validated here; a bad destination surfaces as a failure of
    the import tool itself.

    Args:
        destination: Raw answers for the destination server
        origin: Raw answers for the origin server
        collection: Origin collection the export file was produced from
        artifact_path: File produced by the matching export
        target_collection: Destination collection for this export, if given
        binary: Import executable to run
    """
    cmd = [binary]
    cmd.extend(_connection_args(destination))
    cmd.extend(["--db", destination.get("db") or origin.get("db", "")])
    cmd.extend(["--collection", target_collection or collection])
    cmd.extend(_credential_args(destination))
    cmd.extend(["--file", artifact_path])
    return cmd


def format_command(cmd: List[str]) -> str:
    """Render a command for display, shell quoted and with the password masked."""
    shown = list(cmd)
    for i, arg in enumerate(shown[:-1]):
        if arg == "--password":
            shown[i + 1] = MASKED_PASSWORD
    return shlex.join(shown)
