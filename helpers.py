#!/usr/bin/env python3
import sys
import os
import re
import argparse
import logging
from datetime import datetime
from typing import List, Optional, Tuple

from mongo_migrator.exceptions import CleanupFailure
from mongo_migrator.runner import remove_file
from mongo_migrator.utils import format_size

# Export files are named <collection>-<milliseconds since epoch>.json
BACKUP_PATTERN = re.compile(r'^(?P<collection>.+)-(?P<timestamp>\d+)\.json$')


def ensure_temp_directory(temp_dir: Optional[str] = None):
    """Ensure the directory holding the export files exists."""
    from config.migration_config import MIGRATION_CONFIG
    temp_dir = temp_dir or MIGRATION_CONFIG.temp_dir
    if not os.path.exists(temp_dir):
        os.makedirs(temp_dir)
    return temp_dir


def get_backup_files(temp_dir: str, collection: Optional[str] = None) -> List[Tuple[str, str, int]]:
    """Find export files kept from previous runs.

    Args:
        temp_dir: Directory holding the export files
        collection: Optional. Only return files exported from this collection.

    Returns:
        List of (path, collection, timestamp) tuples, oldest first
    """
    if not os.path.isdir(temp_dir):
        return []

    backups = []
    for filename in os.listdir(temp_dir):
        match = BACKUP_PATTERN.match(filename)
        if not match:
            continue
        if collection and match.group('collection') != collection:
            continue
        backups.append((os.path.join(temp_dir, filename), match.group('collection'), int(match.group('timestamp'))))
    return sorted(backups, key=lambda backup: (backup[2], backup[1]))


def list_backups(temp_dir: Optional[str] = None):
    """Print the kept export files with their collection, date and size."""
    from config.migration_config import MIGRATION_CONFIG
    temp_dir = temp_dir or MIGRATION_CONFIG.temp_dir

    backups = get_backup_files(temp_dir)
    if not backups:
        print(f"No export files found in {temp_dir}")
        return

    name_width = max(len("Collection"), *(len(collection) for _, collection, _ in backups)) + 2
    print(f"{'Collection':<{name_width}} {'Exported at':<20} {'Size':>10}  File")
    print("-" * (name_width + 36))
    total_size = 0
    for path, collection, timestamp in backups:
        size = os.path.getsize(path)
        total_size += size
        exported_at = datetime.fromtimestamp(timestamp / 1000).strftime('%Y-%m-%d %H:%M:%S')
        print(f"{collection:<{name_width}} {exported_at:<20} {format_size(size):>10}  {path}")
    print(f"\n{len(backups)} files, {format_size(total_size)} in total")


def clean_backups(temp_dir: Optional[str] = None, collection: Optional[str] = None) -> int:
    """Remove kept export files.

    Args:
        temp_dir: Directory holding the export files
        collection: Optional. Only remove files exported from this collection.

    Returns:
        int: Number of files removed
    """
    from config.migration_config import MIGRATION_CONFIG
    temp_dir = temp_dir or MIGRATION_CONFIG.temp_dir

    removed_count = 0
    for path, _, _ in get_backup_files(temp_dir, collection):
        try:
            print(f"Removing file: {path}")
            remove_file(path)
            removed_count += 1
        except CleanupFailure as e:
            print(f"Error removing file {path}: {e}")

    if removed_count > 0:
        print(f"Successfully removed {removed_count} export files")
    else:
        print("No export files found to remove")
    return removed_count


def show_questions():
    """Print the questions asked by the migrate command, in order."""
    from config.migration_config import QUESTIONS
    from mongo_migrator.models import AnswerSet

    placeholder = AnswerSet()
    for number, question in enumerate(QUESTIONS, start=1):
        text = question.resolve_prompt(placeholder)
        print(f"{number:>2}. [{question.domain.value}.{question.key}] {text}")


def help():
    """Display help information about available commands."""
    print("""
Mongo Collection Migration Tool - Helper Commands
================================================

Usage: python helpers.py <command> [options]

Available Commands:
------------------

Migration:
  migrate                     Ask for the connection details and migrate the collections
    --verbose                 Show detailed log messages during migration
    --dry-run                 Print the export/import commands without running them
    --temp-dir DIR            Directory for the temporary export files (default: temp)
  show_questions              List the questions asked by migrate

Export files:
  ensure_temp_directory       Create the directory for export files if missing
  list_backups                List export files kept by previous runs
    --temp-dir DIR            Directory holding the export files
  clean_backups               Remove export files kept by previous runs
    --temp-dir DIR            Directory holding the export files
    --collection NAME         Only remove files exported from this collection

Other:
  help                        Show this help message
""")


def migrate(verbose=False, dry_run=False, temp_dir=None) -> bool:
    """
    Run the interactive collection migration.

    This function asks the operator for the origin and destination servers,
    exports every requested collection and imports it into the destination.

    Args:
        verbose: If True, show detailed log messages during migration.
        dry_run: If True, print the commands instead of running them.
        temp_dir: Optional. Overrides the directory for export files.

    Returns:
        bool: True if the migration succeeded
    """
    from mongo_migrator.migrator import CollectionMigrator
    from config.migration_config import MIGRATION_CONFIG, QUESTIONS

    # Configure root logger
    root_logger = logging.getLogger()

    # Store original handlers and level
    original_handlers = root_logger.handlers.copy()
    original_level = root_logger.level

    if verbose:
        root_logger.setLevel(logging.INFO)
        # Ensure we have a console handler
        if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(logging.Formatter('%(levelname)s:%(name)s: %(message)s'))
            root_logger.addHandler(console_handler)
    else:
        # For non-verbose mode, only show ERROR messages
        root_logger.setLevel(logging.ERROR)

    overrides = {"verbose": verbose, "dry_run": dry_run}
    if temp_dir:
        overrides["temp_dir"] = temp_dir
    config = MIGRATION_CONFIG.model_copy(update=overrides)

    try:
        migrator = CollectionMigrator(config, QUESTIONS)
        return migrator.run()
    finally:
        # Always restore original logger configuration
        root_logger.handlers = original_handlers
        root_logger.setLevel(original_level)


def main():
    if len(sys.argv) < 2:
        help()
        return

    command = sys.argv[1]

    if command == "help":
        help()
    elif command == "ensure_temp_directory":
        print(f"Export files are written to {ensure_temp_directory()}")

    elif command == "show_questions":
        show_questions()

    elif command == "list_backups":
        parser = argparse.ArgumentParser(description="List kept export files")
        parser.add_argument("--temp-dir", type=str, help="Directory holding the export files")
        args, _ = parser.parse_known_args(sys.argv[2:])

        list_backups(args.temp_dir)

    elif command == "clean_backups":
        parser = argparse.ArgumentParser(description="Remove kept export files")
        parser.add_argument("--temp-dir", type=str, help="Directory holding the export files")
        parser.add_argument("--collection", type=str, help="Only remove files of this collection")
        args, _ = parser.parse_known_args(sys.argv[2:])

        clean_backups(args.temp_dir, args.collection)

    elif command == "migrate":
        parser = argparse.ArgumentParser(description="Run the collection migration")
        parser.add_argument("--verbose", action="store_true", help="Show detailed log messages during migration")
        parser.add_argument("--dry-run", action="store_true", help="Print the commands without running them")
        parser.add_argument("--temp-dir", type=str, help="Directory for the temporary export files")
        args, _ = parser.parse_known_args(sys.argv[2:])

        if not migrate(verbose=args.verbose, dry_run=args.dry_run, temp_dir=args.temp_dir):
            sys.exit(1)

    else:
        print(f"Unknown command: {command}")
        print("Use 'help' to see available commands")


if __name__ == '__main__':
    main()
