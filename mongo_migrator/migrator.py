import logging
import os
import time
from enum import Enum
from typing import Callable, Iterable, List, Optional, Tuple

from tqdm import tqdm

from .commands import (
    format_command,
    parse_collections,
    resolve_temp_file_path,
    resolve_temp_name,
    synthesize_export,
    synthesize_import,
)
from .exceptions import CleanupFailure, ConfigurationError, MigrationError
from .models import AnswerSet, MigrationConfig, Question
from .prompts import ConsoleTerminal, PromptEngine
from .runner import ProcessRunner, remove_file
from .utils import progress_bar_iter

logger = logging.getLogger(__name__)

# (collection, export file, export command)
ExportStep = Tuple[str, str, List[str]]


class MigrationState(str, Enum):
    PROMPTING = "prompting"
    EXPORTING = "exporting"
    IMPORTING = "importing"
    CLEANUP = "cleanup"
    DONE = "done"
    ABORTED = "aborted"


def _now_millis() -> int:
    return int(time.time() * 1000)


class CollectionMigrator:
    def __init__(self, config: MigrationConfig, questions: Iterable[Question], terminal=None,
                 runner: Optional[ProcessRunner] = None, clock: Optional[Callable[[], int]] = None):
        self.config = config
        self.questions = list(questions)
        self.terminal = terminal or ConsoleTerminal()
        self.runner = runner or ProcessRunner(dry_run=config.dry_run)
        self.clock = clock or _now_millis
        self.state = MigrationState.PROMPTING
        self.answers: Optional[AnswerSet] = None
        # Export files created by this run, in export order
        self.artifacts: List[str] = []
        self.migration_stats = {
            "collections_exported": [],
            "collections_imported": [],
            "artifacts_removed": [],
            "cleanup_failures": [],
            "error": None,
        }

    def print(self, text: str, style: str = "white"):
        # Clears any active progress bar while the line is written
        with tqdm.external_write_mode():
            self.terminal.write_line(text, style)

    def prompt(self) -> AnswerSet:
        """Run the interactive question flow."""
        self.state = MigrationState.PROMPTING
        return PromptEngine(self.terminal).run_all(self.questions)

    def plan_exports(self, answers: AnswerSet) -> List[ExportStep]:
        """
        Build every export command up front so a configuration problem is
        reported before anything runs.

        Raises:
            ConfigurationError: If no collection was given or the database is missing
        """
        collections = parse_collections(answers.origin.get("collection"))
        if not collections:
            raise ConfigurationError("You must specify at least one collection to export the data from")

        timestamp = self.clock()
        plan = []
        for collection in collections:
            path = resolve_temp_file_path(self.config.temp_dir, resolve_temp_name(collection, timestamp))
            cmd = synthesize_export(answers.origin, collection, path, self.config.export_binary)
            plan.append((collection, path, cmd))
        return plan

    def _run_command(self, cmd: List[str]) -> str:
        self.print(format_command(cmd))
        return self.runner.run(cmd)

    def export_all(self, plan: List[ExportStep]):
        """Export each collection in order, stopping at the first failure."""
        self.state = MigrationState.EXPORTING
        if not self.config.dry_run:
            try:
                os.makedirs(self.config.temp_dir, exist_ok=True)
            except OSError as e:
                raise ConfigurationError(
                    f"Cannot write export files to {self.config.temp_dir}: {e.strerror or e}") from e

        for collection, path, cmd in progress_bar_iter(plan, total=len(plan), desc="Exporting",
                                                       get_desc=lambda step: step[0],
                                                       disable=not self.config.show_progress):
            self._run_command(cmd)
            self.artifacts.append(path)
            self.migration_stats["collections_exported"].append(collection)
            logger.info(f"Exported {collection} to {path}")

    def import_all(self, answers: AnswerSet, plan: List[ExportStep]):
        """
        Import each export file in order, stopping at the first failure.

        Destination collections are paired with origin collections by
        position; positions without a destination collection reuse the
        origin name. Completed imports are never rolled back.
        """
        self.state = MigrationState.IMPORTING
        targets = parse_collections(answers.destination.get("collection"))
        if targets and len(targets) != len(plan):
            logger.warning(f"{len(plan)} collections exported but {len(targets)} destination "
                           f"collections given, unmatched ones keep their origin name")

        for index, (collection, path, _) in progress_bar_iter(enumerate(plan), total=len(plan), desc="Importing",
                                                               get_desc=lambda step: step[1][0],
                                                               disable=not self.config.show_progress):
            target = targets[index] if index < len(targets) else ""
            cmd = synthesize_import(answers.destination, answers.origin, collection, path,
                                    target_collection=target, binary=self.config.import_binary)
            self._run_command(cmd)
            self.migration_stats["collections_imported"].append(target or collection)
            logger.info(f"Imported {path} into {target or collection}")

    def cleanup(self):
        """Remove the export files of this run. Failures are reported, never raised."""
        self.state = MigrationState.CLEANUP
        if self.config.dry_run:
            logger.info("Dry run, no temporary export files to remove")
            return

        self.print("Removing temporary export files")
        for path in self.artifacts:
            try:
                remove_file(path)
                self.migration_stats["artifacts_removed"].append(path)
            except CleanupFailure as e:
                logger.error(str(e))
                self.migration_stats["cleanup_failures"].append(path)
                self.print(str(e), "yellow")

    def abort(self, error: MigrationError):
        self.state = MigrationState.ABORTED
        self.migration_stats["error"] = str(error)
        logger.error(f"Migration failed: {error}")
        self.print(str(error), "red")

    def run(self) -> bool:
        """
        Ask the questions, export every collection, optionally import them and
        optionally remove the export files.

        Returns:
            True when every export (and import, if requested) succeeded
        """
        try:
            self.answers = self.prompt()
            plan = self.plan_exports(self.answers)
            self.export_all(plan)
            if self.answers.will_import:
                self.import_all(self.answers, plan)
            else:
                logger.info("Import skipped by the operator")
        except MigrationError as e:
            self.abort(e)

        succeeded = self.state != MigrationState.ABORTED

        # Runs after an aborted export/import too; only files that were fully exported are listed
        if self.artifacts and not self.answers.keep_backup:
            self.cleanup()
        elif self.artifacts and not self.config.dry_run:
            self.print(f"Export files kept in {self.config.temp_dir}")

        if succeeded:
            self.state = MigrationState.DONE
            self.print("Data migration was successfully performed!", "green")
        else:
            self.state = MigrationState.ABORTED
        self._log_summary()
        return succeeded

    def _log_summary(self):
        """Log migration summary statistics."""
        logger.info("=== Migration Summary ===")
        logger.info(f"Final state: {self.state.value}")
        logger.info(f"Collections exported: {', '.join(self.migration_stats['collections_exported']) or 'none'}")
        logger.info(f"Collections imported: {', '.join(self.migration_stats['collections_imported']) or 'none'}")
        if self.migration_stats["artifacts_removed"]:
            logger.info(f"Export files removed: {len(self.migration_stats['artifacts_removed'])}")
        if self.migration_stats["cleanup_failures"]:
            logger.info(f"Export files that could not be removed: {', '.join(self.migration_stats['cleanup_failures'])}")
        if self.migration_stats["error"]:
            logger.info(f"Error: {self.migration_stats['error']}")
