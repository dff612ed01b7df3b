import os
from unittest.mock import patch

import pytest
from tqdm import tqdm

from config.migration_config import QUESTIONS
from mongo_migrator.migrator import CollectionMigrator, MigrationState
from mongo_migrator.models import MigrationConfig
from tests.conftest import FakeRunner, FakeTerminal, arg

TIMESTAMP = 1700000000000


def make_migrator(script, temp_dir, runner=None, **config):
    terminal = FakeTerminal(script)
    runner = runner or FakeRunner()
    migrator = CollectionMigrator(MigrationConfig(temp_dir=temp_dir, show_progress=False, **config),
                                  QUESTIONS, terminal=terminal, runner=runner, clock=lambda: TIMESTAMP)
    return migrator, terminal, runner


def artifact(temp_dir, collection):
    return os.path.join(temp_dir, f"{collection}-{TIMESTAMP}.json")


class TestConfigurationErrors:
    @pytest.mark.parametrize("origin", [
        {"db": "", "collection": "c1"},
        {"db": "mydb", "collection": ""},
        {"db": "mydb", "collection": " , ,"},
    ])
    def test_aborts_before_running_anything(self, answer_script, temp_dir, origin):
        migrator, terminal, runner = make_migrator(answer_script(origin), temp_dir)
        assert migrator.run() is False
        assert runner.calls == []
        assert migrator.state == MigrationState.ABORTED
        assert "You must specify" in terminal.text

    def test_missing_database_aborts_before_first_export(self, answer_script, temp_dir):
        migrator, _, runner = make_migrator(answer_script({"collection": "c1,c2"}), temp_dir)
        assert migrator.run() is False
        assert runner.calls == []


class TestMigration:
    def test_exports_then_imports_in_order(self, answer_script, temp_dir):
        script = answer_script({"db": "mydb", "collection": "c1,c2"}, will_import="",
                               destination={"db": "", "collection": ""})
        migrator, terminal, runner = make_migrator(script, temp_dir)

        assert migrator.run() is True
        assert [cmd[0] for cmd in runner.calls] == ["mongoexport", "mongoexport", "mongoimport", "mongoimport"]
        assert [arg(cmd, "--collection") for cmd in runner.calls] == ["c1", "c2", "c1", "c2"]
        assert [arg(cmd, "--db") for cmd in runner.imports] == ["mydb", "mydb"]
        assert [arg(cmd, "--file") for cmd in runner.imports] == [artifact(temp_dir, "c1"), artifact(temp_dir, "c2")]
        assert migrator.state == MigrationState.DONE
        assert "Data migration was successfully performed!" in terminal.text

    def test_export_uses_default_server(self, answer_script, temp_dir):
        migrator, _, runner = make_migrator(answer_script({"db": "mydb", "collection": "c1"}, will_import="no"), temp_dir)
        assert migrator.run() is True
        export = runner.exports[0]
        assert arg(export, "--host") == "localhost"
        assert arg(export, "--port") == "27017"
        assert "--username" not in export and "--password" not in export
        assert arg(export, "--out") == artifact(temp_dir, "c1")

    def test_import_declined_skips_destination_and_import(self, answer_script, temp_dir):
        script = answer_script({"db": "mydb", "collection": "c1"}, will_import="no")
        migrator, terminal, runner = make_migrator(script, temp_dir)
        assert migrator.run() is True
        assert runner.imports == []
        assert migrator.answers.destination == {}
        assert terminal.prompts_read == 8

    def test_destination_collections_pair_by_position(self, answer_script, temp_dir):
        script = answer_script({"db": "mydb", "collection": "a, b, c"},
                               destination={"db": "archive", "collection": "x"})
        migrator, _, runner = make_migrator(script, temp_dir)
        assert migrator.run() is True
        assert [arg(cmd, "--collection") for cmd in runner.imports] == ["x", "b", "c"]
        assert [arg(cmd, "--db") for cmd in runner.imports] == ["archive"] * 3

    def test_creates_temp_directory(self, answer_script, temp_dir):
        migrator, _, _ = make_migrator(answer_script({"db": "mydb", "collection": "c1"}, will_import="n"), temp_dir)
        migrator.run()
        assert os.path.isdir(temp_dir)

    def test_progress_bar_is_cleared_around_messages(self, answer_script, temp_dir):
        script = answer_script({"db": "mydb", "collection": "c1,c2"}, will_import="n")
        terminal = FakeTerminal(script)
        runner = FakeRunner()
        migrator = CollectionMigrator(MigrationConfig(temp_dir=temp_dir, show_progress=True), QUESTIONS,
                                      terminal=terminal, runner=runner, clock=lambda: TIMESTAMP)

        with patch.object(tqdm, "external_write_mode", wraps=tqdm.external_write_mode) as write_mode:
            assert migrator.run() is True
        # Question prompts are written before any bar exists
        assert write_mode.call_count == len(terminal.lines) - terminal.prompts_read
        assert len(runner.exports) == 2


class TestFailures:
    def test_failed_export_stops_everything(self, answer_script, temp_dir):
        runner = FakeRunner(fail_when=lambda cmd: cmd[0] == "mongoexport" and arg(cmd, "--collection") == "c2")
        script = answer_script({"db": "mydb", "collection": "c1,c2,c3"})
        migrator, terminal, runner = make_migrator(script, temp_dir, runner=runner)

        assert migrator.run() is False
        assert [arg(cmd, "--collection") for cmd in runner.exports] == ["c1", "c2"]
        assert runner.imports == []
        assert os.path.exists(artifact(temp_dir, "c1"))
        assert migrator.state == MigrationState.ABORTED
        assert ("mongoexport exited with status 1: connection refused", "red") in terminal.lines

    def test_failed_export_without_backup_removes_finished_exports(self, answer_script, temp_dir):
        runner = FakeRunner(fail_when=lambda cmd: cmd[0] == "mongoexport" and arg(cmd, "--collection") == "c2")
        script = answer_script({"db": "mydb", "collection": "c1,c2"}, keep_backup="no")
        migrator, _, runner = make_migrator(script, temp_dir, runner=runner)

        assert migrator.run() is False
        assert runner.imports == []
        assert not os.path.exists(artifact(temp_dir, "c1"))
        assert migrator.migration_stats["artifacts_removed"] == [artifact(temp_dir, "c1")]

    def test_failed_import_stops_remaining_imports(self, answer_script, temp_dir):
        runner = FakeRunner(fail_when=lambda cmd: cmd[0] == "mongoimport")
        script = answer_script({"db": "mydb", "collection": "c1,c2"})
        migrator, _, runner = make_migrator(script, temp_dir, runner=runner)

        assert migrator.run() is False
        assert len(runner.exports) == 2
        assert len(runner.imports) == 1
        assert migrator.migration_stats["collections_imported"] == []

    def test_closed_input_aborts_without_running(self, temp_dir):
        migrator, _, runner = make_migrator(["localhost", "27017"], temp_dir)
        assert migrator.run() is False
        assert runner.calls == []
        assert migrator.state == MigrationState.ABORTED

    def test_unusable_temp_dir_aborts_before_exporting(self, answer_script, tmp_path):
        blocked = tmp_path / "temp"
        blocked.write_text("not a directory")
        script = answer_script({"db": "mydb", "collection": "c1"})
        migrator, terminal, runner = make_migrator(script, str(blocked))

        assert migrator.run() is False
        assert runner.calls == []
        assert migrator.state == MigrationState.ABORTED
        assert any(text.startswith("Cannot write export files to") and style == "red"
                   for text, style in terminal.lines)


class TestCleanup:
    def test_keeps_exports_by_default(self, answer_script, temp_dir):
        migrator, _, _ = make_migrator(answer_script({"db": "mydb", "collection": "c1,c2"}), temp_dir)
        assert migrator.run() is True
        assert os.path.exists(artifact(temp_dir, "c1"))
        assert os.path.exists(artifact(temp_dir, "c2"))

    def test_removes_exports_when_backup_declined(self, answer_script, temp_dir):
        script = answer_script({"db": "mydb", "collection": "c1,c2"}, keep_backup="N")
        migrator, _, _ = make_migrator(script, temp_dir)
        assert migrator.run() is True
        assert os.listdir(temp_dir) == []

    def test_removal_failure_does_not_fail_the_run(self, answer_script, temp_dir):
        script = answer_script({"db": "mydb", "collection": "c1,c2"}, keep_backup="0")
        migrator, terminal, _ = make_migrator(script, temp_dir)
        original_export_all = migrator.export_all

        def export_then_lose_file(plan):
            original_export_all(plan)
            os.remove(artifact(temp_dir, "c1"))

        migrator.export_all = export_then_lose_file

        assert migrator.run() is True
        assert migrator.migration_stats["cleanup_failures"] == [artifact(temp_dir, "c1")]
        assert migrator.migration_stats["artifacts_removed"] == [artifact(temp_dir, "c2")]
        assert any(style == "yellow" for _, style in terminal.lines)

    def test_dry_run_leaves_no_files_and_skips_cleanup(self, answer_script, temp_dir):
        from mongo_migrator.runner import ProcessRunner

        script = answer_script({"db": "mydb", "collection": "c1"}, keep_backup="no")
        migrator, _, _ = make_migrator(script, temp_dir, runner=ProcessRunner(dry_run=True), dry_run=True)
        assert migrator.run() is True
        assert not os.path.exists(temp_dir)
        assert migrator.migration_stats["cleanup_failures"] == []

    def test_dry_run_with_backup_does_not_claim_files_were_kept(self, answer_script, temp_dir):
        from mongo_migrator.runner import ProcessRunner

        script = answer_script({"db": "mydb", "collection": "c1"}, will_import="no")
        migrator, terminal, _ = make_migrator(script, temp_dir, runner=ProcessRunner(dry_run=True), dry_run=True)
        assert migrator.run() is True
        assert "Export files kept" not in terminal.text
