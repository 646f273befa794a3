"""
Unit tests for the clean up command
"""

import pytest

from decl_reorganizer.commands.cleanup import CleanUpCommand
from decl_reorganizer.core.base_processor import ProcessingStatus


class TestCleanUpCommand:
    """Test reorganizing files on disk"""

    def test_reorganize_file(
        self, tmp_path, test_config, unordered_python_source, ordered_python_source
    ):
        source = tmp_path / "service.py"
        source.write_text(unordered_python_source)

        result = CleanUpCommand(test_config).execute(source)

        assert result.status == ProcessingStatus.SUCCESS
        assert result.changes_applied == 3
        assert source.read_text() == ordered_python_source

    def test_backup_taken_before_writing(
        self, tmp_path, test_config, unordered_python_source
    ):
        source = tmp_path / "service.py"
        test_config.backup.compression = False
        source.write_text(unordered_python_source)
        command = CleanUpCommand(test_config)

        command.execute(source)

        file_result = command.results[0]
        assert file_result.backup_path is not None
        sessions = command.backup_manager.list_sessions()
        assert len(sessions) == 1
        assert sessions[0]["files_backed_up"] == [str(source)]

    def test_dry_run(self, tmp_path, test_config, unordered_python_source):
        test_config.dry_run = True
        source = tmp_path / "service.py"
        source.write_text(unordered_python_source)
        command = CleanUpCommand(test_config)

        result = command.execute(source)

        assert result.status == ProcessingStatus.SUCCESS
        assert source.read_text() == unordered_python_source
        assert command.backup_manager is None
        diff = command.results[0].diff
        assert diff.startswith("--- a/service.py\n+++ b/service.py\n")
        assert "@@ " in diff

    def test_no_changes(self, tmp_path, test_config, ordered_python_source):
        source = tmp_path / "service.py"
        source.write_text(ordered_python_source)

        result = CleanUpCommand(test_config).execute(source)

        assert result.status == ProcessingStatus.NO_CHANGES
        assert source.read_text() == ordered_python_source

    def test_invalid_path(self, tmp_path, test_config):
        result = CleanUpCommand(test_config).execute(tmp_path / "missing.py")

        assert result.status == ProcessingStatus.ERROR
        assert "Invalid path" in result.error_message

    def test_unsupported_file_is_skipped(self, tmp_path, test_config):
        notes = tmp_path / "notes.txt"
        notes.write_text("class A:\n    pass\n")
        command = CleanUpCommand(test_config)

        result = command.execute(notes)

        assert command.results[0].status == ProcessingStatus.SKIPPED
        assert result.status == ProcessingStatus.NO_CHANGES

    def test_directory(self, tmp_path, test_config, unordered_python_source):
        (tmp_path / "a.py").write_text(unordered_python_source)
        nested = tmp_path / "pkg"
        nested.mkdir()
        (nested / "b.py").write_text(unordered_python_source)
        hidden = tmp_path / ".venv"
        hidden.mkdir()
        (hidden / "c.py").write_text(unordered_python_source)

        flat = CleanUpCommand(test_config)
        flat.execute(tmp_path)
        assert [r.file_path.name for r in flat.results] == ["a.py"]

        recursive = CleanUpCommand(test_config)
        recursive.execute(tmp_path, recursive=True)
        assert [r.file_path.name for r in recursive.results] == ["a.py", "b.py"]
        assert (hidden / "c.py").read_text() == unordered_python_source

    def test_backups_are_not_processed(
        self, tmp_path, test_config, unordered_python_source
    ):
        (tmp_path / "a.py").write_text(unordered_python_source)
        test_config.backup.compression = False
        CleanUpCommand(test_config).execute(tmp_path)

        (tmp_path / "a.py").write_text(unordered_python_source)
        command = CleanUpCommand(test_config)
        command.execute(tmp_path, recursive=True)

        assert [r.file_path.name for r in command.results] == ["a.py"]

    def test_apply_black(self, tmp_path, test_config):
        test_config.reorganize.apply_black = True
        source = tmp_path / "service.py"
        source.write_text(
            "class A:\n    def f(self):\n        return {'a':1}\n    x=1\n"
        )

        result = CleanUpCommand(test_config).execute(source)

        assert result.status == ProcessingStatus.SUCCESS
        content = source.read_text()
        assert '    x = 1\n' in content
        assert 'return {"a": 1}' in content
        assert content.index("x = 1") < content.index("def f")

    def test_preserves_crlf(
        self, tmp_path, test_config, unordered_python_source, ordered_python_source
    ):
        source = tmp_path / "service.py"
        source.write_bytes(unordered_python_source.replace("\n", "\r\n").encode())

        CleanUpCommand(test_config).execute(source)

        assert source.read_bytes() == ordered_python_source.replace(
            "\n", "\r\n"
        ).encode()

    def test_invalid_result_is_not_written(
        self, tmp_path, test_config, mocker, unordered_python_source
    ):
        source = tmp_path / "service.py"
        source.write_text(unordered_python_source)
        command = CleanUpCommand(test_config)
        mocker.patch.object(command.processor, "validate_content", return_value=False)

        result = command.execute(source)

        assert result.status == ProcessingStatus.ERROR
        assert source.read_text() == unordered_python_source

    def test_unreadable_file_does_not_abort_batch(
        self, tmp_path, test_config, unordered_python_source
    ):
        (tmp_path / "a.py").write_bytes(b"\xff\xfe\x00 not utf-8")
        (tmp_path / "b.py").write_text(unordered_python_source)
        command = CleanUpCommand(test_config)

        result = command.execute(tmp_path)

        assert result.status == ProcessingStatus.ERROR
        statuses = {r.file_path.name: r.status for r in command.results}
        assert statuses == {
            "a.py": ProcessingStatus.ERROR,
            "b.py": ProcessingStatus.SUCCESS,
        }

    def test_unexpected_error_does_not_abort_batch(
        self, tmp_path, test_config, mocker, unordered_python_source
    ):
        (tmp_path / "a.py").write_text(unordered_python_source)
        (tmp_path / "b.py").write_text(unordered_python_source)
        command = CleanUpCommand(test_config)
        execute = command.processor.manager.execute

        def fail_on_first(document):
            if document.name == "a.py":
                raise ValueError("Invalid range")
            return execute(document)

        mocker.patch.object(
            command.processor.manager, "execute", side_effect=fail_on_first
        )

        result = command.execute(tmp_path)

        assert result.status == ProcessingStatus.ERROR
        statuses = {r.file_path.name: r.status for r in command.results}
        assert statuses == {
            "a.py": ProcessingStatus.ERROR,
            "b.py": ProcessingStatus.SUCCESS,
        }
        assert (tmp_path / "a.py").read_text() == unordered_python_source
        assert command.backup_manager.current_session is None
        assert len(command.backup_manager.list_sessions()) == 1

    def test_backup_session_is_finalized_when_batch_fails(
        self, tmp_path, test_config, mocker, unordered_python_source
    ):
        source = tmp_path / "service.py"
        source.write_text(unordered_python_source)
        command = CleanUpCommand(test_config)
        mocker.patch.object(
            command.processor, "process_batch", side_effect=RuntimeError("boom")
        )

        with pytest.raises(RuntimeError):
            command.execute(source)

        assert command.backup_manager.current_session is None
