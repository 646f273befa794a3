"""
Clean up command: reorganizes the declarations of files on disk
"""

import ast
import difflib
import logging
from dataclasses import replace
from pathlib import Path

import black

from decl_reorganizer.core.backup_manager import BackupManager
from decl_reorganizer.core.base_processor import (
    BaseProcessor,
    ProcessingStatus,
    ProcessResult,
)
from decl_reorganizer.core.cleanup_manager import CleanUpManager
from decl_reorganizer.core.comment_helper import CodeLanguage
from decl_reorganizer.core.config import Config
from decl_reorganizer.core.document import Document
from decl_reorganizer.core.text_buffer import TextBuffer

logger = logging.getLogger(__name__)


class DeclarationProcessor(BaseProcessor):
    """Reorganizes one file at a time"""

    def __init__(self, config: Config, backup_manager: BackupManager | None = None):
        super().__init__()
        self.config = config
        self.backup_manager = backup_manager
        self.manager = CleanUpManager(config)

    def can_process(self, file_path: Path) -> bool:
        return file_path.is_file() and file_path.suffix in self.config.file_extensions

    def process_file(self, file_path: Path) -> ProcessResult:
        try:
            document = Document.from_file(file_path)
            original_content = document.text

            summary = self.manager.execute(document)
            content = document.text

            if document.language == CodeLanguage.PYTHON and (
                self.config.reorganize.apply_black
            ):
                content = self._format_with_black(file_path, content)

            if content == original_content:
                self.logger.info(f"No changes needed for {file_path}")
                return ProcessResult(
                    file_path=file_path,
                    status=ProcessingStatus.NO_CHANGES,
                    message="No changes needed",
                )

            if not self.validate_content(file_path, content):
                return ProcessResult(
                    file_path=file_path,
                    status=ProcessingStatus.ERROR,
                    error_message="Reorganized content is not valid, file left untouched",
                )

            diff = "".join(
                difflib.unified_diff(
                    original_content.splitlines(keepends=True),
                    content.splitlines(keepends=True),
                    fromfile=f"a/{file_path.name}",
                    tofile=f"b/{file_path.name}",
                )
            )

            backup_path = None
            if self.config.dry_run:
                self.logger.info(f"[DRY RUN] Would reorganize {file_path}")
            else:
                if self.backup_manager:
                    backup_path = self.backup_manager.backup_file(file_path)
                replace(document, buffer=TextBuffer(content)).save()
                self.logger.info(f"Reorganized {file_path}")

            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.SUCCESS,
                changes_applied=summary.moves + summary.paddings,
                message="File reorganized successfully",
                diff=diff,
                backup_path=backup_path,
            )

        except (OSError, UnicodeDecodeError) as e:
            self.logger.error(f"Error processing {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.ERROR,
                error_message=str(e),
            )
        except Exception as e:
            self.logger.error(f"Unexpected error processing {file_path}: {e}")
            return ProcessResult(
                file_path=file_path,
                status=ProcessingStatus.ERROR,
                error_message=f"Unexpected error: {e}",
            )

    def validate_content(self, file_path: Path, content: str) -> bool:
        if file_path.suffix not in (".py", ".pyi"):
            return True
        try:
            ast.parse(content, filename=str(file_path))
            return True
        except SyntaxError as e:
            self.logger.error(f"Reorganized {file_path} no longer parses: {e}")
            return False

    def _format_with_black(self, file_path: Path, content: str) -> str:
        mode = black.Mode(
            line_length=self.config.reorganize.black_line_length,
            is_pyi=file_path.suffix == ".pyi",
        )
        try:
            return black.format_str(content, mode=mode)
        except black.InvalidInput as e:
            self.logger.warning(f"Black formatting failed for {file_path}: {e}")
            return content


class CleanUpCommand:
    """Command handler for reorganizing files and directories"""

    def __init__(self, config: Config):
        self.config = config
        self.backup_manager = None
        if config.backup.enabled and not config.dry_run:
            self.backup_manager = BackupManager(
                backup_dir=config.backup.directory,
                compression=config.backup.compression,
                keep_sessions=config.backup.keep_sessions,
            )
        self.processor = DeclarationProcessor(config, self.backup_manager)
        self.results: list[ProcessResult] = []

    def execute(self, path: Path, recursive: bool = False) -> ProcessResult:
        """
        Reorganize a file or every supported file of a directory

        Args:
            path: File or directory to process
            recursive: Descend into subdirectories

        Returns:
            ProcessResult for the whole path
        """
        if not path.exists():
            logger.error(f"Invalid path: {path}")
            return ProcessResult(
                file_path=path,
                status=ProcessingStatus.ERROR,
                error_message=f"Invalid path: {path}",
            )

        files = [path] if path.is_file() else self.find_files(path, recursive)
        if self.backup_manager:
            self.backup_manager.start_session("reorganize")

        try:
            results = self.processor.process_batch(files)
        finally:
            if self.backup_manager:
                self.backup_manager.finalize_session()
        self.results = results

        errors = [r for r in results if r.status == ProcessingStatus.ERROR]
        changed = [r for r in results if r.status == ProcessingStatus.SUCCESS]
        logger.info(
            f"Processed {len(results)} files: {len(changed)} reorganized, "
            f"{len(errors)} errors"
        )

        if errors:
            status = ProcessingStatus.ERROR
        elif changed:
            status = ProcessingStatus.SUCCESS
        else:
            status = ProcessingStatus.NO_CHANGES

        return ProcessResult(
            file_path=path,
            status=status,
            changes_applied=sum(r.changes_applied for r in results),
            message=f"Processed {len(results)} files",
            error_message="; ".join(str(r) for r in errors) or None,
        )

    def find_files(self, directory: Path, recursive: bool) -> list[Path]:
        """Supported files in directory, skipping hidden and backup folders"""
        pattern = "**/*" if recursive else "*"
        backup_dir = Path(self.config.backup.directory).resolve()
        files = []
        for candidate in sorted(directory.glob(pattern)):
            relative_parts = candidate.relative_to(directory).parts
            if any(part.startswith(".") for part in relative_parts):
                continue
            if backup_dir in candidate.resolve().parents:
                continue
            if candidate.is_file() and candidate.suffix in self.config.file_extensions:
                files.append(candidate)
        return files
