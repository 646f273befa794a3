"""
Base processor interface for file processing operations
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

logger = logging.getLogger(__name__)


class ProcessingStatus(Enum):
    """Status of processing operation"""

    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"
    NO_CHANGES = "no_changes"


@dataclass
class ProcessResult:
    """Result of a processing operation"""

    file_path: Path
    status: ProcessingStatus
    changes_applied: int = 0
    message: str | None = None
    error_message: str | None = None
    diff: str | None = None
    backup_path: Path | None = None

    @property
    def is_success(self) -> bool:
        """Check if processing was successful"""
        return self.status in [ProcessingStatus.SUCCESS, ProcessingStatus.NO_CHANGES]

    def __str__(self) -> str:
        if self.status == ProcessingStatus.SUCCESS:
            return f"✓ {self.file_path.name}: {self.changes_applied} changes applied"
        elif self.status == ProcessingStatus.NO_CHANGES:
            return f"= {self.file_path.name}: No changes needed"
        elif self.status == ProcessingStatus.SKIPPED:
            return f"⊝ {self.file_path.name}: Skipped"
        else:
            return f"✗ {self.file_path.name}: {self.error_message}"


class BaseProcessor(ABC):
    """Abstract base class for file processors"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def can_process(self, file_path: Path) -> bool:
        """Check if this processor can handle the given file"""
        pass

    @abstractmethod
    def process_file(self, file_path: Path) -> ProcessResult:
        """Process a single file"""
        pass

    @abstractmethod
    def validate_content(self, file_path: Path, content: str) -> bool:
        """Check that processed content is still valid for its file type"""
        pass

    def process_batch(self, file_paths: list[Path]) -> list[ProcessResult]:
        """Process multiple files, skipping unsupported ones"""
        results = []
        for file_path in file_paths:
            if self.can_process(file_path):
                results.append(self.process_file(file_path))
            else:
                results.append(
                    ProcessResult(
                        file_path=file_path,
                        status=ProcessingStatus.SKIPPED,
                        error_message="File type not supported by this processor",
                    )
                )
        return results
