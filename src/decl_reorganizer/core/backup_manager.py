"""
Backup sessions for files rewritten by the reorganizer
"""

import json
import logging
import shutil
import tarfile
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

SESSION_PREFIX = "session_"
METADATA_FILE = "session_metadata.json"


@dataclass
class BackupSession:
    """Files saved before one reorganize run"""

    session_id: str
    timestamp: str
    directory: Path
    files_backed_up: list[str] = field(default_factory=list)
    total_size: int = 0
    compressed: bool = False


class BackupManager:
    """Keeps copies of files before they are rewritten"""

    def __init__(
        self,
        backup_dir: str = ".backups",
        compression: bool = False,
        keep_sessions: int = 10,
    ):
        """
        Args:
            backup_dir: Directory holding all sessions
            compression: Archive finalized sessions as tar.gz
            keep_sessions: Number of most recent sessions to keep
        """
        self.backup_dir = Path(backup_dir)
        self.compression = compression
        self.keep_sessions = keep_sessions
        self.current_session: BackupSession | None = None
        self.backup_dir.mkdir(parents=True, exist_ok=True)

    def start_session(self, description: str | None = None) -> Path:
        """Open a new session directory"""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        session_id = f"{SESSION_PREFIX}{timestamp}"
        if description:
            session_id = f"{session_id}_{description}"
        directory = self.backup_dir / session_id
        directory.mkdir(parents=True, exist_ok=True)
        self.current_session = BackupSession(
            session_id=session_id, timestamp=timestamp, directory=directory
        )
        logger.info(f"Started backup session: {session_id}")
        return directory

    def backup_file(self, file_path: Path) -> Path | None:
        """Copy a file into the current session, opening one if needed"""
        if not self.current_session:
            self.start_session()

        if not file_path.exists():
            logger.warning(f"File does not exist: {file_path}")
            return None

        backup_path = self.current_session.directory / self._relative(file_path)
        try:
            backup_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(file_path, backup_path)
        except OSError as e:
            logger.error(f"Error backing up {file_path}: {e}")
            return None

        self.current_session.files_backed_up.append(str(file_path))
        self.current_session.total_size += file_path.stat().st_size
        logger.debug(f"Backed up: {file_path} -> {backup_path}")
        return backup_path

    def finalize_session(self) -> Path | None:
        """Write session metadata, compress if configured, prune old sessions"""
        if not self.current_session:
            logger.warning("No active backup session")
            return None

        session = self.current_session
        with open(session.directory / METADATA_FILE, "w") as f:
            json.dump(asdict(session), f, indent=2, default=str)

        result = session.directory
        if self.compression:
            archive_path = self.backup_dir / f"{session.session_id}.tar.gz"
            with tarfile.open(archive_path, "w:gz") as tar:
                tar.add(session.directory, arcname=session.session_id)
            shutil.rmtree(session.directory)
            session.compressed = True
            result = archive_path
            logger.info(f"Compressed backup session to {archive_path}")

        self.cleanup_old_sessions()
        logger.info(f"Finalized backup session: {session.session_id}")
        self.current_session = None
        return result

    def list_sessions(self) -> list[dict[str, Any]]:
        """All sessions, most recent first"""
        sessions = []
        for entry in self._session_entries():
            if entry.is_dir():
                metadata_file = entry / METADATA_FILE
                if metadata_file.exists():
                    with open(metadata_file, "r") as f:
                        sessions.append(json.load(f))
                    continue
                sessions.append({"session_id": entry.name, "directory": str(entry)})
            else:
                sessions.append(
                    {
                        "session_id": entry.name.removesuffix(".tar.gz"),
                        "archive": str(entry),
                        "compressed": True,
                    }
                )
            sessions[-1].setdefault(
                "timestamp",
                datetime.fromtimestamp(entry.stat().st_mtime).isoformat(),
            )

        return sorted(sessions, key=lambda s: s.get("timestamp", ""), reverse=True)

    def restore_session(self, session_id: str) -> bool:
        """Copy every file of a session back to its original location"""
        session_path = self.backup_dir / session_id
        archive_path = self.backup_dir / f"{session_id}.tar.gz"
        extracted = False

        try:
            if archive_path.exists() and not session_path.exists():
                with tarfile.open(archive_path, "r:gz") as tar:
                    tar.extractall(self.backup_dir, filter="data")
                extracted = True

            if not session_path.exists():
                logger.error(f"Backup session not found: {session_id}")
                return False

            metadata_file = session_path / METADATA_FILE
            if not metadata_file.exists():
                logger.error(f"Backup session has no metadata: {session_id}")
                return False

            with open(metadata_file, "r") as f:
                metadata = json.load(f)

            for file_name in metadata.get("files_backed_up", []):
                original = Path(file_name)
                backup = session_path / self._relative(original)
                if backup.exists():
                    original.parent.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(backup, original)
                    logger.info(f"Restored: {original}")
            return True

        except (OSError, tarfile.TarError, json.JSONDecodeError) as e:
            logger.error(f"Error restoring session {session_id}: {e}")
            return False

        finally:
            if extracted and session_path.exists():
                shutil.rmtree(session_path)

    def cleanup_old_sessions(self) -> None:
        """Remove sessions beyond the keep_sessions most recent ones"""
        sessions = sorted(
            self._session_entries(), key=lambda p: p.stat().st_mtime, reverse=True
        )
        for entry in sessions[self.keep_sessions :]:
            if entry.is_dir():
                shutil.rmtree(entry)
            else:
                entry.unlink()
            logger.debug(f"Removed old backup: {entry}")

    def _session_entries(self) -> list[Path]:
        return [
            entry
            for entry in self.backup_dir.iterdir()
            if entry.name.startswith(SESSION_PREFIX)
            and (entry.is_dir() or entry.name.endswith(".tar.gz"))
        ]

    @staticmethod
    def _relative(file_path: Path) -> Path:
        """Path of a file inside a session directory"""
        if file_path.is_absolute():
            return Path(*file_path.parts[1:])
        return file_path
