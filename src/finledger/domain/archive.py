"""Two-phase archiving of imported statement files."""

import enum
import logging
import re
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from finledger.domain.entities import ArchiveFile, DetectedFile
from finledger.domain.errors import ValidationError

logger = logging.getLogger(__name__)


class ArchiveState(enum.Enum):
    PENDING = "pending"
    PREPARED = "prepared"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class ArchiveOperation:
    file: ArchiveFile
    completed: bool = False


def slugify(value: str, max_len: int) -> str:
    """Lower-case, collapse non-alphanumerics to '-', trim and truncate."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug[:max_len].rstrip("-")


class ArchiveManager:
    """Moves imported files into a dated archive folder.

    ``prepare_archive`` only plans the moves; ``commit_archive`` performs
    them after the ledger has been written. If a later step fails,
    ``rollback_archive`` moves completed files back to the inbox.

    States: PENDING -> PREPARED -> COMMITTED, and PREPARED or COMMITTED ->
    ROLLED_BACK. ``reset`` returns to PENDING.
    """

    def __init__(self):
        self.state = ArchiveState.PENDING
        self.target_dir: Optional[Path] = None
        self._operations: list[ArchiveOperation] = []

    def prepare_archive(
        self, files: list[DetectedFile], archive_root: Path, now: Optional[datetime] = None
    ) -> list[ArchiveFile]:
        """Create ``<archive_root>/<YYYY-MM-DD>/`` and plan target names.

        Args:
            files: Files that were parsed successfully
            archive_root: Archive root directory
            now: Timestamp used for folder and file names (defaults to now)

        Returns:
            Planned moves, in input order

        Raises:
            ValidationError: If the manager is not PENDING
        """
        if self.state is not ArchiveState.PENDING:
            raise ValidationError(f"Cannot prepare archive in state {self.state.value}")

        self.state = ArchiveState.PREPARED
        if not files:
            return []

        now = now or datetime.now()
        timestamp = now.strftime("%Y%m%d-%H%M%S")
        self.target_dir = Path(archive_root).resolve() / now.strftime("%Y-%m-%d")
        self.target_dir.mkdir(parents=True, exist_ok=True)

        used_names: set[str] = set()
        planned: list[ArchiveFile] = []

        for index, file in enumerate(files, start=1):
            ext = file.path.suffix.lower()
            provider_slug = slugify(file.provider, 16) or "provider"
            account_slug = slugify(file.chart_account_id.replace(":", "-"), 40) or "account"
            name_slug = slugify(file.path.stem, 40) or "file"
            prefix = f"{timestamp}_{provider_slug}_{account_slug}_{index:02d}_{name_slug}"

            target_name = f"{prefix}{ext}"
            counter = 2
            while target_name in used_names or (self.target_dir / target_name).exists():
                target_name = f"{prefix}-{counter}{ext}"
                counter += 1
            used_names.add(target_name)

            archive_file = ArchiveFile(
                original_path=file.path,
                archive_path=self.target_dir / target_name,
                provider=file.provider,
                chart_account_id=file.chart_account_id,
            )
            self._operations.append(ArchiveOperation(archive_file))
            planned.append(archive_file)

        return planned

    def commit_archive(self) -> list[str]:
        """Move every planned file; calling again does not move anything twice.

        Returns:
            Archive paths of all moved files

        Raises:
            ValidationError: If nothing was prepared
            OSError: If a move fails; files moved so far stay moved
        """
        if self.state is ArchiveState.COMMITTED:
            return self.archived_paths()
        if self.state is not ArchiveState.PREPARED:
            raise ValidationError(f"Cannot commit archive in state {self.state.value}")

        for op in self._operations:
            if op.completed:
                continue
            shutil.move(str(op.file.original_path), str(op.file.archive_path))
            op.completed = True

        self.state = ArchiveState.COMMITTED
        logger.info("Archived %d file(s) to %s", len(self._operations), self.target_dir)
        return self.archived_paths()

    def rollback_archive(self) -> None:
        """Move completed files back. Failures are logged, never raised."""
        for op in self._operations:
            if not op.completed:
                continue
            try:
                shutil.move(str(op.file.archive_path), str(op.file.original_path))
                op.completed = False
            except OSError as e:
                logger.warning(
                    "Could not restore %s from %s: %s", op.file.original_path, op.file.archive_path, e
                )
        self.state = ArchiveState.ROLLED_BACK

    def archived_paths(self) -> list[str]:
        return [str(op.file.archive_path) for op in self._operations if op.completed]

    def has_archived_files(self) -> bool:
        return any(op.completed for op in self._operations)

    def reset(self) -> None:
        self._operations = []
        self.target_dir = None
        self.state = ArchiveState.PENDING
